# src/internship_compliance/compliance_scoring.py
"""
Compute institution compliance scores from internship exports.
Outputs:
  • compliance_<date>.csv      (all institutions)
  • intervention_<date>.csv    (institutions below the intervention threshold)
"""

from __future__ import annotations

import argparse
from pathlib import Path

import pandas as pd

from . import config
from .compliance import compute_compliance
from .config import CycleConfig, load_config
from .cycle_tracking import generate_cycle_snapshot, resolve_as_of
from .data_prep import RawData, load_raw_data
from .models import ComplianceInput, ComplianceTier


def build_compliance_inputs(raw: RawData) -> dict[str, ComplianceInput]:
    """Institution-scoped snapshots counted over active students only."""
    active = raw.internships[raw.internships["is_active"]]
    counts = raw.internships[["institution_id"]].drop_duplicates().set_index("institution_id")
    if not active.empty:
        per_institution = active.groupby("institution_id").agg(
            active_students=("student_id", "nunique"),
            with_mentor=("mentor_assigned", "sum"),
            with_letter=("joining_letter_uploaded", "sum"),
        )
        counts = counts.join(per_institution, how="left")
    counts = counts.reindex(columns=["active_students", "with_mentor", "with_letter"]).fillna(0)

    return {
        str(institution_id): ComplianceInput(
            active_student_count=int(row.active_students),
            students_with_active_mentor=int(row.with_mentor),
            students_with_joining_letter_uploaded=int(row.with_letter),
        )
        for institution_id, row in counts.iterrows()
    }


def compute_scores(raw: RawData, cfg: CycleConfig) -> pd.DataFrame:
    """Apply the shared two-factor formula to every institution."""
    rows = []
    for institution_id, snapshot in build_compliance_inputs(raw).items():
        result = compute_compliance(snapshot, cfg)
        score = result.score
        rows.append(
            {
                "institution_id": institution_id,
                "active_students": snapshot.active_student_count,
                "students_with_mentor": snapshot.students_with_active_mentor,
                "joining_letters_uploaded": snapshot.students_with_joining_letter_uploaded,
                "unassigned_students": max(
                    0, snapshot.active_student_count - snapshot.students_with_active_mentor
                ),
                "mentor_rate": result.mentor_rate,
                "joining_letter_rate": result.joining_letter_rate,
                "score": score,
                "tier": result.tier.value if result.tier else None,
                "requires_intervention": result.tier == ComplianceTier.INTERVENTION_REQUIRED,
                "low_compliance": score is not None and score < cfg.low_compliance_threshold,
            }
        )
    return pd.DataFrame(rows, columns=_score_columns())


def _score_columns() -> list[str]:
    return [
        "institution_id",
        "active_students",
        "students_with_mentor",
        "joining_letters_uploaded",
        "unassigned_students",
        "mentor_rate",
        "joining_letter_rate",
        "score",
        "tier",
        "requires_intervention",
        "low_compliance",
    ]


def intervention_issues(scored: pd.DataFrame, cycle_rates: pd.DataFrame | None = None) -> pd.DataFrame:
    """Institutions requiring intervention, with a readable list of issues each."""
    flagged = scored[scored["requires_intervention"].astype(bool)].copy()
    if cycle_rates is not None and not cycle_rates.empty:
        flagged = flagged.merge(
            cycle_rates[["institution_id", "missing_reports", "visits_completed"]],
            on="institution_id",
            how="left",
        )
    else:
        flagged["missing_reports"] = 0
        flagged["visits_completed"] = 0

    def issues(row: pd.Series) -> str:
        found = []
        if row["unassigned_students"] > 0:
            found.append(f"{int(row['unassigned_students'])} students without mentors")
        if pd.notna(row["visits_completed"]) and row["visits_completed"] == 0:
            found.append("No faculty visits recorded")
        if pd.notna(row["missing_reports"]) and row["missing_reports"] > 0:
            found.append(f"{int(row['missing_reports'])} missing reports")
        return "; ".join(found)

    flagged["issues"] = [issues(row) for _, row in flagged.iterrows()]
    return flagged.sort_values("score", ascending=True)


def run(as_of: str | None = None, raw_dir: Path | None = None, cfg: CycleConfig | None = None) -> None:
    cfg = cfg or load_config()
    as_of_date = resolve_as_of(as_of)

    raw = load_raw_data(raw_dir)
    scored = compute_scores(raw, cfg)
    cycles = generate_cycle_snapshot(as_of=str(as_of_date.date()), cfg=cfg, raw=raw)

    out_dir = Path(config.PROCESSED_DIR)
    out_dir.mkdir(parents=True, exist_ok=True)
    scores_path = out_dir / f"compliance_{as_of_date.date()}.csv"
    scored.to_csv(scores_path, index=False)

    reports_dir = Path(config.REPORTS_DIR)
    reports_dir.mkdir(parents=True, exist_ok=True)
    intervention_path = reports_dir / f"intervention_{as_of_date.date()}.csv"
    intervention_issues(scored, cycles.institutions).to_csv(intervention_path, index=False)

    print(f"Wrote: {scores_path}")
    print(f"Wrote: {intervention_path}")
    print(scored.head())


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Score institution compliance.")
    parser.add_argument("--as_of", type=str, default=None, help="Snapshot date (YYYY-MM-DD).")
    parser.add_argument("--config", type=str, default=None, help="JSON threshold overrides.")
    args = parser.parse_args(argv)
    run(as_of=args.as_of, cfg=load_config(args.config))


if __name__ == "__main__":
    main()
