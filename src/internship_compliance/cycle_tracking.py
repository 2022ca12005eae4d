# src/internship_compliance/cycle_tracking.py
"""
Per-student report and visit cycle tracking.

Runs the monthly cycle engine for every internship in the raw exports and
rolls the results up into student-level and institution-level tables. The
engine is invoked once per student; nothing is cached between students.
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from datetime import date
from pathlib import Path

import numpy as np
import pandas as pd

from . import config
from .compliance import capped_rate
from .config import CycleConfig, load_config
from .data_prep import RawData, ensure_directories, load_raw_data
from .expectations import expected_counts
from .models import ObligationKind, ReportStatus, VisitStatus
from .month_cycle import build_obligations, format_report_name, partition_months
from .status import classify_report, classify_visit


@dataclass(frozen=True)
class CycleArtifacts:
    students: pd.DataFrame
    obligations: pd.DataFrame
    institutions: pd.DataFrame
    as_of: pd.Timestamp


def generate_cycle_snapshot(
    as_of: str | None = None,
    raw_dir: Path | None = None,
    cfg: CycleConfig | None = None,
    raw: RawData | None = None,
) -> CycleArtifacts:
    """
    Public entry point used by the CLI and the compliance scoring run.

    `raw` lets a caller that already loaded the exports skip reading them again.
    """

    cfg = cfg or load_config()
    ensure_directories()
    if raw is None:
        raw = load_raw_data(raw_dir)
    as_of_ts = resolve_as_of(as_of)

    obligations = build_obligation_table(raw, as_of_ts.date(), cfg)
    students = build_student_cycles(raw, as_of_ts.date(), cfg, obligations=obligations)
    institutions = institution_cycle_rates(students)

    _save_snapshot(students, obligations, institutions, as_of_ts)
    print(f"Cycle snapshot saved: {as_of_ts.date()} … students: {len(students)}")
    return CycleArtifacts(
        students=students, obligations=obligations, institutions=institutions, as_of=as_of_ts
    )


def resolve_as_of(as_of: str | None) -> pd.Timestamp:
    if as_of is not None:
        return pd.Timestamp(as_of).normalize()
    if config.AS_OF_OVERRIDE is not None:
        return pd.Timestamp(config.AS_OF_OVERRIDE).normalize()
    return pd.Timestamp.today().normalize()


def build_obligation_table(raw: RawData, as_of: date, cfg: CycleConfig) -> pd.DataFrame:
    """One row per student and counted month with both obligation statuses."""
    rows = []
    for student_id in raw.student_ids():
        span = raw.span_for(student_id)
        if span is None:
            continue
        months = partition_months(span, cfg)
        reports = raw.report_facts_for(student_id)
        visits = raw.visit_facts_for(student_id)

        for number, obligation in enumerate(build_obligations(months, cfg), start=1):
            report = classify_report(obligation, reports.get(obligation.key), as_of, cfg)
            visit = classify_visit(obligation, visits.get(obligation.key), as_of, cfg)
            rows.append(
                {
                    "student_id": student_id,
                    "report_number": number,
                    "report_name": format_report_name(obligation.month, obligation.year),
                    "year": obligation.year,
                    "month": obligation.month,
                    "report_due_date": obligation.report_due_date,
                    "visit_due_date": obligation.visit_due_date,
                    "report_status": report.status.value,
                    "report_label": report.label,
                    "is_late_submission": report.is_late,
                    "days_late": report.days_late,
                    "report_days_overdue": report.days_overdue,
                    "visit_status": visit.status.value,
                    "visit_label": visit.label,
                    "visit_is_late": visit.is_late,
                    "visit_days_overdue": visit.days_overdue,
                }
            )
    return pd.DataFrame(rows, columns=_obligation_columns())


def build_student_cycles(
    raw: RawData,
    as_of: date,
    cfg: CycleConfig,
    obligations: pd.DataFrame | None = None,
) -> pd.DataFrame:
    """Expected/so-far counts and completion rates per student."""
    if obligations is None:
        obligations = build_obligation_table(raw, as_of, cfg)

    rows = []
    for student_id in raw.student_ids():
        span = raw.span_for(student_id)
        if span is None:
            continue
        months = partition_months(span, cfg)
        report_counts = expected_counts(months, as_of, ObligationKind.REPORT, cfg)
        visit_counts = expected_counts(months, as_of, ObligationKind.VISIT, cfg)
        rows.append(
            {
                "student_id": student_id,
                "reports_expected_total": report_counts.expected_total,
                "reports_expected_so_far": report_counts.expected_so_far,
                "visits_expected_total": visit_counts.expected_total,
                "visits_expected_so_far": visit_counts.expected_so_far,
            }
        )
    students = pd.DataFrame(rows, columns=_student_count_columns())

    if obligations.empty:
        tallies = pd.DataFrame(columns=["student_id"] + _tally_columns())
    else:
        flags = obligations.assign(
            reports_submitted=obligations["report_status"].eq(ReportStatus.APPROVED.value),
            reports_overdue=obligations["report_status"].eq(ReportStatus.OVERDUE.value),
            late_submissions=obligations["is_late_submission"],
            visits_completed=obligations["visit_status"].eq(VisitStatus.COMPLETED.value),
            visits_overdue=obligations["visit_status"].eq(VisitStatus.OVERDUE.value),
        )
        tallies = flags.groupby("student_id")[_tally_columns()].sum().astype(int).reset_index()

    students = students.merge(tallies, on="student_id", how="left")
    students[_tally_columns()] = students[_tally_columns()].fillna(0).astype(int)

    meta = raw.internships[["student_id", "institution_id", "start_date", "end_date"]]
    students = meta.merge(students, on="student_id", how="right")

    students["report_rate"] = [
        capped_rate(done, due)
        for done, due in zip(students["reports_submitted"], students["reports_expected_so_far"])
    ]
    students["visit_rate"] = [
        capped_rate(done, due)
        for done, due in zip(students["visits_completed"], students["visits_expected_so_far"])
    ]
    students["snapshot_as_of"] = pd.Timestamp(as_of)
    return students


def institution_cycle_rates(students: pd.DataFrame) -> pd.DataFrame:
    """Report and visit completion rates per institution, shown beside the compliance score."""
    if students.empty:
        return pd.DataFrame(columns=_institution_columns())

    grouped = students.groupby("institution_id")[
        [
            "reports_expected_so_far",
            "reports_submitted",
            "reports_overdue",
            "late_submissions",
            "visits_expected_so_far",
            "visits_completed",
            "visits_overdue",
        ]
    ].sum()
    grouped["students"] = students.groupby("institution_id")["student_id"].nunique()
    grouped = grouped.reset_index()

    grouped["report_rate"] = [
        capped_rate(done, due)
        for done, due in zip(grouped["reports_submitted"], grouped["reports_expected_so_far"])
    ]
    grouped["visit_rate"] = [
        capped_rate(done, due)
        for done, due in zip(grouped["visits_completed"], grouped["visits_expected_so_far"])
    ]
    grouped["missing_reports"] = np.maximum(
        0, grouped["reports_expected_so_far"] - grouped["reports_submitted"]
    )
    return grouped[_institution_columns()]


def _obligation_columns() -> list[str]:
    return [
        "student_id",
        "report_number",
        "report_name",
        "year",
        "month",
        "report_due_date",
        "visit_due_date",
        "report_status",
        "report_label",
        "is_late_submission",
        "days_late",
        "report_days_overdue",
        "visit_status",
        "visit_label",
        "visit_is_late",
        "visit_days_overdue",
    ]


def _student_count_columns() -> list[str]:
    return [
        "student_id",
        "reports_expected_total",
        "reports_expected_so_far",
        "visits_expected_total",
        "visits_expected_so_far",
    ]


def _tally_columns() -> list[str]:
    return [
        "reports_submitted",
        "reports_overdue",
        "late_submissions",
        "visits_completed",
        "visits_overdue",
    ]


def _institution_columns() -> list[str]:
    return [
        "institution_id",
        "students",
        "reports_expected_so_far",
        "reports_submitted",
        "reports_overdue",
        "missing_reports",
        "late_submissions",
        "report_rate",
        "visits_expected_so_far",
        "visits_completed",
        "visits_overdue",
        "visit_rate",
    ]


def _save_snapshot(
    students: pd.DataFrame,
    obligations: pd.DataFrame,
    institutions: pd.DataFrame,
    as_of: pd.Timestamp,
) -> None:
    date_str = as_of.date().isoformat()
    out_dir = Path(config.PROCESSED_DIR)
    students.to_csv(out_dir / f"student_cycles_{date_str}.csv", index=False)
    obligations.to_csv(out_dir / f"obligations_{date_str}.csv", index=False)
    institutions.to_csv(out_dir / f"institution_cycles_{date_str}.csv", index=False)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Build report/visit cycle tracking tables.")
    parser.add_argument(
        "--as_of",
        type=str,
        default=None,
        help="Optional snapshot date (YYYY-MM-DD). Defaults to today.",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Optional JSON file overriding cycle thresholds.",
    )
    args = parser.parse_args(argv)
    generate_cycle_snapshot(as_of=args.as_of, cfg=load_config(args.config))


if __name__ == "__main__":
    main()
