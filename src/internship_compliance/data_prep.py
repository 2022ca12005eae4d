# src/internship_compliance/data_prep.py
"""
Read-only ingestion of internship, report and visit exports.

The portal's document store is exported to CSV; this module normalizes those
tables and hands the engine plain records keyed by (year, month).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable

import pandas as pd

from . import config
from .models import InternshipSpan, ReportFact, ReportFactStatus, VisitFact

ACTIVE_STATUSES = {"active", "approved", "ongoing", "in_progress"}


@dataclass(frozen=True)
class RawData:
    """Cleaned internships plus optional report and visit logs."""

    internships: pd.DataFrame
    reports: pd.DataFrame | None
    visits: pd.DataFrame | None

    def student_ids(self) -> list[str]:
        return list(self.internships["student_id"])

    def span_for(self, student_id: str) -> InternshipSpan | None:
        rows = self.internships[self.internships["student_id"] == student_id]
        if rows.empty:
            return None
        row = rows.iloc[0]
        return InternshipSpan(start_date=row["start_date"], end_date=row["end_date"])

    def report_facts_for(self, student_id: str) -> dict[tuple[int, int], ReportFact]:
        if self.reports is None:
            return {}
        rows = self.reports[self.reports["student_id"] == student_id]
        facts: dict[tuple[int, int], ReportFact] = {}
        for row in rows.itertuples(index=False):
            submitted_at = None if pd.isna(row.submitted_at) else row.submitted_at.to_pydatetime()
            key = (int(row.year), int(row.month))
            fact = ReportFact(
                year=key[0],
                month=key[1],
                status=ReportFactStatus(row.status),
                submitted_at=submitted_at,
            )
            existing = facts.get(key)
            if existing is None or _report_precedence(fact) < _report_precedence(existing):
                facts[key] = fact
        return facts

    def visit_facts_for(self, student_id: str) -> dict[tuple[int, int], VisitFact]:
        if self.visits is None:
            return {}
        rows = self.visits[self.visits["student_id"] == student_id]
        facts: dict[tuple[int, int], VisitFact] = {}
        for row in rows.itertuples(index=False):
            completed_at = None if pd.isna(row.completed_at) else row.completed_at.to_pydatetime()
            key = (int(row.year), int(row.month))
            existing = facts.get(key)
            # keep the earliest completed visit of the month
            if existing is None or (
                completed_at is not None
                and (existing.completed_at is None or completed_at < existing.completed_at)
            ):
                facts[key] = VisitFact(year=key[0], month=key[1], completed_at=completed_at)
        return facts


def normalize_report_status(status: str | float | None) -> str:
    """Collapse legacy report statuses into DRAFT / APPROVED."""
    if status is None or (isinstance(status, float) and pd.isna(status)):
        return ReportFactStatus.DRAFT.value
    text = str(status).strip().upper()
    if text in {"APPROVED", "SUBMITTED", "UNDER_REVIEW", "REVISION_REQUIRED", "REJECTED"}:
        return ReportFactStatus.APPROVED.value
    return ReportFactStatus.DRAFT.value


def load_raw_data(raw_dir: Path | None = None) -> RawData:
    """
    Load Internships.csv (mandatory) plus Reports.csv and Visits.csv (optional).

    Parameters
    ----------
    raw_dir:
        Optional override for the raw directory. Defaults to config.RAW_DIR.
    """

    base_dir = Path(raw_dir) if raw_dir else Path(config.RAW_DIR)
    if not base_dir.exists():
        raise FileNotFoundError(f"Raw data directory not found: {base_dir}")

    internships_path = base_dir / "Internships.csv"
    if not internships_path.exists():
        raise FileNotFoundError(
            f"Required file Internships.csv not found in {internships_path.parent}"
        )

    internships = _load_internships(internships_path)

    reports_path = base_dir / "Reports.csv"
    reports = _load_reports(reports_path) if reports_path.exists() else None

    visits_path = base_dir / "Visits.csv"
    visits = _load_visits(visits_path) if visits_path.exists() else None

    return RawData(internships=internships, reports=reports, visits=visits)


def ensure_directories() -> None:
    """Create the output directories if they do not already exist."""

    for path in (config.PROCESSED_DIR, config.REPORTS_DIR):
        Path(path).mkdir(parents=True, exist_ok=True)


# ---------------------------------------------------------------------------
# Internal helpers


def _to_snake_case(name: str) -> str:
    return (
        name.replace("-", "_")
        .replace(" ", "_")
        .replace("/", "_")
        .replace("__", "_")
        .strip()
        .lower()
    )


def _apply_aliases(df: pd.DataFrame, aliases: dict[str, Iterable[str]]) -> pd.DataFrame:
    df = df.copy()
    df.columns = pd.Index([_to_snake_case(col) for col in df.columns])
    for target, candidates in aliases.items():
        if target in df.columns:
            continue
        for candidate in candidates:
            if candidate in df.columns:
                df = df.rename(columns={candidate: target})
                break
    return df


def _require(df: pd.DataFrame, required: set[str], filename: str) -> None:
    missing = required.difference(df.columns)
    if missing:
        raise ValueError(
            f"{filename} is missing required columns: {sorted(missing)}. "
            f"Available columns: {list(df.columns)}"
        )


def _to_flag(series: pd.Series) -> pd.Series:
    text = series.fillna("").astype(str).str.strip().str.lower()
    return text.isin({"1", "true", "yes", "y", "uploaded", "assigned"})


def _report_precedence(fact: ReportFact) -> tuple[int, datetime]:
    """Several rows for one month: earliest submission, then APPROVED, then DRAFT."""
    if fact.submitted_at is not None:
        return (0, fact.submitted_at)
    if fact.status == ReportFactStatus.APPROVED:
        return (1, datetime.max)
    return (2, datetime.max)


def _to_timestamp(series: pd.Series) -> pd.Series:
    """Parse export timestamps; offsets are converted to UTC and dropped."""
    return pd.to_datetime(series, errors="coerce", utc=True, format="mixed").dt.tz_convert(None)


def _split_month(df: pd.DataFrame, fallback_col: str) -> pd.DataFrame:
    """Fill year/month columns from a `YYYY-MM` column or from a timestamp."""
    if "year" in df.columns and "month" in df.columns:
        df["year"] = pd.to_numeric(df["year"], errors="coerce")
        df["month"] = pd.to_numeric(df["month"], errors="coerce")
    elif "report_month" in df.columns:
        period = pd.to_datetime(df["report_month"], errors="coerce")
        df["year"] = period.dt.year
        df["month"] = period.dt.month
    else:
        df["year"] = df[fallback_col].dt.year
        df["month"] = df[fallback_col].dt.month
    df = df.dropna(subset=["year", "month"]).copy()
    df["year"] = df["year"].astype(int)
    df["month"] = df["month"].astype(int)
    return df[df["month"].between(1, 12)]


def _load_internships(path: Path) -> pd.DataFrame:
    df = _apply_aliases(
        pd.read_csv(path),
        {
            "student_id": ("studentid", "student", "roll_number"),
            "institution_id": ("institutionid", "institution", "college_id"),
            "start_date": ("startdate", "internship_start", "joining_date"),
            "end_date": ("enddate", "internship_end", "completion_date"),
            "mentor_assigned": ("has_mentor", "mentor_active", "mentor"),
            "joining_letter_uploaded": ("joining_letter", "joining_letter_url"),
            "status": ("internship_status", "student_status"),
        },
    )
    _require(df, {"student_id", "institution_id", "start_date", "end_date"}, "Internships.csv")

    df["student_id"] = df["student_id"].astype(str)
    df["institution_id"] = df["institution_id"].astype(str)
    df["start_date"] = pd.to_datetime(df["start_date"], errors="coerce").dt.date
    df["end_date"] = pd.to_datetime(df["end_date"], errors="coerce").dt.date
    df = df.dropna(subset=["start_date", "end_date"]).copy()

    if "mentor_id" in df.columns and "mentor_assigned" not in df.columns:
        df["mentor_assigned"] = df["mentor_id"].notna()
    elif "mentor_assigned" in df.columns:
        df["mentor_assigned"] = _to_flag(df["mentor_assigned"])
    else:
        df["mentor_assigned"] = False

    if "joining_letter_uploaded" in df.columns:
        df["joining_letter_uploaded"] = _to_flag(df["joining_letter_uploaded"])
    else:
        df["joining_letter_uploaded"] = False

    if "status" in df.columns:
        df["is_active"] = df["status"].fillna("").astype(str).str.strip().str.lower().isin(
            ACTIVE_STATUSES
        )
    else:
        df["is_active"] = True

    # one active internship per student
    df = df.sort_values(["student_id", "start_date"]).drop_duplicates("student_id", keep="last")
    return df[
        [
            "student_id",
            "institution_id",
            "start_date",
            "end_date",
            "mentor_assigned",
            "joining_letter_uploaded",
            "is_active",
        ]
    ].reset_index(drop=True)


def _load_reports(path: Path) -> pd.DataFrame:
    df = _apply_aliases(
        pd.read_csv(path),
        {
            "student_id": ("studentid", "student"),
            "submitted_at": ("submittedat", "submission_date", "submitted_on"),
            "status": ("report_status",),
        },
    )
    _require(df, {"student_id"}, "Reports.csv")

    df["student_id"] = df["student_id"].astype(str)
    if "submitted_at" in df.columns:
        df["submitted_at"] = _to_timestamp(df["submitted_at"])
    else:
        df["submitted_at"] = pd.NaT
    if "status" in df.columns:
        df["status"] = df["status"].apply(normalize_report_status)
    else:
        df["status"] = ReportFactStatus.DRAFT.value
    df = _split_month(df, "submitted_at")
    return df[["student_id", "year", "month", "status", "submitted_at"]].reset_index(drop=True)


def _load_visits(path: Path) -> pd.DataFrame:
    df = _apply_aliases(
        pd.read_csv(path),
        {
            "student_id": ("studentid", "student"),
            "completed_at": ("completedat", "visit_date", "visited_on"),
        },
    )
    _require(df, {"student_id"}, "Visits.csv")

    df["student_id"] = df["student_id"].astype(str)
    if "completed_at" in df.columns:
        df["completed_at"] = _to_timestamp(df["completed_at"])
    else:
        df["completed_at"] = pd.NaT
    df = _split_month(df, "completed_at")
    return df[["student_id", "year", "month", "completed_at"]].reset_index(drop=True)
