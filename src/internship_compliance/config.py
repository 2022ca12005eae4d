"""
Configuration for the monthly cycle and compliance engine.

Module-level constants hold the documented defaults. `CycleConfig` bundles the
overridable thresholds into one immutable object that is loaded once per
process and passed explicitly into every engine call.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Literal, Mapping, Optional

from pydantic import Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import InternshipSpan

# === Core Directories ===
RAW_DIR = Path("data/raw")
PROCESSED_DIR = Path("data/processed")
REPORTS_DIR = Path("reports/compliance")

# === Month Inclusion ===
MIN_DAYS_FOR_INCLUSION = 10  # boundary month counts only with MORE active days than this

# === Due Dates ===
REPORT_DUE_DAY = 5  # day of the following month
VISIT_DUE_ON_MONTH_END = True
VISIT_DUE_DAY = 28  # only used when VISIT_DUE_ON_MONTH_END is False
VISIT_GRACE_DAYS = 0  # visits have no grace period
MISSING_REPORT_GRACE_DAYS = 5

# === Internship Limits ===
MIN_INTERNSHIP_WEEKS = 16
MAX_INTERNSHIP_MONTHS = 24

# === Notifications ===
REMINDER_DAYS_BEFORE_DEADLINE = 5

# === Compliance Tiers ===
EXCELLENT_MIN = 90
GOOD_MIN = 70
WARNING_MIN = 50
CRITICAL_MIN = 30
LOW_COMPLIANCE_THRESHOLD = 50

# === Scheduling ===
AS_OF_OVERRIDE: Optional[str] = None  # YYYY-MM-DD or None

CONFIG_ENV_VAR = "INTERNSHIP_CYCLE_CONFIG"

STATUS_LABELS = {
    "REPORT_NOT_STARTED": "Not Started",
    "REPORT_DRAFT": "Draft",
    "REPORT_APPROVED": "Approved",
    "REPORT_OVERDUE": "Overdue",
    "REPORT_OVERDUE_DRAFT": "Overdue (Draft)",
    "REPORT_OVERDUE_GRACE": "Overdue (Grace Period)",
    "REPORT_SUBMITTED_LATE": "Submitted Late",
    "VISIT_UPCOMING": "Upcoming",
    "VISIT_PENDING": "Pending",
    "VISIT_COMPLETED": "Completed",
    "VISIT_COMPLETED_LATE": "Completed Late",
    "VISIT_OVERDUE": "Overdue",
    "DUE_SOON": "Due Soon",
}


class ConfigValidationError(ValueError):
    """Raised when a threshold is outside its documented range."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("Invalid cycle configuration: " + "; ".join(self.errors))

    @classmethod
    def from_validation_error(cls, exc: ValidationError) -> "ConfigValidationError":
        errors = []
        for error in exc.errors():
            field = ".".join(str(part) for part in error["loc"]) or "config"
            errors.append(f"{field}: {error['msg']}")
        return cls(errors)


class InvalidSpanError(ValueError):
    """Raised by callers that reject an internship span before it reaches the engine."""


class CycleConfig(BaseSettings):
    """
    Overridable thresholds for one calculation run.

    Each field can also be set through an `INTERNSHIP_CYCLE_<FIELD>` environment
    variable. Out-of-range values are rejected, never clamped.
    """

    min_days_for_inclusion: int = Field(default=MIN_DAYS_FOR_INCLUSION, ge=1, le=28)
    report_due_day: int = Field(default=REPORT_DUE_DAY, ge=1, le=28)
    visit_due_on_month_end: bool = VISIT_DUE_ON_MONTH_END
    visit_due_day: int = Field(default=VISIT_DUE_DAY, ge=1, le=28)
    visit_grace_days: Literal[0] = VISIT_GRACE_DAYS
    missing_report_grace_days: int = Field(default=MISSING_REPORT_GRACE_DAYS, ge=0)
    min_internship_weeks: int = Field(default=MIN_INTERNSHIP_WEEKS, ge=1)
    max_internship_months: int = Field(default=MAX_INTERNSHIP_MONTHS, ge=1, le=60)
    reminder_days_before_deadline: int = Field(default=REMINDER_DAYS_BEFORE_DEADLINE, ge=0)
    excellent_min: int = Field(default=EXCELLENT_MIN, ge=0, le=100)
    good_min: int = Field(default=GOOD_MIN, ge=0, le=100)
    warning_min: int = Field(default=WARNING_MIN, ge=0, le=100)
    critical_min: int = Field(default=CRITICAL_MIN, ge=0, le=100)
    low_compliance_threshold: int = Field(default=LOW_COMPLIANCE_THRESHOLD, ge=0, le=100)

    model_config = SettingsConfigDict(
        env_prefix="INTERNSHIP_CYCLE_",
        extra="forbid",
        frozen=True,
    )

    @model_validator(mode="after")
    def check_tier_order(self) -> "CycleConfig":
        tiers = [self.excellent_min, self.good_min, self.warning_min, self.critical_min]
        if any(upper <= lower for upper, lower in zip(tiers, tiers[1:])):
            raise ValueError(
                "tier thresholds must be strictly descending: "
                "excellent_min > good_min > warning_min > critical_min"
            )
        return self

    def as_dict(self) -> dict[str, Any]:
        return self.model_dump()


def _build(values: Mapping[str, Any]) -> CycleConfig:
    try:
        return CycleConfig(**values)
    except ValidationError as exc:
        raise ConfigValidationError.from_validation_error(exc) from exc


DEFAULT_CONFIG = _build({})


def validate_config(cfg: CycleConfig | Mapping[str, Any]) -> CycleConfig:
    """
    Re-check a config built without validation (e.g. via `model_copy(update=...)`)
    or a plain mapping of field values. Raises ConfigValidationError listing every problem.
    """
    if isinstance(cfg, CycleConfig):
        _build(cfg.model_dump())
        return cfg
    return _build(cfg)


def load_config(
    path: str | Path | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> CycleConfig:
    """
    Build a validated CycleConfig.

    Values are layered: defaults, then `INTERNSHIP_CYCLE_<FIELD>` environment variables,
    then the JSON file at `path` (or the file named by INTERNSHIP_CYCLE_CONFIG), then
    `overrides`.
    """

    values: dict[str, Any] = {}

    source = path if path is not None else os.environ.get(CONFIG_ENV_VAR)
    if source:
        config_path = Path(source)
        if not config_path.exists():
            raise FileNotFoundError(f"Cycle configuration file not found: {config_path}")
        with open(config_path, "r") as f:
            file_values = json.load(f)
        if not isinstance(file_values, dict):
            raise ConfigValidationError([f"{config_path} must contain a JSON object"])
        values.update(file_values)

    if overrides:
        values.update(overrides)

    return _build(values)


def _touched_month_count(span: InternshipSpan) -> int:
    start, end = span.start_date, span.end_date
    return (end.year - start.year) * 12 + (end.month - start.month) + 1


def validate_span(span: InternshipSpan, cfg: CycleConfig = DEFAULT_CONFIG) -> InternshipSpan:
    """Caller-side precondition check used before a span is stored or computed."""
    if span.end_date < span.start_date:
        raise InvalidSpanError(
            f"Internship end date {span.end_date} is before start date {span.start_date}"
        )

    duration_days = (span.end_date - span.start_date).days + 1
    if duration_days < cfg.min_internship_weeks * 7:
        raise InvalidSpanError(
            f"Internship lasts {duration_days} days; minimum is "
            f"{cfg.min_internship_weeks} weeks"
        )

    if _touched_month_count(span) > cfg.max_internship_months:
        raise InvalidSpanError(
            f"Internship spans more than {cfg.max_internship_months} calendar months"
        )
    return span
