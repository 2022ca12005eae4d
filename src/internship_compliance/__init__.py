"""Convenience exports for the monthly cycle and compliance engine."""

from .compliance import classify_tier, compute_compliance
from .config import (
    DEFAULT_CONFIG,
    ConfigValidationError,
    CycleConfig,
    InvalidSpanError,
    load_config,
    validate_config,
    validate_span,
)
from .expectations import ExpectedCounts, current_cycle, expected_counts, next_due_date
from .models import (
    ComplianceInput,
    ComplianceResult,
    ComplianceTier,
    CountedMonth,
    ExpectedObligation,
    InternshipSpan,
    ObligationKind,
    ObligationStatus,
    ReportFact,
    ReportFactStatus,
    ReportStatus,
    VisitFact,
    VisitStatus,
)
from .month_cycle import build_obligations, due_dates_for, partition_all_months, partition_months
from .status import classify, classify_report, classify_visit

__all__ = [
    "DEFAULT_CONFIG",
    "ComplianceInput",
    "ComplianceResult",
    "ComplianceTier",
    "ConfigValidationError",
    "CountedMonth",
    "CycleConfig",
    "ExpectedCounts",
    "ExpectedObligation",
    "InternshipSpan",
    "InvalidSpanError",
    "ObligationKind",
    "ObligationStatus",
    "ReportFact",
    "ReportFactStatus",
    "ReportStatus",
    "VisitFact",
    "VisitStatus",
    "build_obligations",
    "classify",
    "classify_report",
    "classify_tier",
    "classify_visit",
    "compute_compliance",
    "current_cycle",
    "due_dates_for",
    "expected_counts",
    "load_config",
    "next_due_date",
    "partition_all_months",
    "partition_months",
    "validate_config",
    "validate_span",
]
