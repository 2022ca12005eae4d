"""
Plain records exchanged with the engine.

Everything here is immutable and serializable through `as_dict()`, so a calling
HTTP layer can hand the results straight to a JSON encoder.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass, fields
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional, Union


class ObligationKind(str, Enum):
    REPORT = "REPORT"
    VISIT = "VISIT"


class ReportFactStatus(str, Enum):
    """Status stored on a report record by the report subsystem."""

    DRAFT = "DRAFT"
    APPROVED = "APPROVED"


class ReportStatus(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    DRAFT = "DRAFT"
    APPROVED = "APPROVED"
    OVERDUE = "OVERDUE"


class VisitStatus(str, Enum):
    UPCOMING = "UPCOMING"
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    OVERDUE = "OVERDUE"


class ComplianceTier(str, Enum):
    EXCELLENT = "EXCELLENT"
    GOOD = "GOOD"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"
    INTERVENTION_REQUIRED = "INTERVENTION_REQUIRED"


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if hasattr(value, "as_dict"):
        return value.as_dict()
    return value


class _Serializable:
    def as_dict(self) -> dict[str, Any]:
        return {f.name: _plain(getattr(self, f.name)) for f in fields(self)}


@dataclass(frozen=True)
class InternshipSpan(_Serializable):
    """One student's active internship."""

    start_date: date
    end_date: date


@dataclass(frozen=True)
class CountedMonth(_Serializable):
    """A calendar month touched by a span, with the student's active days in it."""

    year: int
    month: int
    active_days: int
    is_first: bool
    is_last: bool
    is_included: bool = True

    @property
    def month_name(self) -> str:
        return calendar.month_name[self.month]

    @property
    def month_start(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def month_end(self) -> date:
        return date(self.year, self.month, calendar.monthrange(self.year, self.month)[1])

    @property
    def key(self) -> tuple[int, int]:
        return (self.year, self.month)


@dataclass(frozen=True)
class ExpectedObligation(_Serializable):
    year: int
    month: int
    report_due_date: datetime
    visit_due_date: datetime

    @property
    def key(self) -> tuple[int, int]:
        return (self.year, self.month)

    @property
    def month_start(self) -> date:
        return date(self.year, self.month, 1)


@dataclass(frozen=True)
class ReportFact(_Serializable):
    year: int
    month: int
    status: ReportFactStatus = ReportFactStatus.DRAFT
    submitted_at: Optional[datetime] = None


@dataclass(frozen=True)
class VisitFact(_Serializable):
    year: int
    month: int
    completed_at: Optional[datetime] = None


Fact = Union[ReportFact, VisitFact]


@dataclass(frozen=True)
class ObligationStatus(_Serializable):
    """Classification of one obligation at a point in time. Never stored by the engine."""

    kind: ObligationKind
    obligation: ExpectedObligation
    fact: Optional[Fact]
    status: Union[ReportStatus, VisitStatus]
    is_late: bool = False
    days_late: int = 0
    days_overdue: int = 0
    label: str = ""


@dataclass(frozen=True)
class ComplianceInput(_Serializable):
    """Institution-scoped snapshot supplied by the caller."""

    active_student_count: int
    students_with_active_mentor: int
    students_with_joining_letter_uploaded: int


@dataclass(frozen=True)
class ComplianceResult(_Serializable):
    mentor_rate: Optional[int]
    joining_letter_rate: Optional[int]
    score: Optional[int]
    tier: Optional[ComplianceTier]
