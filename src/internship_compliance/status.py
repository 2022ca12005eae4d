"""
Submission status classification for report and visit obligations.

`now` is always injected by the caller. A bare `date` means "at the end of that
day", so an obligation due today is not yet overdue.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Optional, Union

from .config import DEFAULT_CONFIG, STATUS_LABELS, CycleConfig
from .models import (
    ExpectedObligation,
    ObligationKind,
    ObligationStatus,
    ReportFact,
    ReportFactStatus,
    ReportStatus,
    VisitFact,
    VisitStatus,
)
from .month_cycle import end_of_day

logger = logging.getLogger(__name__)

Moment = Union[date, datetime]


def as_moment(value: Moment) -> datetime:
    if isinstance(value, datetime):
        return value
    return end_of_day(value)


def lateness(done_at: datetime, due: datetime) -> tuple[bool, int]:
    """(is_late, days_late); days_late is whole days elapsed since the due moment, floored."""
    if done_at <= due:
        return False, 0
    return True, (done_at - due) // timedelta(days=1)


def _days_overdue(now: datetime, due: datetime) -> int:
    if now <= due:
        return 0
    return (now - due) // timedelta(days=1)


def _due_soon(now: datetime, due: datetime, cfg: CycleConfig) -> bool:
    return now <= due and (due - now) <= timedelta(days=cfg.reminder_days_before_deadline)


def classify_report(
    obligation: ExpectedObligation,
    fact: Optional[ReportFact],
    now: Moment,
    cfg: CycleConfig = DEFAULT_CONFIG,
) -> ObligationStatus:
    now = as_moment(now)
    due = obligation.report_due_date

    def result(status: ReportStatus, label: str, **extra) -> ObligationStatus:
        return ObligationStatus(
            kind=ObligationKind.REPORT,
            obligation=obligation,
            fact=fact,
            status=status,
            label=label,
            **extra,
        )

    if fact is not None:
        # a submission timestamp outranks a leftover draft status
        if fact.submitted_at is not None:
            is_late, days_late = lateness(fact.submitted_at, due)
            label = STATUS_LABELS["REPORT_SUBMITTED_LATE"] if is_late else STATUS_LABELS["REPORT_APPROVED"]
            return result(ReportStatus.APPROVED, label, is_late=is_late, days_late=days_late)

        if fact.status == ReportFactStatus.APPROVED:
            return result(ReportStatus.APPROVED, STATUS_LABELS["REPORT_APPROVED"])

        if fact.status != ReportFactStatus.DRAFT:
            logger.warning("Unknown report status %r for %s-%02d", fact.status, fact.year, fact.month)

        if now > due:
            return result(
                ReportStatus.OVERDUE,
                STATUS_LABELS["REPORT_OVERDUE_DRAFT"],
                days_overdue=_days_overdue(now, due),
            )
        return result(ReportStatus.DRAFT, STATUS_LABELS["REPORT_DRAFT"])

    if now > due:
        days_overdue = _days_overdue(now, due)
        if now <= due + timedelta(days=cfg.missing_report_grace_days):
            label = STATUS_LABELS["REPORT_OVERDUE_GRACE"]
        else:
            label = STATUS_LABELS["REPORT_OVERDUE"]
        return result(ReportStatus.OVERDUE, label, days_overdue=days_overdue)

    label = STATUS_LABELS["DUE_SOON"] if _due_soon(now, due, cfg) else STATUS_LABELS["REPORT_NOT_STARTED"]
    return result(ReportStatus.NOT_STARTED, label)


def classify_visit(
    obligation: ExpectedObligation,
    fact: Optional[VisitFact],
    now: Moment,
    cfg: CycleConfig = DEFAULT_CONFIG,
) -> ObligationStatus:
    now = as_moment(now)
    due = obligation.visit_due_date

    def result(status: VisitStatus, label: str, **extra) -> ObligationStatus:
        return ObligationStatus(
            kind=ObligationKind.VISIT,
            obligation=obligation,
            fact=fact,
            status=status,
            label=label,
            **extra,
        )

    if fact is not None:
        if fact.completed_at is not None:
            is_late, days_late = lateness(fact.completed_at, due)
        else:
            is_late, days_late = False, 0
        label = STATUS_LABELS["VISIT_COMPLETED_LATE"] if is_late else STATUS_LABELS["VISIT_COMPLETED"]
        return result(VisitStatus.COMPLETED, label, is_late=is_late, days_late=days_late)

    if now < datetime.combine(obligation.month_start, datetime.min.time()):
        return result(VisitStatus.UPCOMING, STATUS_LABELS["VISIT_UPCOMING"])

    if now <= due:
        label = STATUS_LABELS["DUE_SOON"] if _due_soon(now, due, cfg) else STATUS_LABELS["VISIT_PENDING"]
        return result(VisitStatus.PENDING, label)

    return result(
        VisitStatus.OVERDUE,
        STATUS_LABELS["VISIT_OVERDUE"],
        days_overdue=_days_overdue(now, due),
    )


def classify(
    kind: ObligationKind,
    obligation: ExpectedObligation,
    fact: Optional[Union[ReportFact, VisitFact]],
    now: Moment,
    cfg: CycleConfig = DEFAULT_CONFIG,
) -> ObligationStatus:
    if kind == ObligationKind.REPORT:
        return classify_report(obligation, fact, now, cfg)
    return classify_visit(obligation, fact, now, cfg)
