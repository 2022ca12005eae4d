"""Expected-so-far and expected-total obligation counts for one student."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from .config import DEFAULT_CONFIG, CycleConfig
from .models import CountedMonth, ObligationKind
from .month_cycle import due_dates_for
from .status import Moment, as_moment


@dataclass(frozen=True)
class ExpectedCounts:
    expected_total: int
    expected_so_far: int

    def as_dict(self) -> dict[str, int]:
        return {"expected_total": self.expected_total, "expected_so_far": self.expected_so_far}


def _due(month: CountedMonth, kind: ObligationKind, cfg: CycleConfig) -> datetime:
    obligation = due_dates_for(month, cfg)
    if kind == ObligationKind.REPORT:
        return obligation.report_due_date
    return obligation.visit_due_date


def expected_counts(
    months: Iterable[CountedMonth],
    as_of: Moment,
    kind: ObligationKind = ObligationKind.REPORT,
    cfg: CycleConfig = DEFAULT_CONFIG,
) -> ExpectedCounts:
    """
    Count obligations over the whole internship and those already due by `as_of`.

    `months` is the output of partition_months, so excluded boundary months never
    contribute to either count.
    """
    months = list(months)
    cutoff = as_moment(as_of)
    so_far = sum(1 for m in months if _due(m, kind, cfg) <= cutoff)
    return ExpectedCounts(expected_total=len(months), expected_so_far=so_far)


def current_cycle(months: Iterable[CountedMonth], now: Moment) -> CountedMonth | None:
    """The counted month containing `now`, if any."""
    day = as_moment(now).date()
    for month in months:
        if month.month_start <= day <= month.month_end:
            return month
    return None


def next_due_date(
    months: Iterable[CountedMonth],
    now: Moment,
    kind: ObligationKind = ObligationKind.REPORT,
    cfg: CycleConfig = DEFAULT_CONFIG,
) -> datetime | None:
    """Earliest due date not yet passed, or None once every deadline is behind `now`."""
    moment = as_moment(now)
    for month in months:
        due = _due(month, kind, cfg)
        if due >= moment:
            return due
    return None
