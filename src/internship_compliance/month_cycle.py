"""
Month partitioning and due-date calculation.

A span is walked one calendar month at a time. Boundary months only count when
the student was active there for more than `min_days_for_inclusion` days; every
counted month then carries one report obligation and one visit obligation.
"""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Iterable

from .config import DEFAULT_CONFIG, CycleConfig
from .models import CountedMonth, ExpectedObligation, InternshipSpan

logger = logging.getLogger(__name__)

END_OF_DAY = time(23, 59, 59, 999999)


@dataclass(frozen=True)
class MonthPartition:
    months: list[CountedMonth]
    included: list[CountedMonth]
    excluded: list[CountedMonth]

    @property
    def total_expected(self) -> int:
        return len(self.included)


def last_day_of_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, END_OF_DAY)


def _next_month(year: int, month: int) -> tuple[int, int]:
    if month == 12:
        return year + 1, 1
    return year, month + 1


def _walk_months(span: InternshipSpan, max_months: int) -> Iterable[tuple[int, int]]:
    year, month = span.start_date.year, span.start_date.month
    last = (span.end_date.year, span.end_date.month)
    for _ in range(max_months):
        yield year, month
        if (year, month) == last:
            return
        year, month = _next_month(year, month)
    logger.warning(
        "Span %s..%s touches more than %d months; truncated",
        span.start_date,
        span.end_date,
        max_months,
    )


def partition_all_months(span: InternshipSpan, cfg: CycleConfig = DEFAULT_CONFIG) -> MonthPartition:
    """Every touched month of the span, split into included and excluded months."""
    if span.end_date < span.start_date:
        return MonthPartition(months=[], included=[], excluded=[])

    touched = list(_walk_months(span, cfg.max_internship_months))
    first_key = touched[0]
    # a truncated walk ends before the span does
    last_key = touched[-1]

    months: list[CountedMonth] = []
    for year, month in touched:
        month_start = date(year, month, 1)
        month_end = date(year, month, last_day_of_month(year, month))
        active_start = max(span.start_date, month_start)
        active_end = min(span.end_date, month_end)
        active_days = (active_end - active_start).days + 1

        months.append(
            CountedMonth(
                year=year,
                month=month,
                active_days=active_days,
                is_first=(year, month) == first_key,
                is_last=(year, month) == last_key,
                is_included=active_days > cfg.min_days_for_inclusion,
            )
        )

    return MonthPartition(
        months=months,
        included=[m for m in months if m.is_included],
        excluded=[m for m in months if not m.is_included],
    )


def partition_months(span: InternshipSpan, cfg: CycleConfig = DEFAULT_CONFIG) -> list[CountedMonth]:
    """Counted months of a span in ascending order; index + 1 is the report number."""
    return partition_all_months(span, cfg).included


def due_dates_for(counted_month: CountedMonth, cfg: CycleConfig = DEFAULT_CONFIG) -> ExpectedObligation:
    year, month = counted_month.year, counted_month.month

    next_year, next_month = _next_month(year, month)
    report_due = end_of_day(date(next_year, next_month, cfg.report_due_day))

    if cfg.visit_due_on_month_end:
        visit_day = last_day_of_month(year, month)
    else:
        visit_day = cfg.visit_due_day
    visit_due = end_of_day(date(year, month, visit_day))

    return ExpectedObligation(
        year=year,
        month=month,
        report_due_date=report_due,
        visit_due_date=visit_due,
    )


def build_obligations(
    months: Iterable[CountedMonth], cfg: CycleConfig = DEFAULT_CONFIG
) -> list[ExpectedObligation]:
    return [due_dates_for(m, cfg) for m in months]


def format_report_name(month: int, year: int | None = None) -> str:
    """E.g. 'January 2025 Report'."""
    if month < 1 or month > 12:
        raise ValueError(f"Invalid month number: {month}. Must be 1-12.")
    name = calendar.month_name[month]
    return f"{name} {year} Report" if year else f"{name} Report"


def is_date_in_span(day: date, span: InternshipSpan) -> bool:
    if isinstance(day, datetime):
        day = day.date()
    return span.start_date <= day <= span.end_date


def find_month(months: Iterable[CountedMonth], year: int, month: int) -> CountedMonth | None:
    for counted in months:
        if counted.key == (year, month):
            return counted
    return None
