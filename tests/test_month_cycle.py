from __future__ import annotations

from datetime import date, datetime

from internship_compliance.config import DEFAULT_CONFIG, CycleConfig
from internship_compliance.models import InternshipSpan
from internship_compliance.month_cycle import (
    build_obligations,
    due_dates_for,
    find_month,
    format_report_name,
    is_date_in_span,
    partition_all_months,
    partition_months,
)


def _keys(months) -> list[tuple[int, int]]:
    return [m.key for m in months]


def test_late_start_excludes_first_month() -> None:
    span = InternshipSpan(date(2025, 1, 22), date(2025, 5, 20))
    months = partition_months(span, DEFAULT_CONFIG)

    assert _keys(months) == [(2025, 2), (2025, 3), (2025, 4), (2025, 5)]
    partition = partition_all_months(span, DEFAULT_CONFIG)
    assert partition.total_expected == 4
    assert [(m.key, m.active_days) for m in partition.excluded] == [((2025, 1), 10)]


def test_early_end_excludes_last_month_and_sets_due_dates() -> None:
    span = InternshipSpan(date(2025, 1, 15), date(2025, 5, 8))
    months = partition_months(span, DEFAULT_CONFIG)
    assert _keys(months) == [(2025, 1), (2025, 2), (2025, 3), (2025, 4)]

    obligations = build_obligations(months, DEFAULT_CONFIG)
    assert [o.report_due_date.date() for o in obligations] == [
        date(2025, 2, 5),
        date(2025, 3, 5),
        date(2025, 4, 5),
        date(2025, 5, 5),
    ]
    assert [o.visit_due_date.date() for o in obligations] == [
        date(2025, 1, 31),
        date(2025, 2, 28),
        date(2025, 3, 31),
        date(2025, 4, 30),
    ]


def test_inclusion_boundary_is_strict() -> None:
    cfg = DEFAULT_CONFIG
    # January 22..31 is exactly 10 days, January 21..31 is 11
    exactly = partition_all_months(InternshipSpan(date(2025, 1, 22), date(2025, 4, 30)), cfg)
    one_more = partition_all_months(InternshipSpan(date(2025, 1, 21), date(2025, 4, 30)), cfg)

    assert exactly.months[0].active_days == cfg.min_days_for_inclusion
    assert not exactly.months[0].is_included
    assert one_more.months[0].active_days == cfg.min_days_for_inclusion + 1
    assert one_more.months[0].is_included


def test_first_and_last_flags_refer_to_touched_months() -> None:
    partition = partition_all_months(InternshipSpan(date(2025, 1, 22), date(2025, 3, 3)))
    assert partition.months[0].is_first and not partition.months[0].is_included
    assert partition.months[-1].is_last and not partition.months[-1].is_included
    assert _keys(partition.included) == [(2025, 2)]
    assert not partition.included[0].is_first and not partition.included[0].is_last


def test_single_month_span_uses_full_day_count() -> None:
    short = partition_all_months(InternshipSpan(date(2025, 3, 5), date(2025, 3, 14)))
    longer = partition_all_months(InternshipSpan(date(2025, 3, 5), date(2025, 3, 15)))

    assert short.months[0].active_days == 10
    assert short.months[0].is_first and short.months[0].is_last
    assert short.included == []
    assert longer.months[0].active_days == 11
    assert _keys(longer.included) == [(2025, 3)]


def test_degenerate_span_is_empty_not_an_error() -> None:
    assert partition_months(InternshipSpan(date(2025, 5, 1), date(2025, 4, 1))) == []


def test_multi_year_span_rolls_over_december() -> None:
    span = InternshipSpan(date(2024, 11, 1), date(2025, 2, 28))
    months = partition_months(span)
    assert _keys(months) == [(2024, 11), (2024, 12), (2025, 1), (2025, 2)]

    december = due_dates_for(months[1])
    assert december.report_due_date == datetime(2025, 1, 5, 23, 59, 59, 999999)


def test_leap_year_february_visit_due_date() -> None:
    months = partition_months(InternshipSpan(date(2024, 1, 1), date(2024, 4, 30)))
    february = find_month(months, 2024, 2)
    assert february is not None
    assert february.active_days == 29
    assert due_dates_for(february).visit_due_date.date() == date(2024, 2, 29)


def test_fixed_visit_due_day() -> None:
    cfg = CycleConfig(visit_due_on_month_end=False, visit_due_day=20)
    months = partition_months(InternshipSpan(date(2025, 1, 1), date(2025, 2, 28)), cfg)
    assert [due_dates_for(m, cfg).visit_due_date.date() for m in months] == [
        date(2025, 1, 20),
        date(2025, 2, 20),
    ]


def test_span_longer_than_limit_is_truncated() -> None:
    cfg = CycleConfig(max_internship_months=3)
    months = partition_months(InternshipSpan(date(2025, 1, 1), date(2025, 12, 31)), cfg)
    assert _keys(months) == [(2025, 1), (2025, 2), (2025, 3)]
    assert months[-1].is_last
    assert [m.is_last for m in months] == [False, False, True]


def test_partition_is_deterministic() -> None:
    span = InternshipSpan(date(2025, 1, 15), date(2025, 6, 30))
    assert partition_months(span) == partition_months(span)
    assert build_obligations(partition_months(span)) == build_obligations(partition_months(span))


def test_display_helpers() -> None:
    span = InternshipSpan(date(2025, 1, 15), date(2025, 5, 8))
    assert format_report_name(1, 2025) == "January 2025 Report"
    assert format_report_name(12) == "December Report"
    assert is_date_in_span(date(2025, 5, 8), span)
    assert not is_date_in_span(date(2025, 5, 9), span)
    assert find_month(partition_months(span), 2025, 5) is None
