from __future__ import annotations

from datetime import date, datetime, timedelta

from internship_compliance.models import (
    CountedMonth,
    ObligationKind,
    ReportFact,
    ReportFactStatus,
    ReportStatus,
    VisitFact,
    VisitStatus,
)
from internship_compliance.month_cycle import due_dates_for
from internship_compliance.status import classify, classify_report, classify_visit

JANUARY = due_dates_for(CountedMonth(2025, 1, 31, is_first=True, is_last=False))


def test_report_not_started_before_due_date() -> None:
    status = classify_report(JANUARY, None, date(2025, 1, 20))
    assert status.status == ReportStatus.NOT_STARTED
    assert status.label == "Not Started"


def test_report_due_soon_label() -> None:
    status = classify_report(JANUARY, None, date(2025, 2, 3))
    assert status.status == ReportStatus.NOT_STARTED
    assert status.label == "Due Soon"


def test_report_due_today_is_not_overdue() -> None:
    assert classify_report(JANUARY, None, date(2025, 2, 5)).status == ReportStatus.NOT_STARTED


def test_missing_report_becomes_overdue_with_grace_label() -> None:
    in_grace = classify_report(JANUARY, None, date(2025, 2, 7))
    assert in_grace.status == ReportStatus.OVERDUE
    assert in_grace.label == "Overdue (Grace Period)"
    assert in_grace.days_overdue == 2

    past_grace = classify_report(JANUARY, None, date(2025, 3, 1))
    assert past_grace.status == ReportStatus.OVERDUE
    assert past_grace.label == "Overdue"


def test_draft_passes_through_until_due() -> None:
    draft = ReportFact(2025, 1, ReportFactStatus.DRAFT)
    assert classify_report(JANUARY, draft, date(2025, 2, 1)).status == ReportStatus.DRAFT

    late_draft = classify_report(JANUARY, draft, date(2025, 2, 10))
    assert late_draft.status == ReportStatus.OVERDUE
    assert late_draft.label == "Overdue (Draft)"


def test_late_submission_is_approved_and_tracked() -> None:
    fact = ReportFact(2025, 1, ReportFactStatus.APPROVED, submitted_at=datetime(2025, 2, 8, 10, 30))
    status = classify_report(JANUARY, fact, date(2025, 3, 1))

    assert status.status == ReportStatus.APPROVED
    assert status.is_late is True
    assert status.days_late == 2
    assert status.label == "Submitted Late"


def test_lateness_round_trip() -> None:
    due = JANUARY.report_due_date
    late = ReportFact(2025, 1, ReportFactStatus.APPROVED, submitted_at=due + timedelta(days=3))
    on_time = ReportFact(2025, 1, ReportFactStatus.APPROVED, submitted_at=due)

    late_status = classify_report(JANUARY, late, date(2025, 4, 1))
    assert (late_status.is_late, late_status.days_late) == (True, 3)

    on_time_status = classify_report(JANUARY, on_time, date(2025, 4, 1))
    assert (on_time_status.is_late, on_time_status.days_late) == (False, 0)


def test_submission_timestamp_wins_over_draft_status() -> None:
    fact = ReportFact(2025, 1, ReportFactStatus.DRAFT, submitted_at=datetime(2025, 2, 1, 9, 0))
    status = classify_report(JANUARY, fact, date(2025, 2, 20))
    assert status.status == ReportStatus.APPROVED
    assert status.is_late is False


def test_approved_report_is_terminal() -> None:
    fact = ReportFact(2025, 1, ReportFactStatus.APPROVED, submitted_at=datetime(2025, 2, 2))
    results = {
        classify_report(JANUARY, fact, now).status
        for now in (date(2025, 2, 3), date(2025, 6, 1), date(2027, 1, 1))
    }
    assert results == {ReportStatus.APPROVED}


def test_visit_states_over_time() -> None:
    assert classify_visit(JANUARY, None, date(2024, 12, 31)).status == VisitStatus.UPCOMING
    assert classify_visit(JANUARY, None, date(2025, 1, 10)).status == VisitStatus.PENDING
    assert classify_visit(JANUARY, None, date(2025, 1, 31)).status == VisitStatus.PENDING

    overdue = classify_visit(JANUARY, None, datetime(2025, 2, 1, 0, 0, 1))
    assert overdue.status == VisitStatus.OVERDUE
    assert overdue.days_overdue == 0


def test_visit_has_no_grace_period() -> None:
    overdue = classify_visit(JANUARY, None, date(2025, 2, 3))
    assert overdue.status == VisitStatus.OVERDUE
    assert overdue.label == "Overdue"
    assert overdue.days_overdue == 3


def test_completed_visit_is_terminal_even_when_late() -> None:
    fact = VisitFact(2025, 1, completed_at=datetime(2025, 2, 2, 15, 0))
    for now in (date(2025, 2, 2), date(2025, 12, 31)):
        status = classify_visit(JANUARY, fact, now)
        assert status.status == VisitStatus.COMPLETED
        assert status.is_late is True
        assert status.days_late == 1


def test_classify_dispatches_on_kind() -> None:
    now = date(2025, 1, 15)
    assert classify(ObligationKind.REPORT, JANUARY, None, now).kind == ObligationKind.REPORT
    assert classify(ObligationKind.VISIT, JANUARY, None, now).status == VisitStatus.PENDING


def test_status_serializes_to_plain_data() -> None:
    fact = ReportFact(2025, 1, ReportFactStatus.APPROVED, submitted_at=datetime(2025, 2, 8))
    payload = classify_report(JANUARY, fact, date(2025, 3, 1)).as_dict()

    assert payload["status"] == "APPROVED"
    assert payload["kind"] == "REPORT"
    assert payload["obligation"]["report_due_date"] == "2025-02-05T23:59:59.999999"
    assert payload["fact"]["submitted_at"] == "2025-02-08T00:00:00"


def test_days_late_is_floored_from_due_moment() -> None:
    just_after = ReportFact(
        2025, 1, ReportFactStatus.APPROVED, submitted_at=datetime(2025, 2, 6, 0, 0, 1)
    )
    status = classify_report(JANUARY, just_after, date(2025, 3, 1))
    assert status.is_late is True
    assert status.days_late == 0

    day_after_next = ReportFact(
        2025, 1, ReportFactStatus.APPROVED, submitted_at=datetime(2025, 2, 7, 0, 0)
    )
    assert classify_report(JANUARY, day_after_next, date(2025, 3, 1)).days_late == 1
