import pytest

from conftest import TODAY, make_record
from core.aggregator import (
    current_day_projection,
    meeting_minutes,
    sort_by_date,
    summaries_for_window,
    summarize,
    weekly_summaries,
    worked_minutes,
)
from core.session import SessionState
from core.timeparse import parse
from models.entities import DaySummary


def _records(n):
    return [make_record(f"2024-01-{day:02d}") for day in range(1, n + 1)]


def test_day_totals():
    record = make_record(
        "2024-01-02",
        "09:00",
        "17:00",
        meetings=[("Standup", "09:00", "09:15", 15)],
        focus=[("10:00", "11:00", 60), ("14:00", "14:30", 30)],
    )
    summary = summarize(record)

    assert summary.worked_minutes == 480
    assert summary.meeting_minutes == 15
    assert summary.focus_minutes == 90
    assert not summary.is_today


def test_legacy_negative_worked_time_is_kept_raw():
    record = make_record("2023-12-01", "22:00", "06:00")
    assert worked_minutes(record) == -960


def test_meeting_minutes_sums_all_meetings():
    record = make_record(
        "2024-01-02", meetings=[("A", "09:00", "09:15", 15), ("B", "13:00", "14:00", 60)]
    )
    assert meeting_minutes(record) == 75


def test_is_today_marks_matching_date():
    summary = summarize(make_record(TODAY.isoformat()), today=TODAY)
    assert summary.is_today


@pytest.mark.parametrize("window_size", [0, -3])
def test_non_positive_window_is_empty(window_size):
    assert summaries_for_window(_records(3), window_size) == []


def test_window_shorter_log_is_left_padded():
    summaries = summaries_for_window(_records(2), 5)

    assert len(summaries) == 5
    assert all(s.is_blank for s in summaries[:3])
    assert [s.date for s in summaries[3:]] == ["2024-01-01", "2024-01-02"]


def test_window_exact_size():
    summaries = summaries_for_window(_records(5), 5)
    assert [s.date for s in summaries] == [f"2024-01-{d:02d}" for d in range(1, 6)]


def test_window_takes_most_recent():
    summaries = summaries_for_window(_records(8), 5)
    assert [s.date for s in summaries] == [f"2024-01-{d:02d}" for d in range(4, 9)]


def test_empty_log_gives_blank_slots():
    summaries = summaries_for_window([], 5)
    assert summaries == [DaySummary() for _ in range(5)]


def test_window_uses_given_order():
    records = [make_record("2024-01-03"), make_record("2024-01-01")]
    assert [s.date for s in summaries_for_window(records, 2)] == ["2024-01-03", "2024-01-01"]
    assert [s.date for s in summaries_for_window(sort_by_date(records), 2)] == [
        "2024-01-01",
        "2024-01-03",
    ]


def test_sort_by_date_is_stable():
    first = make_record("2024-01-02", "08:00", "16:00")
    second = make_record("2024-01-02", "09:00", "17:00")
    earlier = make_record("2024-01-01")

    assert sort_by_date([first, earlier, second]) == [earlier, first, second]


def test_weekly_summaries_group_by_iso_week():
    records = [
        make_record("2024-01-01", meetings=[("A", "10:00", "10:30", 30)]),  # Monday W01
        make_record("2024-01-05"),  # Friday W01
        make_record("2024-01-08", focus=[("10:00", "11:00", 60)]),  # Monday W02
    ]
    weeks = weekly_summaries(records)

    assert [w.week for w in weeks] == ["2024-W01", "2024-W02"]
    assert weeks[0].days == 2
    assert weeks[0].worked_minutes == 960
    assert weeks[0].meeting_minutes == 30
    assert weeks[1].focus_minutes == 60


def test_projection_uses_default_start_before_one_is_set():
    session = SessionState(day=TODAY.isoformat())
    projection = current_day_projection(session, parse("11:00"), parse("09:00"), today=TODAY)

    assert projection.worked_minutes == 120
    assert projection.is_today


def test_projection_includes_running_intervals():
    session = SessionState(day=TODAY.isoformat())
    session.set_start(parse("08:00"))
    session.start_meeting("A", parse("09:00"))
    session.end_meeting(parse("09:30"))
    session.start_meeting("B", parse("10:00"))
    for _ in range(10):
        session.advance_minute()

    projection = current_day_projection(session, parse("10:10"), today=TODAY)

    assert projection.worked_minutes == 130
    assert projection.meeting_minutes == 40
