"""
Aggregator - derives day, rolling-window and weekly summaries

Everything here is recomputed from the full record log; nothing is
maintained incrementally.
"""

from datetime import date, datetime
from typing import Dict, List, Optional, Sequence

from core.logger import get_logger
from core.session import SessionState
from core.timeparse import TimeOfDay, duration_minutes, parse
from models.entities import DayRecord, DaySummary, WeekSummary

logger = get_logger(__name__)


def worked_minutes(record: DayRecord) -> int:
    """Signed end - start; negative for legacy records whose end precedes the start"""
    return duration_minutes(record.start, record.end)


def meeting_minutes(record: DayRecord) -> int:
    return sum(m.duration_minutes for m in record.meetings)


def focus_minutes(record: DayRecord) -> int:
    return sum(f.duration_minutes for f in record.focus_intervals)


def summarize(record: DayRecord, today: Optional[date] = None) -> DaySummary:
    return DaySummary(
        date=record.date,
        worked_minutes=worked_minutes(record),
        meeting_minutes=meeting_minutes(record),
        focus_minutes=focus_minutes(record),
        is_today=today is not None and record.date == today.isoformat(),
    )


def sort_by_date(records: Sequence[DayRecord]) -> List[DayRecord]:
    """Stable sort by date; records sharing a date keep append order"""
    return sorted(records, key=lambda r: r.date)


def summaries_for_window(
    records: Sequence[DayRecord],
    window_size: int,
    today: Optional[date] = None,
) -> List[DaySummary]:
    """
    Summaries for the last ``window_size`` records, oldest first

    Records are taken in the order given (callers sort by date first). The
    result is left-padded with blank entries so it always has exactly
    ``window_size`` slots.

    Args:
        records: Day records, typically sorted by date
        window_size: Number of chart slots
        today: Marks the summary for this date with ``is_today``
    """
    if window_size <= 0:
        return []

    recent = list(records)[-window_size:]
    summaries = [summarize(r, today) for r in recent]

    padding = [DaySummary() for _ in range(window_size - len(summaries))]
    return padding + summaries


def weekly_summaries(records: Sequence[DayRecord]) -> List[WeekSummary]:
    """Totals per ISO week, oldest week first"""
    weeks: Dict[str, WeekSummary] = {}

    for record in sort_by_date(records):
        iso_year, iso_week, _ = datetime.strptime(record.date, "%Y-%m-%d").isocalendar()
        key = f"{iso_year}-W{iso_week:02d}"
        week = weeks.setdefault(key, WeekSummary(week=key))
        week.days += 1
        week.worked_minutes += worked_minutes(record)
        week.meeting_minutes += meeting_minutes(record)
        week.focus_minutes += focus_minutes(record)

    return [weeks[key] for key in sorted(weeks)]


def current_day_projection(
    session: SessionState,
    now: TimeOfDay,
    default_start: TimeOfDay = parse("09:00"),
    today: Optional[date] = None,
) -> DaySummary:
    """
    Summary of the still-open day as of ``now``

    Worked time runs from the session start (or ``default_start`` when none
    is set). Running meeting/focus intervals contribute their elapsed
    minutes on top of the closed ones.
    """
    start = session.start if session.start is not None else default_start

    return DaySummary(
        date=session.day,
        worked_minutes=duration_minutes(start, now),
        meeting_minutes=session.closed_meeting_minutes + session.meeting_elapsed_minutes,
        focus_minutes=session.focus_total_minutes + session.focus_elapsed_minutes,
        is_today=today is None or session.day == today.isoformat(),
    )
