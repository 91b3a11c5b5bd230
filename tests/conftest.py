"""
Shared fixtures

Log files go to a throwaway directory; it must be set before any project
module creates the log manager.
"""

import os
import tempfile

os.environ.setdefault("WORKTIME_LOGS_DIR", tempfile.mkdtemp(prefix="worktime-logs-"))

from datetime import date  # noqa: E402

import pytest  # noqa: E402

from core.context import TrackerContext  # noqa: E402
from core.focus_cache import FocusCache  # noqa: E402
from core.store import RecordStore  # noqa: E402
from core.timeparse import TimeOfDay, parse  # noqa: E402
from models.entities import DayRecord, FocusRecord, MeetingRecord  # noqa: E402

TODAY = date(2024, 1, 15)


class FakeClock:
    """Settable replacement for now_time_of_day"""

    def __init__(self, text: str = "09:00"):
        self.now = parse(text)

    def set(self, text: str) -> None:
        self.now = parse(text)

    def __call__(self) -> TimeOfDay:
        return self.now


def make_record(
    day: str,
    start: str = "09:00",
    end: str = "17:00",
    meetings=(),
    focus=(),
) -> DayRecord:
    """Build a DayRecord from (name, start, end, minutes) / (start, end, minutes) tuples"""
    return DayRecord(
        date=day,
        start=parse(start),
        end=parse(end),
        meetings=[
            MeetingRecord(name=n, start=parse(s), end=parse(e), duration_minutes=m)
            for n, s, e, m in meetings
        ],
        focus_intervals=[
            FocusRecord(start=parse(s), end=parse(e), duration_minutes=m) for s, e, m in focus
        ],
    )


@pytest.fixture
def clock():
    return FakeClock("09:00")


@pytest.fixture
def store(tmp_path):
    return RecordStore(tmp_path / "data" / "worktime.jsonl")


@pytest.fixture
def focus_cache(tmp_path):
    return FocusCache(tmp_path / ".tmp_cache" / "focus_cache.bin")


@pytest.fixture
def ctx(store, focus_cache, clock):
    return TrackerContext(
        store=store,
        focus_cache=focus_cache,
        clock=clock,
        today=lambda: TODAY,
        ticks_per_minute=60,
    )
