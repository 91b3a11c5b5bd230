"""
Time-of-day parsing and arithmetic

All wall-clock values are minutes since midnight. Text is accepted only in
strict HH:MM form.
"""

from datetime import datetime
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict, Field

from core.errors import FormatError

MINUTES_PER_DAY = 24 * 60

# Default workday projection: 7h + 80min = 8h20m
DEFAULT_EXTRA_HOURS = 7
DEFAULT_EXTRA_MINUTES = 80


class TimeOfDay(BaseModel):
    """Immutable wall-clock time, 00:00 - 23:59"""

    model_config = ConfigDict(frozen=True)

    minutes: int = Field(ge=0, lt=MINUTES_PER_DAY)

    @classmethod
    def from_hm(cls, hour: int, minute: int) -> "TimeOfDay":
        return cls(minutes=hour * 60 + minute)

    @property
    def hour(self) -> int:
        return self.minutes // 60

    @property
    def minute(self) -> int:
        return self.minutes % 60

    def __str__(self) -> str:
        return format_time(self)

    def __lt__(self, other: "TimeOfDay") -> bool:
        return self.minutes < other.minutes

    def __le__(self, other: "TimeOfDay") -> bool:
        return self.minutes <= other.minutes

    def __gt__(self, other: "TimeOfDay") -> bool:
        return self.minutes > other.minutes

    def __ge__(self, other: "TimeOfDay") -> bool:
        return self.minutes >= other.minutes


def _parse_field(text: str, field: str, name: str, upper: int) -> int:
    if not field or not (field.isascii() and field.isdigit()):
        raise FormatError(text, f"{name} must be numeric")
    value = int(field)
    if value > upper:
        raise FormatError(text, f"{name} out of range 0-{upper}")
    return value


def parse(text: str) -> TimeOfDay:
    """
    Parse "HH:MM" into a TimeOfDay

    Raises:
        FormatError: if the text does not have exactly two numeric fields
            or either field is out of range
    """
    if not isinstance(text, str):
        raise FormatError(repr(text), "expected a string")

    fields = text.split(":")
    if len(fields) != 2:
        raise FormatError(text, "expected HH:MM")

    hour = _parse_field(text, fields[0], "hour", 23)
    minute = _parse_field(text, fields[1], "minute", 59)
    return TimeOfDay.from_hm(hour, minute)


def format_time(time: TimeOfDay) -> str:
    """Canonical zero-padded HH:MM"""
    return f"{time.hour:02d}:{time.minute:02d}"


def duration_minutes(start: TimeOfDay, end: TimeOfDay) -> int:
    """Signed difference end - start; negative when end precedes start"""
    return end.minutes - start.minutes


def interval_minutes(start: TimeOfDay, end: TimeOfDay) -> int:
    """
    Length of a wall-clock interval such as a meeting

    An end earlier than the start is read as crossing midnight, so the
    result is always in 0..1439.
    """
    minutes = duration_minutes(start, end)
    if minutes < 0:
        minutes += MINUTES_PER_DAY
    return minutes


def project_end_time(
    start: TimeOfDay,
    extra_hours: int = DEFAULT_EXTRA_HOURS,
    extra_minutes: int = DEFAULT_EXTRA_MINUTES,
) -> TimeOfDay:
    """Projected end of the workday; minute overflow folds into hours and wraps at midnight"""
    hour = start.hour + extra_hours
    minute = start.minute + extra_minutes
    while minute >= 60:
        hour += 1
        minute -= 60
    return TimeOfDay.from_hm(hour % 24, minute)


def now_time_of_day(clock: Optional[Callable[[], datetime]] = None) -> TimeOfDay:
    """Current local time truncated to the minute"""
    now = (clock or datetime.now)()
    return TimeOfDay.from_hm(now.hour, now.minute)
