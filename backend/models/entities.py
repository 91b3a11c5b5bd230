"""
Data entity model definitions
Define the persisted day records and the summaries derived from them
"""

from datetime import datetime
from typing import Annotated, Any, List

from pydantic import BeforeValidator, Field, PlainSerializer, field_validator

from core.timeparse import TimeOfDay, format_time, parse

from .base import BaseModel


def _coerce_time(value: Any) -> Any:
    if isinstance(value, str):
        return parse(value)
    return value


# Stored as "HH:MM" text, held in memory as TimeOfDay
TimeValue = Annotated[
    TimeOfDay,
    BeforeValidator(_coerce_time),
    PlainSerializer(format_time, return_type=str),
]


# ============ Persisted Records ============


class MeetingRecord(BaseModel):
    """A finished meeting"""

    name: str = Field(alias="meeting_name")
    start: TimeValue = Field(alias="meeting_start_time")
    end: TimeValue = Field(alias="meeting_end_time")
    duration_minutes: int = Field(alias="time_in_meeting", ge=0)


class FocusRecord(BaseModel):
    """A finished focus interval"""

    start: TimeValue = Field(alias="focus_time_start")
    end: TimeValue = Field(alias="focus_time_end")
    duration_minutes: int = Field(alias="focus_time", ge=0)


class DayRecord(BaseModel):
    """One tracked workday - one line of the JSON Lines store"""

    date: str  # YYYY-MM-DD format
    start: TimeValue = Field(alias="starttime")
    end: TimeValue = Field(alias="endtime")
    meetings: List[MeetingRecord] = Field(default_factory=list)
    # Records written before focus tracking existed have no "focus_time" key
    focus_intervals: List[FocusRecord] = Field(default_factory=list, alias="focus_time")

    @field_validator("date")
    @classmethod
    def _check_date(cls, value: str) -> str:
        parsed = datetime.strptime(value, "%Y-%m-%d")
        # strptime also takes "2024-1-5"; records sort by the raw string
        if parsed.strftime("%Y-%m-%d") != value:
            raise ValueError(f"date must be zero-padded YYYY-MM-DD, got '{value}'")
        return value

    def to_json_line(self) -> str:
        """Compact single-line JSON, without the trailing newline"""
        return self.model_dump_json()


# ============ Derived Summaries ============


class DaySummary(BaseModel):
    """Totals for one day; a blank date marks a padding slot"""

    date: str = ""
    worked_minutes: int = 0
    meeting_minutes: int = 0
    focus_minutes: int = 0
    is_today: bool = False

    @property
    def is_blank(self) -> bool:
        return not self.date


class WeekSummary(BaseModel):
    """Totals for one ISO week"""

    week: str  # e.g. "2024-W01"
    days: int = 0
    worked_minutes: int = 0
    meeting_minutes: int = 0
    focus_minutes: int = 0
