"""
Handler request and response models
"""

from typing import List, Optional

from .base import BaseModel, TimedOperationResponse
from .entities import DayRecord, DaySummary, FocusRecord, MeetingRecord, WeekSummary

# ============ Request Models ============


class SetTimeRequest(BaseModel):
    """Set the start or end time of the current day"""

    time: str  # HH:MM format


class StartMeetingRequest(BaseModel):
    """Start a meeting"""

    name: str = ""


class WindowRequest(BaseModel):
    """Rolling-window chart request"""

    window_size: Optional[int] = None


# ============ Response Models ============


class SessionStatusData(BaseModel):
    """Snapshot of the session for rendering"""

    day: str
    phase: str
    start: Optional[str] = None  # HH:MM format
    end: Optional[str] = None
    projected_end: Optional[str] = None
    meetings: List[MeetingRecord] = []
    focus_intervals: List[FocusRecord] = []
    meeting_running: bool = False
    meeting_name: Optional[str] = None
    meeting_start: Optional[str] = None
    meeting_elapsed_minutes: int = 0
    focus_running: bool = False
    focus_start: Optional[str] = None
    focus_elapsed_minutes: int = 0
    focus_total_minutes: int = 0
    closable: bool = False
    projection: Optional[DaySummary] = None


class SessionStatusResponse(TimedOperationResponse):
    """Response carrying the session status after a command"""

    data: Optional[SessionStatusData] = None


class SaveDayResponse(TimedOperationResponse):
    """Response after appending the day to the store"""

    data: Optional[DayRecord] = None


class HistoryResponse(TimedOperationResponse):
    """All stored days, sorted by date"""

    data: List[DayRecord] = []


class SummariesResponse(TimedOperationResponse):
    """Rolling-window summaries, oldest first"""

    data: List[DaySummary] = []


class WeeklySummariesResponse(TimedOperationResponse):
    """Per-week totals, oldest first"""

    data: List[WeekSummary] = []
