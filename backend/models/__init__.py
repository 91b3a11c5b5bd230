"""
Data models for persisted records and handler communication
"""

from .base import (
    BaseModel,
    OperationDataResponse,
    OperationResponse,
    TimedOperationResponse,
)
from .entities import (
    DayRecord,
    DaySummary,
    FocusRecord,
    MeetingRecord,
    WeekSummary,
)
from .responses import (
    HistoryResponse,
    SaveDayResponse,
    SessionStatusData,
    SessionStatusResponse,
    SetTimeRequest,
    StartMeetingRequest,
    SummariesResponse,
    WeeklySummariesResponse,
    WindowRequest,
)

__all__ = [
    # Base
    "BaseModel",
    "OperationResponse",
    "OperationDataResponse",
    "TimedOperationResponse",
    # Entities
    "DayRecord",
    "DaySummary",
    "FocusRecord",
    "MeetingRecord",
    "WeekSummary",
    # Requests
    "SetTimeRequest",
    "StartMeetingRequest",
    "WindowRequest",
    # Responses
    "HistoryResponse",
    "SaveDayResponse",
    "SessionStatusData",
    "SessionStatusResponse",
    "SummariesResponse",
    "WeeklySummariesResponse",
]
