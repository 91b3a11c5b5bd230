"""
Session State - the workday currently being tracked

A single SessionState is owned by the running application and handed to
command handlers explicitly; nothing else holds a reference to it.

Phases:
    IDLE      no start time yet
    TRACKING  start time recorded
    CLOSED    a DayRecord has been emitted, the session accepts no more edits

Meetings and focus intervals each have their own running/not-running
sub-state. Only one of them runs at a time: starting a meeting ends a
running focus interval, and focus cannot start during a meeting.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import List, Optional

from core.errors import InvalidIntervalError, SessionNotClosableError
from core.logger import get_logger
from core.timeparse import TimeOfDay, interval_minutes
from models.entities import DayRecord, FocusRecord, MeetingRecord

logger = get_logger(__name__)

DEFAULT_MEETING_NAME = "Meeting"


class SessionPhase(str, Enum):
    IDLE = "idle"
    TRACKING = "tracking"
    CLOSED = "closed"


@dataclass
class RunningInterval:
    """A meeting or focus interval that has started but not ended"""

    start: TimeOfDay
    name: str = ""
    elapsed_minutes: int = 0


class SessionState:
    """Mutable state of one in-progress day"""

    def __init__(self, day: Optional[str] = None):
        """
        Args:
            day: Date of the session (YYYY-MM-DD), defaults to today
        """
        self.day = day or date.today().isoformat()
        self.phase = SessionPhase.IDLE
        self.start: Optional[TimeOfDay] = None
        self.end: Optional[TimeOfDay] = None
        self.meetings: List[MeetingRecord] = []
        self.focus_intervals: List[FocusRecord] = []
        self.meeting: Optional[RunningInterval] = None
        self.focus: Optional[RunningInterval] = None
        self.focus_total_minutes = 0

    # ============ Start / End ============

    def set_start(self, time: TimeOfDay) -> bool:
        """
        Record the start of the workday

        Raises:
            InvalidIntervalError: if an end time is set and precedes ``time``
        """
        if self.phase == SessionPhase.CLOSED:
            logger.warning("Ignoring start time edit on a closed session")
            return False
        if self.end is not None and self.end < time:
            raise InvalidIntervalError(
                f"Start time {time} is after end time {self.end}"
            )

        self.start = time
        self.phase = SessionPhase.TRACKING
        logger.debug(f"Start time set to {time}")
        return True

    def set_end(self, time: TimeOfDay) -> bool:
        """
        Record the end of the workday

        Raises:
            InvalidIntervalError: if ``time`` precedes the start time
        """
        if self.phase == SessionPhase.CLOSED:
            logger.warning("Ignoring end time edit on a closed session")
            return False
        if self.start is not None and time < self.start:
            raise InvalidIntervalError(
                f"End time {time} is before start time {self.start}"
            )

        self.end = time
        logger.debug(f"End time set to {time}")
        return True

    # ============ Meetings ============

    @property
    def is_meeting_running(self) -> bool:
        return self.meeting is not None

    @property
    def meeting_elapsed_minutes(self) -> int:
        return self.meeting.elapsed_minutes if self.meeting else 0

    @property
    def closed_meeting_minutes(self) -> int:
        return sum(m.duration_minutes for m in self.meetings)

    def start_meeting(self, name: str, now: TimeOfDay) -> bool:
        """Start a meeting; no-op if one is already running"""
        if self.phase == SessionPhase.CLOSED or self.meeting is not None:
            return False

        if self.focus is not None:
            logger.info("Meeting started during focus time, ending focus interval")
            self.end_focus(now)

        self.meeting = RunningInterval(start=now, name=name.strip() or DEFAULT_MEETING_NAME)
        logger.info(f"Meeting '{self.meeting.name}' started at {now}")
        return True

    def end_meeting(self, now: TimeOfDay) -> Optional[MeetingRecord]:
        """End the running meeting; no-op (returns None) if there is none"""
        if self.meeting is None:
            return None

        record = MeetingRecord(
            name=self.meeting.name,
            start=self.meeting.start,
            end=now,
            duration_minutes=interval_minutes(self.meeting.start, now),
        )
        self.meetings.append(record)
        self.meeting = None
        logger.info(
            f"Meeting '{record.name}' ended at {now} ({record.duration_minutes} min)"
        )
        return record

    # ============ Focus ============

    @property
    def is_focus_running(self) -> bool:
        return self.focus is not None

    @property
    def focus_elapsed_minutes(self) -> int:
        return self.focus.elapsed_minutes if self.focus else 0

    def start_focus(self, now: TimeOfDay) -> bool:
        """Start a focus interval; no-op if focus or a meeting is running"""
        if self.phase == SessionPhase.CLOSED or self.focus is not None:
            return False
        if self.meeting is not None:
            logger.debug("Focus time not started: a meeting is running")
            return False

        self.focus = RunningInterval(start=now)
        logger.info(f"Focus time started at {now}")
        return True

    def end_focus(self, now: TimeOfDay) -> Optional[FocusRecord]:
        """End the running focus interval; no-op (returns None) if there is none"""
        if self.focus is None:
            return None

        record = FocusRecord(
            start=self.focus.start,
            end=now,
            duration_minutes=interval_minutes(self.focus.start, now),
        )
        self.focus_intervals.append(record)
        self.focus_total_minutes += record.duration_minutes
        self.focus = None
        logger.info(f"Focus time ended at {now} ({record.duration_minutes} min)")
        return record

    # ============ Ticks ============

    def advance_minute(self) -> bool:
        """Add one elapsed minute to every running interval; returns True if any was running"""
        running = False
        if self.meeting is not None:
            self.meeting.elapsed_minutes += 1
            running = True
        if self.focus is not None:
            self.focus.elapsed_minutes += 1
            running = True
        return running

    # ============ Closing ============

    def is_closable(self) -> bool:
        return (
            self.phase != SessionPhase.CLOSED
            and self.start is not None
            and self.end is not None
        )

    def snapshot(self, day: Optional[str] = None, now: Optional[TimeOfDay] = None) -> DayRecord:
        """
        Build the DayRecord for this session without changing state

        With ``now``, a running meeting or focus interval is included as if it
        had ended at that time; the running timers themselves keep going.

        Raises:
            SessionNotClosableError: if start or end time is missing
        """
        if self.start is None or self.end is None:
            raise SessionNotClosableError("Start and end time must both be set")

        meetings = list(self.meetings)
        focus_intervals = list(self.focus_intervals)
        if now is not None and self.meeting is not None:
            meetings.append(
                MeetingRecord(
                    name=self.meeting.name,
                    start=self.meeting.start,
                    end=now,
                    duration_minutes=interval_minutes(self.meeting.start, now),
                )
            )
        if now is not None and self.focus is not None:
            focus_intervals.append(
                FocusRecord(
                    start=self.focus.start,
                    end=now,
                    duration_minutes=interval_minutes(self.focus.start, now),
                )
            )

        return DayRecord(
            date=day or self.day,
            start=self.start,
            end=self.end,
            meetings=meetings,
            focus_intervals=focus_intervals,
        )

    def close(self, day: Optional[str] = None) -> DayRecord:
        """
        Emit the final DayRecord and move to CLOSED

        Raises:
            SessionNotClosableError: if the session is not closable
        """
        if not self.is_closable():
            raise SessionNotClosableError(
                f"Session in phase {self.phase.value} with start={self.start} "
                f"end={self.end} cannot be closed"
            )

        record = self.snapshot(day)
        self.meetings = []
        self.focus_intervals = []
        self.meeting = None
        self.focus = None
        self.phase = SessionPhase.CLOSED
        logger.info(f"Session for {record.date} closed")
        return record
