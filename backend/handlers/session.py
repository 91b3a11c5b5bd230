"""
Session command handlers

Commands:
- set_start / set_end - edit the workday bounds (HH:MM)
- start_meeting / end_meeting - meeting timer
- start_focus / end_focus - focus timer, mirrored to the focus cache
- status - current session snapshot
- save_day - append the day to the store and close the session
"""

from datetime import datetime

from core.aggregator import current_day_projection
from core.context import TrackerContext
from core.errors import (
    FormatError,
    InvalidIntervalError,
    SessionNotClosableError,
    StoreWriteError,
)
from core.logger import get_logger
from core.session import SessionPhase
from core.timeparse import format_time, parse, project_end_time
from models.responses import (
    SaveDayResponse,
    SessionStatusData,
    SessionStatusResponse,
    SetTimeRequest,
    StartMeetingRequest,
)

from . import command_handler

logger = get_logger(__name__)


def build_status(ctx: TrackerContext) -> SessionStatusData:
    """Collect everything the dashboard renders about the session"""
    session = ctx.session
    projected_end = None
    if session.start is not None:
        projected_end = format_time(
            project_end_time(session.start, ctx.extra_hours, ctx.extra_minutes)
        )

    return SessionStatusData(
        day=session.day,
        phase=session.phase.value,
        start=format_time(session.start) if session.start is not None else None,
        end=format_time(session.end) if session.end is not None else None,
        projected_end=projected_end,
        meetings=list(session.meetings),
        focus_intervals=list(session.focus_intervals),
        meeting_running=session.is_meeting_running,
        meeting_name=session.meeting.name if session.meeting else None,
        meeting_start=format_time(session.meeting.start) if session.meeting else None,
        meeting_elapsed_minutes=session.meeting_elapsed_minutes,
        focus_running=session.is_focus_running,
        focus_start=format_time(session.focus.start) if session.focus else None,
        focus_elapsed_minutes=session.focus_elapsed_minutes,
        focus_total_minutes=session.focus_total_minutes,
        closable=session.is_closable(),
        projection=current_day_projection(
            session, ctx.now(), ctx.default_start, today=ctx.today()
        ),
    )


def _status_response(ctx: TrackerContext, success: bool, message: str, error: str = "") -> SessionStatusResponse:
    return SessionStatusResponse(
        success=success,
        message=message,
        error=error,
        data=build_status(ctx),
        timestamp=datetime.now().isoformat(),
    )


def _set_bound(ctx: TrackerContext, body: SetTimeRequest, which: str) -> SessionStatusResponse:
    try:
        time = parse(body.time)
        if which == "start":
            changed = ctx.session.set_start(time)
        else:
            changed = ctx.session.set_end(time)
    except (FormatError, InvalidIntervalError) as e:
        # Expected errors: the edit is rejected and the field keeps its value
        logger.warning(f"Rejected {which} time '{body.time}': {e}")
        return _status_response(ctx, False, str(e), error=type(e).__name__)

    if not changed:
        return _status_response(ctx, False, "Session is closed", error="SessionClosed")

    ctx.scheduler.refresh()
    return _status_response(ctx, True, f"{which.capitalize()} time set to {format_time(time)}")


@command_handler(name="set_start", body=SetTimeRequest)
def set_start_time(ctx: TrackerContext, body: SetTimeRequest) -> SessionStatusResponse:
    """Set the start time of the workday"""
    return _set_bound(ctx, body, "start")


@command_handler(name="set_end", body=SetTimeRequest)
def set_end_time(ctx: TrackerContext, body: SetTimeRequest) -> SessionStatusResponse:
    """Set the end time of the workday"""
    return _set_bound(ctx, body, "end")


@command_handler(name="start_meeting", body=StartMeetingRequest)
def start_meeting(ctx: TrackerContext, body: StartMeetingRequest) -> SessionStatusResponse:
    """Start a meeting timer"""
    session = ctx.session
    if session.phase == SessionPhase.CLOSED:
        return _status_response(ctx, False, "Session is closed", error="SessionClosed")

    was_focus_running = session.is_focus_running
    if not session.start_meeting(body.name, ctx.now()):
        return _status_response(ctx, False, "A meeting is already running")

    if was_focus_running:
        ctx.focus_cache.write(False, 0)
    ctx.scheduler.refresh()
    return _status_response(ctx, True, f"Meeting '{ctx.session.meeting.name}' started")


@command_handler(name="end_meeting")
def end_meeting(ctx: TrackerContext) -> SessionStatusResponse:
    """Stop the running meeting timer"""
    record = ctx.session.end_meeting(ctx.now())
    if record is None:
        return _status_response(ctx, False, "No meeting is running")

    ctx.scheduler.refresh()
    return _status_response(
        ctx, True, f"Meeting '{record.name}' ended ({record.duration_minutes} min)"
    )


@command_handler(name="start_focus")
def start_focus(ctx: TrackerContext) -> SessionStatusResponse:
    """Start a focus time interval"""
    session = ctx.session
    if session.phase == SessionPhase.CLOSED:
        return _status_response(ctx, False, "Session is closed", error="SessionClosed")

    if not session.start_focus(ctx.now()):
        reason = "A meeting is running" if session.is_meeting_running else "Focus time is already running"
        return _status_response(ctx, False, reason)

    ctx.focus_cache.write(True, 0)
    ctx.scheduler.refresh()
    return _status_response(ctx, True, "Focus time started")


@command_handler(name="end_focus")
def end_focus(ctx: TrackerContext) -> SessionStatusResponse:
    """Stop the running focus time interval"""
    record = ctx.session.end_focus(ctx.now())
    if record is None:
        return _status_response(ctx, False, "No focus time is running")

    ctx.focus_cache.write(False, 0)
    ctx.scheduler.refresh()
    return _status_response(ctx, True, f"Focus time ended ({record.duration_minutes} min)")


@command_handler(name="status")
def get_status(ctx: TrackerContext) -> SessionStatusResponse:
    """Get the current session status"""
    return _status_response(ctx, True, "Session status")


@command_handler(name="save_day")
def save_day(ctx: TrackerContext) -> SaveDayResponse:
    """
    Append the current day to the store and close the session

    Running meeting/focus timers are saved as ending at the current time and
    are only stopped once the append succeeds. If the append fails the session,
    running timers included, stays as it was so the save can be retried.
    """
    session = ctx.session
    if not session.is_closable():
        return SaveDayResponse(
            success=False,
            message="Set both start and end time before saving",
            error="SessionNotClosable",
            timestamp=datetime.now().isoformat(),
        )

    now = ctx.now()
    try:
        record = session.snapshot(ctx.today().isoformat(), now=now)
        ctx.store.append(record)
    except StoreWriteError as e:
        logger.error(f"Failed to save day {session.day}: {e}")
        return SaveDayResponse(
            success=False,
            message="Could not save the day; it is still open, try again",
            error=str(e),
            timestamp=datetime.now().isoformat(),
        )
    except SessionNotClosableError as e:
        logger.warning(f"Session not closable: {e}")
        return SaveDayResponse(
            success=False,
            message=str(e),
            error="SessionNotClosable",
            timestamp=datetime.now().isoformat(),
        )

    session.end_meeting(now)
    if session.end_focus(now) is not None:
        ctx.focus_cache.write(False, 0)
    session.close(record.date)

    logger.info(f"Saved day {record.date}: {record.start}-{record.end}, {len(record.meetings)} meetings")
    return SaveDayResponse(
        success=True,
        message=f"Saved {record.date}",
        data=record,
        timestamp=datetime.now().isoformat(),
    )
