"""
History command handlers - read-only views over the record store

Commands:
- history - every stored day, sorted by date
- window_summaries - rolling window for the bar chart
- weekly_summaries - per-week totals

A corrupt store degrades to an empty history: the response carries
success=False with the error so the UI can show a notice, and data is empty.
"""

from datetime import datetime
from typing import List, Optional

from core.aggregator import sort_by_date, summaries_for_window, weekly_summaries
from core.context import TrackerContext
from core.errors import CorruptRecordError
from core.logger import get_logger
from models.entities import DayRecord
from models.responses import (
    HistoryResponse,
    SummariesResponse,
    WeeklySummariesResponse,
    WindowRequest,
)

from . import command_handler

logger = get_logger(__name__)


def _load_sorted(ctx: TrackerContext) -> List[DayRecord]:
    """Read the whole store sorted by date; raises CorruptRecordError and OSError"""
    return sort_by_date(ctx.store.read_all())


def _read_failure(e: Exception) -> str:
    if isinstance(e, CorruptRecordError):
        logger.warning(f"History unavailable, store is corrupt: {e}")
        return f"History file is corrupt at line {e.line_number}"
    logger.warning(f"History unavailable, store could not be read: {e}")
    return "History file could not be read"


@command_handler(name="history")
def get_history(ctx: TrackerContext) -> HistoryResponse:
    """Get all stored days sorted by date"""
    try:
        records = _load_sorted(ctx)
    except (CorruptRecordError, OSError) as e:
        return HistoryResponse(
            success=False,
            message=_read_failure(e),
            error=str(e),
            timestamp=datetime.now().isoformat(),
        )

    return HistoryResponse(
        success=True,
        message=f"Retrieved {len(records)} days",
        data=records,
        timestamp=datetime.now().isoformat(),
    )


@command_handler(name="window_summaries", body=WindowRequest)
def get_window_summaries(ctx: TrackerContext, body: Optional[WindowRequest] = None) -> SummariesResponse:
    """Get the rolling-window summaries for the bar chart"""
    window_size = (body.window_size if body and body.window_size else None) or ctx.window_size
    today = ctx.today()

    try:
        records = _load_sorted(ctx)
    except (CorruptRecordError, OSError) as e:
        return SummariesResponse(
            success=False,
            message=_read_failure(e),
            error=str(e),
            data=summaries_for_window([], window_size, today),
            timestamp=datetime.now().isoformat(),
        )

    summaries = summaries_for_window(records, window_size, today)
    logger.debug(f"Computed {window_size}-day window from {len(records)} records")
    return SummariesResponse(
        success=True,
        message=f"Last {window_size} days",
        data=summaries,
        timestamp=datetime.now().isoformat(),
    )


@command_handler(name="weekly_summaries")
def get_weekly_summaries(ctx: TrackerContext) -> WeeklySummariesResponse:
    """Get totals per ISO week"""
    try:
        records = _load_sorted(ctx)
    except (CorruptRecordError, OSError) as e:
        return WeeklySummariesResponse(
            success=False,
            message=_read_failure(e),
            error=str(e),
            timestamp=datetime.now().isoformat(),
        )

    weeks = weekly_summaries(records)
    return WeeklySummariesResponse(
        success=True,
        message=f"Retrieved {len(weeks)} weeks",
        data=weeks,
        timestamp=datetime.now().isoformat(),
    )
