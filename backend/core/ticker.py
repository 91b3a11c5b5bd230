"""
TickScheduler - periodic timer driving the running counters

One tick is roughly one second. Every ``ticks_per_minute`` ticks the
scheduler rolls over: running meeting/focus counters advance by a minute,
the focus cache is rewritten and the current-day projection is refreshed.

The scheduler never owns the event loop. The TUI calls ``tick()`` from a
Textual interval timer on the same loop that handles key presses; headless
callers can use ``start()``/``stop()`` which run an asyncio task.
"""

import asyncio
from datetime import date
from typing import Any, Callable, Dict, List, Optional

from core.aggregator import current_day_projection
from core.focus_cache import FocusCache
from core.logger import get_logger
from core.session import SessionState
from core.timeparse import TimeOfDay, now_time_of_day, parse
from models.entities import DaySummary

logger = get_logger(__name__)

ProjectionListener = Callable[[DaySummary], None]


class TickScheduler:
    """Counts ticks and rolls them into minutes for a SessionState"""

    def __init__(
        self,
        session: SessionState,
        focus_cache: Optional[FocusCache] = None,
        ticks_per_minute: int = 60,
        tick_interval: float = 1.0,
        default_start: TimeOfDay = parse("09:00"),
        clock: Callable[[], TimeOfDay] = now_time_of_day,
        today: Callable[[], date] = date.today,
    ):
        """
        Initialize TickScheduler

        Args:
            session: Session whose counters are advanced
            focus_cache: Side file rewritten while focus is running
            ticks_per_minute: Ticks per rollover (60 at one tick per second)
            tick_interval: Seconds between ticks when driven by ``start()``
            default_start: Start time assumed for the projection before one is set
            clock: Returns the current time of day
            today: Returns the current date
        """
        if ticks_per_minute <= 0:
            raise ValueError("ticks_per_minute must be positive")

        self.session = session
        self.focus_cache = focus_cache
        self.ticks_per_minute = ticks_per_minute
        self.tick_interval = tick_interval
        self.default_start = default_start
        self.clock = clock
        self.today = today

        self.sub_minute_ticks = 0
        self.minutes_elapsed = 0
        self.latest_projection: Optional[DaySummary] = None
        self._listeners: List[ProjectionListener] = []

        # Running state
        self.is_running = False
        self.tick_task: Optional[asyncio.Task] = None

    def add_listener(self, listener: ProjectionListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: ProjectionListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def tick(self) -> bool:
        """Process one tick; returns True when it completed a minute"""
        self.sub_minute_ticks += 1
        if self.sub_minute_ticks < self.ticks_per_minute:
            return False

        self.sub_minute_ticks = 0
        self.minutes_elapsed += 1
        self._rollover()
        return True

    def _rollover(self) -> None:
        self.session.advance_minute()

        if self.session.is_focus_running and self.focus_cache is not None:
            self.focus_cache.write(True, self.session.focus_elapsed_minutes)

        self.refresh()

    def refresh(self) -> DaySummary:
        """Recompute the current-day projection and notify listeners"""
        projection = current_day_projection(
            self.session,
            self.clock(),
            self.default_start,
            today=self.today(),
        )
        self.latest_projection = projection

        for listener in list(self._listeners):
            try:
                listener(projection)
            except Exception as e:
                logger.error(f"Projection listener failed: {e}", exc_info=True)

        return projection

    # ============ Headless driving ============

    async def start(self):
        """Start ticking on the current event loop"""
        if self.is_running:
            logger.warning("TickScheduler is already running")
            return

        self.is_running = True
        self.tick_task = asyncio.create_task(self._tick_loop())
        logger.info(f"TickScheduler started (tick every {self.tick_interval}s)")

    async def stop(self):
        """Stop ticking"""
        if not self.is_running:
            return

        self.is_running = False

        if self.tick_task:
            self.tick_task.cancel()
            try:
                await self.tick_task
            except asyncio.CancelledError:
                pass

        logger.info("TickScheduler stopped")

    async def _tick_loop(self):
        while self.is_running:
            try:
                await asyncio.sleep(self.tick_interval)
                self.tick()
            except asyncio.CancelledError:
                logger.debug("Tick task cancelled")
                break
            except Exception as e:
                logger.error(f"Tick failed: {e}", exc_info=True)

    def get_stats(self) -> Dict[str, Any]:
        """Get scheduler statistics"""
        return {
            "is_running": self.is_running,
            "sub_minute_ticks": self.sub_minute_ticks,
            "minutes_elapsed": self.minutes_elapsed,
            "ticks_per_minute": self.ticks_per_minute,
        }
