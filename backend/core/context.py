"""
Tracker context - the objects one running tracker owns

The context is created once by system.runtime and passed explicitly to
every command handler. It is never stored in a module global.
"""

from datetime import date
from typing import Callable, Optional

from core.focus_cache import FocusCache
from core.session import SessionState
from core.store import RecordStore
from core.ticker import TickScheduler
from core.timeparse import (
    DEFAULT_EXTRA_HOURS,
    DEFAULT_EXTRA_MINUTES,
    TimeOfDay,
    now_time_of_day,
    parse,
)


class TrackerContext:
    """Session, store, cache and scheduler for one process"""

    def __init__(
        self,
        store: RecordStore,
        focus_cache: FocusCache,
        session: Optional[SessionState] = None,
        default_start: TimeOfDay = parse("09:00"),
        extra_hours: int = DEFAULT_EXTRA_HOURS,
        extra_minutes: int = DEFAULT_EXTRA_MINUTES,
        window_size: int = 5,
        ticks_per_minute: int = 60,
        tick_interval: float = 1.0,
        clock: Callable[[], TimeOfDay] = now_time_of_day,
        today: Callable[[], date] = date.today,
    ):
        self.store = store
        self.focus_cache = focus_cache
        self.clock = clock
        self.today = today
        self.session = session or SessionState(day=today().isoformat())
        self.default_start = default_start
        self.extra_hours = extra_hours
        self.extra_minutes = extra_minutes
        self.window_size = window_size
        self.tick_interval = tick_interval
        self.scheduler = TickScheduler(
            self.session,
            focus_cache=focus_cache,
            ticks_per_minute=ticks_per_minute,
            tick_interval=tick_interval,
            default_start=default_start,
            clock=clock,
            today=today,
        )

    def now(self) -> TimeOfDay:
        return self.clock()
