"""Tracker runtime control utility

Builds the TrackerContext from configuration and tears it down again.
Shared by the TUI and the plain CLI commands.
"""

from __future__ import annotations

import asyncio
import atexit
from pathlib import Path
from typing import Optional

from config.loader import get_config
from core.context import TrackerContext
from core.errors import FormatError
from core.focus_cache import FocusCache
from core.logger import get_logger, setup_logging
from core.session import SessionPhase
from core.store import RecordStore
from core.timeparse import parse

logger = get_logger(__name__)

FALLBACK_DEFAULT_START = "09:00"

# Global flag to prevent duplicate registration
_exit_handlers_registered = False


def _warn_unsaved(ctx: TrackerContext):
    """atexit hook: note a tracked day that was never saved"""
    session = ctx.session
    if session.phase == SessionPhase.TRACKING:
        logger.warning(
            f"Exiting with unsaved session for {session.day} "
            f"(start={session.start}, end={session.end}, {len(session.meetings)} meetings)"
        )


def _register_exit_handlers(ctx: TrackerContext):
    """Register exit handlers (once per process)"""
    global _exit_handlers_registered

    if _exit_handlers_registered:
        logger.debug("Exit handlers already registered, skipping")
        return

    atexit.register(_warn_unsaved, ctx)
    logger.debug("atexit handler registered")
    _exit_handlers_registered = True


def _resolve(path_value: str) -> Path:
    return Path(path_value).expanduser()


def start_runtime(
    config_file: Optional[str] = None,
    data_file: Optional[str] = None,
    console_logging: bool = False,
    register_exit_handlers: bool = True,
) -> TrackerContext:
    """
    Load configuration and build the tracker context

    Args:
        config_file: User config file, defaults to ~/.config/worktime/config.toml
        data_file: Overrides storage.data_file
        console_logging: Also log to stderr (plain CLI commands)
        register_exit_handlers: Install the unsaved-session atexit hook
    """
    config = get_config(config_file)
    config.load()

    setup_logging({"console": True} if console_logging else None)
    logger.debug(f"✓ Config file: {config.config_file}")

    data_path = _resolve(data_file or config.get("storage.data_file", "data/worktime.jsonl"))
    cache_path = _resolve(config.get("storage.cache_file", ".tmp_cache/focus_cache.bin"))

    default_start_text = config.get("tracking.default_start", FALLBACK_DEFAULT_START)
    try:
        default_start = parse(default_start_text)
    except FormatError as e:
        logger.warning(f"Invalid tracking.default_start, using {FALLBACK_DEFAULT_START}: {e}")
        default_start = parse(FALLBACK_DEFAULT_START)

    ctx = TrackerContext(
        store=RecordStore(data_path),
        focus_cache=FocusCache(cache_path),
        default_start=default_start,
        extra_hours=int(config.get("tracking.extra_hours", 7)),
        extra_minutes=int(config.get("tracking.extra_minutes", 80)),
        window_size=int(config.get("charts.window_size", 5)),
        ticks_per_minute=int(config.get("tracking.ticks_per_minute", 60)),
        tick_interval=float(config.get("tracking.tick_interval", 1.0)),
    )
    ctx.scheduler.refresh()

    if register_exit_handlers:
        _register_exit_handlers(ctx)

    logger.info(f"Tracker started for {ctx.session.day} (data: {data_path})")
    return ctx


async def stop_runtime(ctx: TrackerContext, *, quiet: bool = False) -> TrackerContext:
    """Stop the tick scheduler if it is running headless

    Args:
        quiet: When True, only log debug messages, avoid terminal shutdown messages.
    """
    if not ctx.scheduler.is_running:
        if not quiet:
            logger.info("Tick scheduler is not currently running")
        return ctx

    try:
        await asyncio.wait_for(ctx.scheduler.stop(), timeout=5.0)
    except asyncio.TimeoutError:
        if not quiet:
            logger.warning("Tick scheduler stop timeout")

    if not quiet:
        logger.info("Tracker stopped")
    return ctx


def get_runtime_stats(ctx: TrackerContext) -> dict:
    """Get current tracker statistics."""
    return {
        "day": ctx.session.day,
        "phase": ctx.session.phase.value,
        "data_file": str(ctx.store.path),
        "cache_file": str(ctx.focus_cache.path),
        "scheduler": ctx.scheduler.get_stats(),
    }
