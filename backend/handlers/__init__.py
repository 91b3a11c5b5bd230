"""
Command handlers - the keyboard command surface of the tracker

Each handler takes the TrackerContext (and an optional request body) and
returns a response model; handlers never raise to the UI. Handlers register
themselves with ``command_handler`` so the UI can dispatch by name.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Type

from pydantic import ValidationError

from core.context import TrackerContext
from core.logger import get_logger
from models.base import BaseModel, OperationResponse, TimedOperationResponse

logger = get_logger(__name__)


@dataclass
class CommandEntry:
    name: str
    func: Callable[..., OperationResponse]
    body: Optional[Type[BaseModel]] = None
    description: str = ""


COMMAND_REGISTRY: Dict[str, CommandEntry] = {}


def command_handler(
    name: str,
    body: Optional[Type[BaseModel]] = None,
    description: str = "",
):
    """Register a handler under ``name``"""

    def decorator(func: Callable[..., OperationResponse]) -> Callable[..., OperationResponse]:
        if name in COMMAND_REGISTRY:
            raise ValueError(f"Command already registered: {name}")
        COMMAND_REGISTRY[name] = CommandEntry(
            name=name,
            func=func,
            body=body,
            description=description or (func.__doc__ or "").strip().splitlines()[0],
        )
        return func

    return decorator


def _failure(message: str, error: str) -> TimedOperationResponse:
    return TimedOperationResponse(
        success=False,
        message=message,
        error=error,
        timestamp=datetime.now().isoformat(),
    )


def dispatch(
    ctx: TrackerContext,
    name: str,
    payload: Optional[Dict[str, Any]] = None,
) -> OperationResponse:
    """Validate ``payload`` against the command's body model and run it"""
    entry = COMMAND_REGISTRY.get(name)
    if entry is None:
        logger.warning(f"Unknown command: {name}")
        return _failure("Unknown command", name)

    args = []
    if entry.body is not None:
        try:
            args.append(entry.body.model_validate(payload or {}))
        except ValidationError as e:
            logger.warning(f"Invalid payload for {name}: {e}")
            return _failure(f"Invalid input for {name}", str(e))

    try:
        return entry.func(ctx, *args)
    except Exception as e:
        logger.error(f"Unexpected error in command {name}: {e}", exc_info=True)
        return _failure(f"Command {name} failed", str(e))


# Handler modules register on import; keep below the registry definitions
from . import history, session  # noqa: E402,F401

__all__ = ["COMMAND_REGISTRY", "CommandEntry", "command_handler", "dispatch"]
