"""
Error types raised by the core layer
Handlers convert these into OperationResponse models for the UI
"""

from typing import Optional


class FormatError(ValueError):
    """Time text is not a well-formed HH:MM value"""

    def __init__(self, text: str, reason: str = ""):
        self.text = text
        self.reason = reason
        message = f"Invalid time '{text}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class InvalidIntervalError(ValueError):
    """An end time precedes its start time"""


class CorruptRecordError(ValueError):
    """A line of the record store cannot be parsed into a DayRecord"""

    def __init__(self, line_number: int, detail: str = "", path: Optional[str] = None):
        self.line_number = line_number
        self.detail = detail
        self.path = path
        location = f"{path}:{line_number}" if path else f"line {line_number}"
        super().__init__(f"Corrupt record at {location}: {detail}")


class StoreWriteError(OSError):
    """Appending a record to the store failed"""


class SessionNotClosableError(RuntimeError):
    """close() was called before both start and end times were set"""
