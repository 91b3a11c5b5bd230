"""
Focus cache - small side file mirroring the running focus state

Format is plain text "<true|false>,<minutes>". The file is overwritten, never
appended, and is not authoritative: it may be deleted at any time.
"""

from pathlib import Path
from typing import Tuple, Union

from core.logger import get_logger

logger = get_logger(__name__)


def encode(is_running: bool, minutes: int) -> str:
    return f"{'true' if is_running else 'false'},{int(minutes)}"


def decode(text: str) -> Tuple[bool, int]:
    """Parse cache text; raises ValueError when malformed"""
    fields = text.strip().split(",")
    if len(fields) != 2:
        raise ValueError(f"expected '<bool>,<int>', got {text!r}")
    flag, minutes = fields[0].strip().lower(), fields[1].strip()
    if flag not in ("true", "false"):
        raise ValueError(f"invalid focus flag {fields[0]!r}")
    return flag == "true", int(minutes)


class FocusCache:
    """Best-effort persistence of (is_focus_running, focus_minutes_elapsed)"""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()

    def write(self, is_running: bool, minutes: int) -> bool:
        """Overwrite the cache; returns False instead of raising on I/O errors"""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(encode(is_running, minutes), encoding="utf-8")
            return True
        except OSError as e:
            logger.warning(f"Failed to write focus cache {self.path}: {e}")
            return False

    def read(self) -> Tuple[bool, int]:
        """Current cache value, (False, 0) when missing or unreadable"""
        try:
            return decode(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return False, 0
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable focus cache {self.path}: {e}")
            return False, 0

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Failed to remove focus cache {self.path}: {e}")
