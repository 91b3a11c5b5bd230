"""
Record Store - append-only JSON Lines persistence for day records

Each line of the backing file is one DayRecord. Lines are only ever
appended; there is no update or delete.
"""

import json
import os
import threading
from pathlib import Path
from typing import List, Union

from pydantic import ValidationError

from core.errors import CorruptRecordError, StoreWriteError
from core.logger import get_logger
from models.entities import DayRecord

logger = get_logger(__name__)


class RecordStore:
    """
    File-backed log of DayRecords

    Example:
        store = RecordStore(Path("data/worktime.jsonl"))
        store.append(record)
        records = store.read_all()
    """

    def __init__(self, path: Union[str, Path]):
        """
        Initialize store with its backing file

        Args:
            path: JSON Lines file; created on first append
        """
        self.path = Path(path).expanduser()
        # At most one in-flight append, even if a caller offloads writes to a worker
        self._append_lock = threading.Lock()
        logger.debug(f"Initialized {self.__class__.__name__} with path: {self.path}")

    def exists(self) -> bool:
        return self.path.exists()

    def read_all(self) -> List[DayRecord]:
        """
        Read every record in append order

        Returns:
            List of DayRecord; empty if the file does not exist

        Raises:
            CorruptRecordError: on the first line that is not a valid record
        """
        if not self.path.exists():
            return []

        records: List[DayRecord] = []
        # Binary, so an undecodable line is reported with its line number
        with open(self.path, "rb") as f:
            for line_number, raw in enumerate(f, start=1):
                if not raw.strip():
                    continue
                records.append(self._parse_line(raw, line_number))

        logger.debug(f"Read {len(records)} records from {self.path}")
        return records

    def _parse_line(self, raw: bytes, line_number: int) -> DayRecord:
        try:
            line = raw.decode("utf-8").strip()
        except UnicodeDecodeError as e:
            logger.error(f"Invalid UTF-8 in {self.path} line {line_number}: {e}")
            raise CorruptRecordError(line_number, "not valid UTF-8", str(self.path)) from e

        try:
            obj = json.loads(line)
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in {self.path} line {line_number}: {e}")
            raise CorruptRecordError(line_number, str(e), str(self.path)) from e

        if not isinstance(obj, dict):
            raise CorruptRecordError(
                line_number, f"expected an object, got {type(obj).__name__}", str(self.path)
            )

        try:
            return DayRecord.model_validate(obj)
        except ValidationError as e:
            logger.error(f"Invalid record in {self.path} line {line_number}: {e}")
            raise CorruptRecordError(
                line_number, f"{e.error_count()} validation error(s)", str(self.path)
            ) from e

    def append(self, record: DayRecord) -> None:
        """
        Append one record as a compact JSON line

        The containing directory and file are created if absent. The line is
        flushed and fsynced before returning.

        Raises:
            StoreWriteError: if the record could not be written
        """
        line = record.to_json_line() + "\n"

        with self._append_lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with open(self.path, "a", encoding="utf-8") as f:
                    f.write(line)
                    f.flush()
                    os.fsync(f.fileno())
            except OSError as e:
                logger.error(f"Failed to append record for {record.date} to {self.path}: {e}")
                raise StoreWriteError(f"Could not write {self.path}: {e}") from e

        logger.info(f"Appended record for {record.date} to {self.path}")
