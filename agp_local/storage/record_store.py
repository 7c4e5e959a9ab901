"""
A file-per-record JSON store for pydantic models.

Each record type lives in its own directory and each record in its own file,
addressed by a string key. Failures are contained at this boundary: callers
receive booleans or ``None`` and never raw OS errors.
"""

import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Generic, TypeVar

from pathvalidate import is_valid_filename
from pydantic import BaseModel, ValidationError

from agp_local.exceptions import DeserializationError, StoreIOError, StoreWriteError
from agp_local.utils.path import create_dir

log = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


class RecordStore(Generic[RecordT]):
    """
    Manages a directory of JSON record files for a single model type.

    Writes go to a temporary sibling file which then replaces the target, so a
    failed write leaves the previous record intact. Writes and deletes for the
    same key are serialized; different keys do not block each other.
    """

    SUFFIX = ".json"

    def __init__(
        self,
        base_dir: Path,
        model: type[RecordT],
        name_template: str = "{key}",
    ):
        """
        Initializes the store.

        Args:
            base_dir: The directory holding this record type's files.
            model: The pydantic model class records are validated against.
            name_template: Maps a key to a file stem; must contain ``{key}``.
        """
        if "{key}" not in name_template:
            raise ValueError("name_template must contain '{key}'.")
        self.base_dir = base_dir
        self.model = model
        self.name_template = name_template
        self._dir_ready = False
        self._key_locks: dict[str, threading.Lock] = {}
        self._key_locks_main = threading.Lock()

    def _ensure_dir(self) -> None:
        """Creates the record directory on first use."""
        if not self._dir_ready:
            create_dir(self.base_dir)
            self._dir_ready = True

    def _get_key_lock(self, key: str) -> threading.Lock:
        with self._key_locks_main:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._key_locks[key] = lock
            return lock

    def path_for(self, key: str) -> Path:
        """Returns the file path a record with ``key`` is stored at."""
        return self.base_dir / f"{self.name_template.format(key=key)}{self.SUFFIX}"

    def _glob_pattern(self) -> str:
        return f"{self.name_template.format(key='*')}{self.SUFFIX}"

    def _is_valid_key(self, key: str) -> bool:
        return bool(key) and is_valid_filename(self.name_template.format(key=key))

    def _read(self, path: Path) -> RecordT:
        """Reads and validates a single record file."""
        try:
            raw = path.read_text(encoding="utf-8")
            return self.model.model_validate_json(raw)
        except (OSError, UnicodeDecodeError, ValidationError, ValueError) as e:
            raise DeserializationError(f"Unreadable record '{path.name}': {e}") from e

    def _write(self, path: Path, record: RecordT) -> None:
        """Writes ``record`` to a temp file and swaps it into place."""
        temp_path: Path | None = None
        try:
            payload = record.model_dump_json(indent=2)
            fd, temp_name = tempfile.mkstemp(
                dir=path.parent, prefix=f"{path.name}.", suffix=".tmp"
            )
            temp_path = Path(temp_name)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, path)
        except OSError as e:
            raise StoreWriteError(f"Failed to write '{path.name}': {e}") from e
        finally:
            if temp_path is not None and temp_path.exists():
                try:
                    os.remove(temp_path)
                except OSError:
                    pass

    def put(self, key: str, record: RecordT) -> bool:
        """Saves ``record`` under ``key``, replacing any previous record."""
        if not self._is_valid_key(key):
            log.error(f"Refusing to store record under invalid key '{key}'.")
            return False
        try:
            self._ensure_dir()
            with self._get_key_lock(key):
                self._write(self.path_for(key), record)
            return True
        except (StoreIOError, OSError) as e:
            log.error(f"Record store write failed for key '{key}': {e}")
            return False

    def get(self, key: str) -> RecordT | None:
        """
        Retrieves a record. Returns None if the key is not found or the stored
        record cannot be read.
        """
        if not self._is_valid_key(key):
            return None
        path = self.path_for(key)
        if not path.is_file():
            return None
        try:
            return self._read(path)
        except DeserializationError as e:
            log.warning(f"{e}")
            return None

    def exists(self, key: str) -> bool:
        return self._is_valid_key(key) and self.path_for(key).is_file()

    def list_all(self) -> list[RecordT]:
        """
        Loads every readable record in the directory. Unreadable files are
        logged and skipped.
        """
        if not self.base_dir.is_dir():
            return []

        records = []
        skipped = 0
        for path in sorted(self.base_dir.glob(self._glob_pattern())):
            if not path.is_file():
                continue
            try:
                records.append(self._read(path))
            except DeserializationError as e:
                skipped += 1
                log.debug(f"Skipping record: {e}")
        if skipped:
            log.warning(
                f"Skipped {skipped} unreadable record(s) in '{self.base_dir}'."
            )
        return records

    def delete(self, key: str) -> bool:
        """Removes the record for ``key``. Returns whether a file was removed."""
        if not self._is_valid_key(key):
            return False
        path = self.path_for(key)
        with self._get_key_lock(key):
            if not path.is_file():
                return False
            try:
                path.unlink()
                return True
            except OSError as e:
                log.error(f"Failed to delete record '{path.name}': {e}")
                return False
