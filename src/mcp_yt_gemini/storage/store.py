"""
JSON-file key/value store shared by the correlator and the delivery agents.

Every operation is best-effort: failures are logged and never raised to the
caller. Writers overwrite whole keys; merging of partial values happens in
memory before a write (see storage.settings).
"""

import os
import json
import time
import contextlib
from pathlib import Path
from typing import Any, Dict

import logging
logger = logging.getLogger(__name__)


MUTEX_STALE_SECS = 10
MUTEX_WAIT_SECS = 2.0


@contextlib.contextmanager
def _file_mutex(path: str, stale_secs: float = MUTEX_STALE_SECS, wait_timeout: float = MUTEX_WAIT_SECS):
    """
    Hold `path` as a lock file for the duration of the block.

    A lock file older than `stale_secs` belongs to a crashed writer and is
    taken over.
    """
    lock = Path(path)
    lock.parent.mkdir(parents=True, exist_ok=True)
    deadline = time.monotonic() + wait_timeout
    fd = None
    while fd is None:
        try:
            fd = os.open(lock, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
        except FileExistsError:
            try:
                age = time.time() - lock.stat().st_mtime
            except FileNotFoundError:
                continue
            if age > stale_secs:
                logger.warning(f"Removing stale store lock {lock} ({age:.0f}s old)")
                lock.unlink(missing_ok=True)
            elif time.monotonic() > deadline:
                raise TimeoutError(f"Store lock {lock} is held by another writer")
            else:
                time.sleep(0.02)
    try:
        yield
    finally:
        os.close(fd)
        lock.unlink(missing_ok=True)


class SettingsStore:
    """Persistent key/value store backed by a single JSON document."""

    def __init__(self, path: str):
        self.path = str(path)
        self._mutex_path = f"{self.path}.mutex"

    def _read_document(self) -> Dict[str, Any]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        return data if isinstance(data, dict) else {}

    def _write_document(self, document: Dict[str, Any]) -> None:
        """Write the document atomically using temp file + rename."""
        Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        tmp = f"{self.path}.tmp"
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(document, f, ensure_ascii=False, indent=2)
        os.replace(tmp, self.path)

    def get(self, key: str, default: Any = None) -> Any:
        """Return the stored value for `key`, or `default` if absent or unreadable."""
        try:
            document = self._read_document()
        except Exception as e:
            logger.warning(f"Failed to read storage key {key!r}: {e}")
            return default
        return document.get(key, default)

    def set(self, values: Dict[str, Any]) -> bool:
        """Overwrite each key in `values`. Returns False if the write failed."""
        try:
            with _file_mutex(self._mutex_path):
                try:
                    document = self._read_document()
                except ValueError:
                    logger.warning(f"Store file {self.path} is corrupt; rewriting it.")
                    document = {}
                document.update(values)
                self._write_document(document)
            return True
        except Exception as e:
            logger.warning(f"Failed to write storage keys {sorted(values)}: {e}")
            return False

    def remove(self, key: str) -> bool:
        """Delete `key`. Returns False if the write failed."""
        try:
            with _file_mutex(self._mutex_path):
                document = self._read_document()
                if key not in document:
                    return True
                del document[key]
                self._write_document(document)
            return True
        except Exception as e:
            logger.warning(f"Failed to remove storage key {key!r}: {e}")
            return False


__all__ = ["SettingsStore"]
