"""
Local Storage Implementations

MemoryKeyValueStore keeps everything in a dict (tests, throwaway sessions).
JsonFileKeyValueStore keeps a single JSON object on disk mapping each key to
its raw string value, which mirrors how the browser's local storage held the
data before: one opaque string per key.

Writes to the file are atomic (write to .tmp, then os.replace), so a crash
mid-write leaves the previous state intact.
A file that no longer parses is moved aside, never overwritten.
"""

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

import structlog

from bookkeeping.services.storage.interface import KeyValueStore, StorageError


logger = structlog.get_logger(__name__)

CORRUPT_FILE_SUFFIX = ".corrupt-"


class MemoryKeyValueStore(KeyValueStore):
    """Dict-backed store. Nothing survives the process."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class JsonFileKeyValueStore(KeyValueStore):
    """
    Key-value store persisted as one JSON file.

    The whole file is re-read on every get() so that two Streamlit sessions
    on the same machine see each other's writes. The data set is small
    (one bookkeeping office), so this is cheap.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        """
        Returns {} on a missing file.

        A corrupt file is moved aside to "<name>.corrupt-<timestamp>" before
        {} is returned, so the next write can never destroy its contents.
        """
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            self._quarantine(str(e))
            return {}
        except OSError as e:
            raise StorageError(f"Failed to read {self._path}: {e}")

        if not isinstance(data, dict):
            self._quarantine("top-level value is not an object")
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _quarantine(self, reason: str) -> Path:
        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
        backup = self._path.with_name(f"{self._path.name}{CORRUPT_FILE_SUFFIX}{stamp}")
        try:
            os.replace(self._path, backup)
        except OSError as e:
            # Never report {} while the corrupt file is still in place
            raise StorageError(f"Corrupt file {self._path} could not be moved aside: {e}")
        logger.warning(
            "storage_file_corrupt",
            path=str(self._path),
            backup=str(backup),
            error=reason,
        )
        return backup

    def _write_all(self, data: dict[str, str]) -> None:
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self._path)
        except OSError as e:
            tmp.unlink(missing_ok=True)
            raise StorageError(f"Failed to write {self._path}: {e}")

    def get(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def remove(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)

    def keys(self) -> list[str]:
        return list(self._read_all())
