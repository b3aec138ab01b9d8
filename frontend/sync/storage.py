"""
Persistence media for the dice configuration store.

Two media are available, tried in order:
- FileStorage (primary, reported as 'localStorage'): one file per key in a
  directory shared by every session and process on this machine.
- MemoryStorage (fallback, reported as 'sessionStorage'): private to one store.

When neither passes the probe the store runs in memory only
('unavailable').
"""
import logging
import os
import re
import tempfile
import threading
from pathlib import Path
from typing import Dict, Optional

from frontend.sync.models import StorageType
from frontend.utils.exceptions import StorageError

logger = logging.getLogger(__name__)

# Sentinel key used to probe a medium
PROBE_KEY = "__storage_test__"
PROBE_VALUE = "test"

# Keys map to file names, so keep them to a safe alphabet
_KEY_PATTERN = re.compile(r'^[A-Za-z0-9_\-.]+$')


class StorageBackend:
    """Key/value medium holding serialized records."""

    storage_type: StorageType = StorageType.UNAVAILABLE

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError


class FileStorage(StorageBackend):
    """Shared on-disk medium.

    Each key is stored as ``<directory>/<key>.json``. Writes go to a temp
    file in the same directory and are moved into place with os.replace,
    so readers never see a partial value.
    """

    storage_type = StorageType.LOCAL_STORAGE
    SUFFIX = ".json"

    def __init__(self, directory):
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        """Return the file path backing a key."""
        if not key or not _KEY_PATTERN.match(key):
            raise StorageError(f"Invalid storage key: {key!r}", storage_type=self.storage_type.value, key=key)
        return self.directory / f"{key}{self.SUFFIX}"

    def key_for(self, path) -> Optional[str]:
        """Return the key for a file path inside this directory, if any."""
        path = Path(path)
        if path.parent.resolve() != self.directory.resolve() or path.suffix != self.SUFFIX:
            return None
        return path.stem

    def get(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as e:
            raise StorageError(f"{path} is not valid UTF-8: {e}", storage_type=self.storage_type.value, key=key)
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}", storage_type=self.storage_type.value, key=key)

    def set(self, key: str, value: str) -> None:
        path = self.path_for(key)
        tmp_path = None
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=str(self.directory), prefix=f".{key}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_path, path)
            tmp_path = None
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}", storage_type=self.storage_type.value, key=key)
        finally:
            if tmp_path is not None:
                try:
                    os.unlink(tmp_path)
                except OSError:
                    logger.debug(f"Could not remove temp file {tmp_path}")

    def remove(self, key: str) -> None:
        path = self.path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageError(f"Failed to remove {path}: {e}", storage_type=self.storage_type.value, key=key)


class MemoryStorage(StorageBackend):
    """Private in-process medium (one per store)."""

    storage_type = StorageType.SESSION_STORAGE

    def __init__(self):
        self._items: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._items[key] = value

    def remove(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)


def probe_storage(backend: Optional[StorageBackend]) -> bool:
    """Check that a medium accepts a write, read and delete of a sentinel key."""
    if backend is None:
        return False
    try:
        backend.set(PROBE_KEY, PROBE_VALUE)
        ok = backend.get(PROBE_KEY) == PROBE_VALUE
        backend.remove(PROBE_KEY)
        return ok
    except (StorageError, OSError) as e:
        logger.warning(f"Storage probe failed for {backend.storage_type.value}: {e}")
        return False


def select_storage_type(
    primary: Optional[StorageBackend],
    fallback: Optional[StorageBackend],
) -> StorageType:
    """Pick the best working medium: primary, then fallback, then unavailable."""
    if probe_storage(primary):
        return StorageType.LOCAL_STORAGE
    if probe_storage(fallback):
        logger.info("Primary storage unavailable, using session fallback")
        return StorageType.SESSION_STORAGE
    logger.warning("No storage medium available, running in memory only")
    return StorageType.UNAVAILABLE
