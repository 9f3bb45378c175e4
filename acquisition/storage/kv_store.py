"""Durable key-value stores for proxy reputation, cached content and settings.

Values are JSON-compatible and are stored serialized, so every ``get`` returns
a fresh object. ``JsonFileStore`` keeps one JSON file per key and writes
atomically; both stores accept an optional byte quota that mirrors the
browser storage limits the acquisition layer was designed around.

``ResilientStore`` is what the acquisition components talk to: it never
raises. Read failures return the default, a quota error evicts the cached
content blob and retries the write once, and any other write failure is
logged and reported as ``False``.
"""

from __future__ import annotations

import copy
import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Any, Protocol

from acquisition.middleware.error_handler import StorageError, StorageQuotaError

logger = logging.getLogger(__name__)

_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]+$")

CACHED_CONTENT_KEY = "cached_content"


class KeyValueStore(Protocol):
    """Minimal durable store contract."""

    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def delete(self, key: str) -> None: ...


def _serialize(key: str, value: Any) -> str:
    try:
        return json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise StorageError(f"Value for '{key}' is not JSON serializable", key=key) from exc


def _validate_key(key: str) -> None:
    if not _KEY_RE.match(key):
        raise StorageError(f"Invalid storage key '{key}'", key=key)


class MemoryStore:
    """In-process store. Used for tests and headless one-shot runs."""

    def __init__(self, max_bytes: int | None = None) -> None:
        self._data: dict[str, str] = {}
        self._max_bytes = max_bytes

    def get(self, key: str, default: Any = None) -> Any:
        raw = self._data.get(key)
        if raw is None:
            return copy.deepcopy(default)
        return json.loads(raw)

    def set(self, key: str, value: Any) -> None:
        _validate_key(key)
        payload = _serialize(key, value)
        if self._max_bytes is not None:
            used = sum(len(v.encode("utf-8")) for k, v in self._data.items() if k != key)
            if used + len(payload.encode("utf-8")) > self._max_bytes:
                raise StorageQuotaError(key=key, max_bytes=self._max_bytes)
        self._data[key] = payload

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)


class JsonFileStore:
    """One JSON file per key under *directory*, written atomically.

    ``fsync`` flushes each write to disk before the rename. Writes run on
    the caller's thread, so it is off unless configured.
    """

    def __init__(
        self, directory: str, max_bytes: int | None = None, fsync: bool = False
    ) -> None:
        self._directory = Path(directory)
        self._max_bytes = max_bytes
        self._fsync = fsync

    def _path(self, key: str) -> Path:
        _validate_key(key)
        return self._directory / f"{key}.json"

    def get(self, key: str, default: Any = None) -> Any:
        path = self._path(key)
        if not path.exists():
            return copy.deepcopy(default)
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise StorageError(f"Failed to read '{key}': {exc}", key=key) from exc

    def set(self, key: str, value: Any) -> None:
        path = self._path(key)
        payload = _serialize(key, value).encode("utf-8")

        if self._max_bytes is not None:
            used = self._used_bytes(exclude=path)
            if used + len(payload) > self._max_bytes:
                raise StorageQuotaError(key=key, max_bytes=self._max_bytes)

        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            self._atomic_write(path, payload)
        except OSError as exc:
            raise StorageError(f"Failed to write '{key}': {exc}", key=key) from exc

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Failed to delete '{key}': {exc}", key=key) from exc

    def _used_bytes(self, exclude: Path) -> int:
        if not self._directory.exists():
            return 0
        return sum(
            p.stat().st_size
            for p in self._directory.glob("*.json")
            if p != exclude
        )

    def _atomic_write(self, path: Path, payload: bytes) -> None:
        """Write to a temp file in the same directory, then rename over *path*."""
        tmp_path = ""
        try:
            with tempfile.NamedTemporaryFile(
                "wb", delete=False, dir=self._directory, suffix=".tmp"
            ) as tmp:
                tmp.write(payload)
                if self._fsync:
                    tmp.flush()
                    os.fsync(tmp.fileno())
                tmp_path = tmp.name
            os.replace(tmp_path, path)
            tmp_path = ""
        finally:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)


class ResilientStore:
    """Wraps a store so acquisition code never sees a storage exception.

    Parameters
    ----------
    store:
        The underlying durable store.
    evict_keys:
        Keys dropped to free space when a write hits the quota. The cached
        content blob is by far the largest value, so it goes first.
    """

    def __init__(
        self,
        store: KeyValueStore,
        evict_keys: tuple[str, ...] = (CACHED_CONTENT_KEY,),
    ) -> None:
        self._store = store
        self._evict_keys = evict_keys

    @property
    def inner(self) -> KeyValueStore:
        return self._store

    def get(self, key: str, default: Any = None) -> Any:
        try:
            return self._store.get(key, default)
        except StorageError as exc:
            logger.warning("Storage read failed for '%s': %s — using default", key, exc)
            return copy.deepcopy(default)

    def set(self, key: str, value: Any) -> bool:
        """Persist *value*; returns False if the write could not be completed."""
        try:
            self._store.set(key, value)
            return True
        except StorageQuotaError:
            logger.warning("Storage quota exceeded writing '%s' — clearing cached content", key)
            for evict in self._evict_keys:
                self.delete(evict)
            try:
                self._store.set(key, value)
                return True
            except StorageError as exc:
                logger.error("Storage write for '%s' failed after eviction: %s", key, exc)
                return False
        except StorageError as exc:
            logger.error("Storage write failed for '%s': %s", key, exc)
            return False

    def delete(self, key: str) -> None:
        try:
            self._store.delete(key)
        except StorageError as exc:
            logger.error("Storage delete failed for '%s': %s", key, exc)
