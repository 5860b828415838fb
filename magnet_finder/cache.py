from __future__ import annotations

"""
Result caches.

The search client only knows the :class:`Cache` protocol; these are the two
stores shipped with the package. Both are safe to share between threads.
"""

import json
import logging
import os
import tempfile
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Protocol

from .models import Result

LOGGER = logging.getLogger(__name__)


class CacheError(RuntimeError):
    """Raised when a cache store cannot read or write."""


@dataclass(frozen=True)
class CacheEntry:
    value: List[Result]
    created_at: float

    def is_fresh(self, now: float, max_age: float) -> bool:
        return now - self.created_at <= max_age


class Cache(Protocol):
    """Key to timestamped result list."""

    def get(self, key: str) -> Optional[CacheEntry]:
        ...

    def set(self, key: str, value: List[Result]) -> None:
        ...


class InMemoryCache:
    """Dictionary-backed cache that lives as long as the process."""

    def __init__(self, clock: Callable[[], float] = time.time, max_age: Optional[float] = None) -> None:
        self._clock = clock
        self._max_age = max_age
        self._lock = threading.Lock()
        self._entries: Dict[str, CacheEntry] = {}

    def get(self, key: str) -> Optional[CacheEntry]:
        with self._lock:
            return self._entries.get(key)

    def set(self, key: str, value: List[Result]) -> None:
        entry = CacheEntry(value=list(value), created_at=self._clock())
        with self._lock:
            self._entries = _drop_stale(self._entries, entry.created_at, self._max_age)
            self._entries[key] = entry

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class JsonFileCache:
    """
    Cache persisted as a single JSON document.

    The file is read on first use and rewritten in full on every ``set``
    (temp file plus rename, so readers never see half a document). Entries
    older than ``max_age`` are dropped on each write so the file stays small.
    """

    def __init__(
        self,
        path: str | Path,
        clock: Callable[[], float] = time.time,
        max_age: Optional[float] = None,
    ) -> None:
        """
        Parameters
        ----------
        path : str | Path
            Location of the JSON file. Parent directories are created on write.
        clock : callable, optional
            Wall-clock source for entry timestamps.
        max_age : float, optional
            Seconds after which entries are pruned on write. ``None`` keeps everything.
        """

        self.path = Path(path).expanduser()
        self._clock = clock
        self._max_age = max_age
        self._lock = threading.Lock()
        self._entries: Optional[Dict[str, CacheEntry]] = None

    def get(self, key: str) -> Optional[CacheEntry]:
        with self._lock:
            return self._load().get(key)

    def set(self, key: str, value: List[Result]) -> None:
        entry = CacheEntry(value=list(value), created_at=self._clock())
        with self._lock:
            entries = _drop_stale(self._load(), entry.created_at, self._max_age)
            entries[key] = entry
            self._write(entries)
            self._entries = entries

    def _load(self) -> Dict[str, CacheEntry]:
        if self._entries is not None:
            return self._entries

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            raw = {}
        except (OSError, json.JSONDecodeError) as exc:
            raise CacheError(f"Couldn't read cache file {self.path}: {exc}") from exc

        if not isinstance(raw, dict):
            raise CacheError(f"Cache file {self.path} does not hold a JSON object")

        entries: Dict[str, CacheEntry] = {}
        for key, item in raw.items():
            try:
                entries[key] = CacheEntry(
                    value=[Result.from_dict(result) for result in item["results"]],
                    created_at=float(item["created_at"]),
                )
            except (KeyError, TypeError, ValueError):
                LOGGER.warning("Dropping unreadable cache entry %r", key)

        self._entries = entries
        return entries

    def _write(self, entries: Dict[str, CacheEntry]) -> None:
        payload = {
            key: {
                "created_at": entry.created_at,
                "results": [result.to_dict() for result in entry.value],
            }
            for key, entry in entries.items()
        }
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".cache-", suffix=".json")
        except OSError as exc:
            raise CacheError(f"Couldn't write cache file {self.path}: {exc}") from exc

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle)
            os.replace(tmp_name, self.path)
        except (OSError, TypeError, ValueError) as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise CacheError(f"Couldn't write cache file {self.path}: {exc}") from exc


def _drop_stale(entries: Dict[str, CacheEntry], now: float, max_age: Optional[float]) -> Dict[str, CacheEntry]:
    """Copy of ``entries`` without the ones older than ``max_age``."""

    if max_age is None:
        return dict(entries)
    return {key: entry for key, entry in entries.items() if entry.is_fresh(now, max_age)}
