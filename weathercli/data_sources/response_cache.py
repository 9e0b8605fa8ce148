"""In-memory TTL cache for decoded API responses, keyed by request URL."""

import copy
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from utils.logging_utils import get_tagged_logger, mask_url

logger = get_tagged_logger(__name__, tag="data_sources/response_cache")

DEFAULT_TTL_SECONDS = 300.0


@dataclass
class CacheEntry:
    """Cached payload with the clock reading at which it was stored."""
    payload: Any
    inserted_at: float


class ResponseCache:
    """Thread-safe TTL cache. Stale entries are evicted when read, never swept."""

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS,
                 clock: Callable[[], float] = time.monotonic) -> None:
        """Initialize with a freshness window (seconds) and a monotonic clock."""
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def _is_fresh(self, entry: CacheEntry) -> bool:
        return (self._clock() - entry.inserted_at) < self.ttl

    def get(self, key: str) -> Optional[Any]:
        """Return a copy of the cached payload, or None if missing or stale."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if not self._is_fresh(entry):
                del self._entries[key]
                logger.debug("Evicted stale cache entry for %s", mask_url(key))
                return None
            return copy.deepcopy(entry.payload)

    def put(self, key: str, payload: Any) -> None:
        """Insert or replace the entry for `key`, stamped with the current time."""
        entry = CacheEntry(payload=copy.deepcopy(payload), inserted_at=self._clock())
        with self._lock:
            self._entries[key] = entry

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.info("Cleared %d cached responses", count)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        # Presence only; freshness is decided by get().
        with self._lock:
            return key in self._entries
