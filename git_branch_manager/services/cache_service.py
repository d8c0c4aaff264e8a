"""In-memory cache for git command output."""
import time
from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable, Dict, List, Optional

from git_branch_manager.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class CacheEntry:
    """A cached value and the monotonic time at which it expires."""
    key: str
    value: Any
    expires_at: float


class CacheService:
    """Key/value store with per-entry expiry and substring invalidation.

    Expired entries are treated as absent by ``get`` and ``has`` as soon as
    they expire; ``purge_expired`` only reclaims memory.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        """Initialize an empty cache.

        Args:
            clock: Source of the current time in seconds (injectable for tests)
        """
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = Lock()

    def _live_entry(self, key: str) -> Optional[CacheEntry]:
        """Return the entry for key, purging it if it has expired. Caller holds the lock."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            del self._entries[key]
            logger.debug(f"Cache entry '{key}' expired")
            return None
        return entry

    def get(self, key: str) -> Optional[Any]:
        """Thread-safe cache read. Returns None on a miss."""
        with self._lock:
            entry = self._live_entry(key)
            return entry.value if entry else None

    def has(self, key: str) -> bool:
        """Check whether a live entry exists for key."""
        with self._lock:
            return self._live_entry(key) is not None

    def set(self, key: str, value: Any, ttl: float) -> None:
        """Store value under key for ttl seconds. A ttl of 0 or less stores nothing."""
        if ttl <= 0:
            return
        with self._lock:
            self._entries[key] = CacheEntry(key, value, self._clock() + ttl)

    def invalidate(self, pattern: Optional[str] = None) -> int:
        """Remove every key containing pattern, or everything when pattern is None.

        Returns:
            Number of entries removed
        """
        with self._lock:
            if pattern is None:
                removed = len(self._entries)
                self._entries.clear()
            else:
                matching = [key for key in self._entries if pattern in key]
                for key in matching:
                    del self._entries[key]
                removed = len(matching)

        if removed:
            logger.debug(f"Invalidated {removed} cache entries matching '{pattern or '*'}'")
        return removed

    def purge_expired(self) -> int:
        """Drop expired entries. Called periodically by the sweep task."""
        with self._lock:
            now = self._clock()
            expired = [key for key, entry in self._entries.items() if now >= entry.expires_at]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def keys(self) -> List[str]:
        """Keys of all live entries."""
        with self._lock:
            now = self._clock()
            return [key for key, entry in self._entries.items() if now < entry.expires_at]

    def __len__(self) -> int:
        return len(self.keys())
