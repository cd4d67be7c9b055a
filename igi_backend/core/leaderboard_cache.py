"""Short-lived in-memory cache for leaderboard rows, invalidated on every score write."""
import threading
import time
import logging
from collections import OrderedDict
from typing import Any, Dict, List, Optional

from igi_backend.config import settings

logger = logging.getLogger(__name__)


class LeaderboardCache:
    def __init__(self, ttl_seconds: float = 5.0, max_size: int = 10):
        self.ttl_seconds = ttl_seconds
        self.max_size = max_size
        self._lock = threading.Lock()
        self._entries: "OrderedDict[str, tuple]" = OrderedDict()

    @staticmethod
    def _key(round_number: Optional[int] = None) -> str:
        return f"leaderboard:{round_number or 'all'}"

    def get(self, round_number: Optional[int] = None) -> Optional[List[Dict[str, Any]]]:
        key = self._key(round_number)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            rows, stored_at = entry
            if time.monotonic() - stored_at >= self.ttl_seconds:
                del self._entries[key]
                return None
            return [dict(row) for row in rows]

    def set(self, rows: List[Dict[str, Any]], round_number: Optional[int] = None) -> None:
        key = self._key(round_number)
        with self._lock:
            if key not in self._entries and len(self._entries) >= self.max_size:
                self._entries.popitem(last=False)
            self._entries[key] = ([dict(row) for row in rows], time.monotonic())

    def invalidate(self, round_number: Optional[int] = None) -> None:
        with self._lock:
            self._entries.pop(self._key(round_number), None)

    def invalidate_all(self) -> None:
        with self._lock:
            self._entries.clear()
        logger.debug("Leaderboard cache cleared")


leaderboard_cache = LeaderboardCache(
    ttl_seconds=settings.leaderboard_cache_ttl_seconds,
    max_size=settings.leaderboard_cache_max_size,
)
