"""In-memory response cache keyed by request URL."""

import threading
import time
from typing import Any

from src.utils.config import config


class ApiCache:
    """
    Time-to-live cache for upstream API responses.

    Expired entries are evicted when they are read, and all of them are
    swept whenever a new entry is stored. Access is guarded by a
    lock since FastAPI runs sync endpoints in a thread pool.
    """

    def __init__(self, ttl_seconds: float | None = None):
        """
        Initialize the cache.

        Args:
            ttl_seconds: Entry lifetime; defaults to the configured CACHE_TTL
        """
        self.ttl_seconds = config.proxy.cache_ttl if ttl_seconds is None else ttl_seconds
        # Format: {url: (stored_at, data)}
        self._entries: dict[str, tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, url: str) -> Any | None:
        """Return cached data for a URL, or None when absent or expired."""
        with self._lock:
            entry = self._entries.get(url)
            if entry is None:
                return None

            stored_at, data = entry
            if time.time() - stored_at < self.ttl_seconds:
                return data

            del self._entries[url]
            return None

    def set(self, url: str, data: Any) -> None:
        """Store data for a URL, dropping every entry that has expired."""
        now = time.time()
        with self._lock:
            expired = [
                key
                for key, (stored_at, _) in self._entries.items()
                if now - stored_at >= self.ttl_seconds
            ]
            for key in expired:
                del self._entries[key]
            self._entries[url] = (now, data)

    def clear(self, url: str) -> None:
        with self._lock:
            self._entries.pop(url, None)

    def clear_all(self) -> None:
        with self._lock:
            self._entries.clear()

    def stats(self) -> dict[str, Any]:
        """
        Summarize cache contents.

        Returns:
            Dictionary with total and valid entry counts and per-URL age in ms
        """
        now = time.time()
        with self._lock:
            entries = [
                {
                    "url": url,
                    "age_ms": int((now - stored_at) * 1000),
                    "valid": now - stored_at < self.ttl_seconds,
                }
                for url, (stored_at, _) in self._entries.items()
            ]

        return {
            "total_entries": len(entries),
            "valid_entries": len([e for e in entries if e["valid"]]),
            "entries": entries,
        }


# Global cache instance
api_cache = ApiCache()
