"""LRU cache for weather analysis results."""

import hashlib
import json
import logging
import time
from collections import OrderedDict
from typing import Any, Dict, NamedTuple, Optional

logger = logging.getLogger(__name__)


class _Entry(NamedTuple):
    value: Any
    stored_at: float


class ResponseCache:
    """LRU cache of analyses keyed by intent and resolved parameters.

    Entries older than ttl_seconds are dropped on read.
    """

    def __init__(self, max_size: int = 100, ttl_seconds: int = 600):
        self.max_size = max_size
        self.ttl_seconds = ttl_seconds
        self.cache: "OrderedDict[str, _Entry]" = OrderedDict()
        self.hits = 0
        self.misses = 0

    def create_key(self, intent: str, parameters: Dict[str, Any]) -> str:
        """Stable key for a query; parameter order does not matter."""
        canonical = json.dumps(
            {"intent": intent, "parameters": parameters},
            sort_keys=True,
            ensure_ascii=False,
            default=str,
        )
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()

    def get(self, key: str) -> Optional[Any]:
        """Return a live entry, or None on a miss or expiry."""
        entry = self.cache.get(key)
        if entry is not None and time.time() - entry.stored_at > self.ttl_seconds:
            logger.debug(f"Cache entry expired: {key[:12]}")
            del self.cache[key]
            entry = None

        if entry is None:
            self.misses += 1
            return None

        self.cache.move_to_end(key)
        self.hits += 1
        return entry.value

    def set(self, key: str, value: Any) -> None:
        if key not in self.cache and self.cache and len(self.cache) >= self.max_size:
            self.cache.popitem(last=False)
        self.cache[key] = _Entry(value, time.time())
        self.cache.move_to_end(key)

    def clear(self) -> None:
        self.cache.clear()
        self.hits = 0
        self.misses = 0

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        lookups = self.hits + self.misses
        return {
            "size": len(self.cache),
            "max_size": self.max_size,
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": self.hits / lookups if lookups else 0,
            "ttl_seconds": self.ttl_seconds,
        }
