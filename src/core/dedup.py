"""Deduplication helpers (core domain)."""

from __future__ import annotations

import time
from typing import Any, Callable, Dict, Hashable, Optional, Tuple


def dedup_key(source_id: str, canonical_id: str) -> str:
    """Return the cache key marking one source item as delivered."""

    return f"{source_id}@{canonical_id}"


class TTLCache:
    """In-memory map whose entries expire after a default lifetime.

    Expired entries are invisible to lookups right away and are dropped from
    memory by ``purge_expired``, which the app calls periodically. The cache
    is rebuilt empty on restart.
    """

    def __init__(self, default_ttl: float, clock: Callable[[], float] = time.monotonic) -> None:
        if default_ttl <= 0:
            raise ValueError("default_ttl must be positive")
        self._default_ttl = default_ttl
        self._clock = clock
        self._entries: Dict[Hashable, Tuple[Any, float]] = {}

    def _live(self, key: Hashable) -> Optional[Tuple[Any, float]]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry[1] <= self._clock():
            return None
        return entry

    def get(self, key: Hashable) -> Optional[Any]:
        entry = self._live(key)
        return entry[0] if entry else None

    def __contains__(self, key: Hashable) -> bool:
        return self._live(key) is not None

    def set(self, key: Hashable, value: Any, ttl: Optional[float] = None) -> None:
        lifetime = self._default_ttl if ttl is None else ttl
        self._entries[key] = (value, self._clock() + lifetime)

    def add(self, key: Hashable, value: Any = True) -> bool:
        """Insert ``key`` unless it is live; return True when inserted."""

        if self._live(key) is not None:
            return False
        self.set(key, value)
        return True

    def purge_expired(self) -> int:
        """Drop expired entries and return how many were removed."""

        now = self._clock()
        expired = [key for key, (_, expires_at) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)
