from __future__ import annotations

import time
from typing import Callable, Generic, Hashable, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class TTLCache(Generic[K, V]):
    """In-process key/value cache with an optional TTL.

    Entries are never evicted on expiry: `get()` ignores expired entries but
    `get_stale()` still returns them, so a caller whose refresh failed can
    fall back to the last good value. `ttl_seconds=None` means entries stay
    valid until invalidated.

    One instance is built per process (see `fieldreports.services.container`)
    and handed to the components that share it.
    """

    def __init__(self, ttl_seconds: float | None = None, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[K, tuple[V, float]] = {}

    def __contains__(self, key: K) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def is_valid(self, key: K, now: float | None = None) -> bool:
        entry = self._entries.get(key)
        if entry is None:
            return False
        if self.ttl_seconds is None:
            return True
        now = self._clock() if now is None else now
        return (now - entry[1]) < self.ttl_seconds

    def get(self, key: K) -> V | None:
        if not self.is_valid(key):
            return None
        return self._entries[key][0]

    def get_stale(self, key: K) -> V | None:
        entry = self._entries.get(key)
        return entry[0] if entry is not None else None

    def set(self, key: K, value: V) -> None:
        self._entries[key] = (value, self._clock())

    def invalidate(self, key: K | None = None) -> None:
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)
