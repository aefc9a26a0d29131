"""In-process cache with per-entry expiry.

Entries are replaced on ``put`` and never evicted; an expired entry is just
ignored by ``get`` until it is overwritten.
"""

import time
from typing import Any, Callable, Dict, NamedTuple, Optional


class CacheEntry(NamedTuple):
    expires_at: float
    data: Any


class TimedCache:
    def __init__(self, ttl: float, clock: Callable[[], float] = time.time):
        self.ttl = ttl
        self.clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    def get(self, key: str) -> Optional[Any]:
        """Return the cached data for ``key``, or None if missing or expired."""
        entry = self._entries.get(key)
        if entry is None or self.clock() >= entry.expires_at:
            return None
        return entry.data

    def put(self, key: str, data: Any, ttl: Optional[float] = None) -> None:
        if ttl is None:
            ttl = self.ttl
        self._entries[key] = CacheEntry(self.clock() + ttl, data)

    def __len__(self) -> int:
        return len(self._entries)
