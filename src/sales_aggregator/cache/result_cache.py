"""In-memory TTL caches for aggregate payloads.

Expiry is evaluated lazily when an entry is read; nothing runs in the
background. Neither cache takes a lock: concurrent writers race and the last
write wins.
"""

from __future__ import annotations

import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Optional

from sales_aggregator.domain.models import AggregatePayload

Clock = Callable[[], float]

DEFAULT_CAPACITY = 32


@dataclass(frozen=True)
class CacheEntry:
    payload: AggregatePayload
    expires_at: float


class _TTLCache:
    def __init__(self, ttl_seconds: float | None, clock: Clock) -> None:
        if ttl_seconds is not None and ttl_seconds < 0:
            raise ValueError("ttl_seconds cannot be negative")
        self._ttl = ttl_seconds
        self._clock = clock

    def _new_entry(
        self, payload: AggregatePayload, ttl_seconds: float | None
    ) -> Optional[CacheEntry]:
        ttl = self._ttl if ttl_seconds is None else ttl_seconds
        if not ttl or ttl <= 0:
            return None
        return CacheEntry(payload=payload, expires_at=self._clock() + ttl)

    def _is_fresh(self, entry: CacheEntry) -> bool:
        return self._clock() < entry.expires_at


class SingleSlotResultCache(_TTLCache):
    """Holds only the most recently stored payload, whatever its key.

    Callers with different parameters inside the TTL window receive the same
    payload. Prefer ``KeyedResultCache`` unless that behaviour is wanted.
    """

    def __init__(
        self, ttl_seconds: float | None = None, *, clock: Clock = time.monotonic
    ) -> None:
        super().__init__(ttl_seconds, clock)
        self._entry: Optional[CacheEntry] = None

    def get(self, key: str | None = None) -> Optional[AggregatePayload]:
        entry = self._entry
        if entry is None or not self._is_fresh(entry):
            return None
        return entry.payload

    def put(
        self,
        key: str | None,
        payload: AggregatePayload,
        ttl_seconds: float | None = None,
    ) -> None:
        entry = self._new_entry(payload, ttl_seconds)
        if entry is not None:
            self._entry = entry

    def clear(self) -> None:
        self._entry = None


class KeyedResultCache(_TTLCache):
    """Per-key TTL entries in a mapping bounded by ``capacity``.

    Storing beyond capacity evicts the oldest inserted entries first.
    """

    def __init__(
        self,
        ttl_seconds: float | None = None,
        *,
        capacity: int = DEFAULT_CAPACITY,
        clock: Clock = time.monotonic,
    ) -> None:
        super().__init__(ttl_seconds, clock)
        if capacity <= 0:
            raise ValueError("capacity must be greater than zero")
        self._capacity = capacity
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()

    def get(self, key: str) -> Optional[AggregatePayload]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not self._is_fresh(entry):
            self._entries.pop(key, None)
            return None
        return entry.payload

    def put(
        self, key: str, payload: AggregatePayload, ttl_seconds: float | None = None
    ) -> None:
        entry = self._new_entry(payload, ttl_seconds)
        if entry is None:
            return
        self._entries.pop(key, None)
        self._entries[key] = entry
        while len(self._entries) > self._capacity:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
