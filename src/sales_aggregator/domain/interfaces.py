"""Domain-level interfaces defining contracts for aggregation collaborators."""

from __future__ import annotations

import datetime as dt
from typing import List, Optional, Protocol

from .models import AggregatePayload, Employee, SalesPage, SaleType


class ISalesSource(Protocol):
    """Paginated query interface over the upstream sales listing."""

    async def fetch_page(
        self,
        store_id: str,
        sale_type: Optional[SaleType],
        start: dt.date,
        end: dt.date,
        page: int,
    ) -> SalesPage:
        """Return one page of raw sale records and its continuation signal."""


class IEmployeeDirectory(Protocol):
    """Listing query returning the known employees."""

    async def list_employees(self) -> List[Employee]:
        """Return (id, name) pairs; raise ``UpstreamError`` when unavailable."""


class IResultCache(Protocol):
    """TTL cache holding computed aggregate payloads."""

    def get(self, key: str) -> Optional[AggregatePayload]:
        """Return the cached payload for ``key`` if it has not expired."""

    def put(
        self, key: str, payload: AggregatePayload, ttl_seconds: float | None = None
    ) -> None:
        """Store ``payload`` under ``key`` for ``ttl_seconds``."""

    def clear(self) -> None:
        """Drop every cached payload."""
