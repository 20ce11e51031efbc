"""Aggregation engine fanning paginated streams out across stores and types."""

from __future__ import annotations

import asyncio
import datetime as dt
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from pydantic import ValidationError as PydanticValidationError

from sales_aggregator.domain.exceptions import (
    ConfigurationError,
    UpstreamError,
    ValidationError,
)
from sales_aggregator.domain.interfaces import IEmployeeDirectory, IResultCache
from sales_aggregator.domain.models import (
    AggregatePayload,
    Employee,
    Period,
    ReportQuery,
    ResolvedQuery,
    Sale,
    SaleType,
)
from sales_aggregator.engine.paginator import Paginator
from sales_aggregator.engine.reduction import SalesReducer
from sales_aggregator.normalization.normalizer import (
    FieldNormalizer,
    directory_from_employees,
    directory_from_records,
)
from sales_aggregator.utils.dates import current_month_period

RawRecords = List[Dict[str, Any]]


class AggregationEngine:
    """Fetches, normalizes and reduces sales into an ``AggregatePayload``.

    Every (store, sale type) stream is paged sequentially, while distinct
    streams run concurrently and are joined before reduction. A filter of
    ``all`` always requests the three sale types explicitly. The first failing
    stream fails the whole aggregation; nothing partial is returned or cached.
    """

    def __init__(
        self,
        paginator: Paginator,
        normalizer: FieldNormalizer,
        *,
        directory: Optional[IEmployeeDirectory] = None,
        reducer: Optional[SalesReducer] = None,
        cache: Optional[IResultCache] = None,
        default_store_ids: Sequence[str] = (),
        today: Callable[[], dt.date] = dt.date.today,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._paginator = paginator
        self._normalizer = normalizer
        self._directory = directory
        self._reducer = reducer or SalesReducer()
        self._cache = cache
        self._default_store_ids = tuple(str(store_id) for store_id in default_store_ids)
        self._today = today
        self._logger = logger or logging.getLogger(__name__)

    def resolve(self, query: ReportQuery) -> ResolvedQuery:
        """Apply the default store list and the current-month period."""

        store_ids = query.store_ids or self._default_store_ids
        if not store_ids:
            raise ConfigurationError(
                "No store ids supplied and no default stores configured"
            )

        try:
            if query.start is not None and query.end is not None:
                period = Period(start=query.start, end=query.end)
            else:
                period = current_month_period(self._today())
            return ResolvedQuery(
                period=period, store_ids=store_ids, type_filter=query.type_filter
            )
        except PydanticValidationError as exc:
            raise ValidationError(
                "Invalid report query", context={"errors": exc.errors()}
            ) from exc

    async def aggregate(self, query: Optional[ReportQuery] = None) -> AggregatePayload:
        resolved = self.resolve(query or ReportQuery())
        cache_key = resolved.cache_key()
        if self._cache is not None:
            cached = self._cache.get(cache_key)
            if cached is not None:
                self._logger.info("cache_hit", extra={"cache_key": cache_key})
                return cached

        streams = [
            (store_id, sale_type)
            for store_id in resolved.store_ids
            for sale_type in resolved.type_filter.sale_types()
        ]
        batches, employees = await asyncio.gather(
            self._fetch_streams(resolved.period, streams),
            self._fetch_directory(),
        )

        directory = (
            directory_from_employees(employees)
            if employees is not None
            else directory_from_records(
                record for _, records in batches for record in records
            )
        )
        sales = self._normalize(batches, directory)
        payload = self._reducer.build_payload(resolved.period, sales)

        if self._cache is not None:
            self._cache.put(cache_key, payload)
        self._logger.info(
            "aggregation_complete",
            extra={
                "stores": list(resolved.store_ids),
                "type_filter": resolved.type_filter.value,
                "streams": len(streams),
                "sales": payload.sale_count,
                "employees": len(payload.employees),
            },
        )
        return payload

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    async def _fetch_streams(
        self, period: Period, streams: Sequence[Tuple[str, SaleType]]
    ) -> List[Tuple[str, RawRecords]]:
        results = await asyncio.gather(
            *(
                self._paginator.collect(store_id, sale_type, period.start, period.end)
                for store_id, sale_type in streams
            )
        )
        return [(store_id, records) for (store_id, _), records in zip(streams, results)]

    async def _fetch_directory(self) -> Optional[List[Employee]]:
        if self._directory is None:
            return None
        try:
            return await self._directory.list_employees()
        except UpstreamError as exc:
            self._logger.warning(
                "directory_fallback",
                extra={"reason": exc.message, "status_code": exc.status_code},
            )
            return None

    def _normalize(
        self,
        batches: Sequence[Tuple[str, RawRecords]],
        directory: Mapping[str, str],
    ) -> List[Sale]:
        sales: List[Sale] = []
        for store_id, records in batches:
            sales.extend(self._normalizer.normalize_batch(records, store_id, directory))
        return sales
