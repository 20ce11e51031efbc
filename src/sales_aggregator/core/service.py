"""Main service facade coordinating middleware, cache and aggregation engine."""

from __future__ import annotations

import datetime as dt
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

import httpx
from pydantic import ValidationError as PydanticValidationError

from sales_aggregator.core.config import AggregatorConfig
from sales_aggregator.core.middleware import IMiddleware, MiddlewareChain
from sales_aggregator.domain.exceptions import (
    ConfigurationError,
    UpstreamError,
    ValidationError,
)
from sales_aggregator.domain.interfaces import IResultCache
from sales_aggregator.domain.models import AggregatePayload, ReportQuery, TypeFilter
from sales_aggregator.engine.aggregator import AggregationEngine
from sales_aggregator.utils.dates import month_period


class SalesReportService:
    """High-level API for consumers requesting per-employee sales reports.

    The service owns the result cache handed to its engine, so separate
    service instances never share cached payloads.
    """

    def __init__(
        self,
        config: AggregatorConfig,
        engine: AggregationEngine,
        *,
        cache: Optional[IResultCache] = None,
        middleware: Optional[MiddlewareChain] = None,
        middlewares: Optional[Sequence[IMiddleware]] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        if middleware and middlewares:
            raise ValueError("Provide either 'middleware' or 'middlewares', not both")
        self._config = config
        self._engine = engine
        self._cache = cache
        self._middleware = middleware or MiddlewareChain(middlewares or [])
        self._http_client = http_client

    async def get_report(
        self,
        *,
        start: Optional[dt.date] = None,
        end: Optional[dt.date] = None,
        store_ids: Optional[Iterable[str | int]] = None,
        type_filter: TypeFilter | str | None = TypeFilter.ALL,
    ) -> AggregatePayload:
        try:
            query = ReportQuery(
                start=start,
                end=end,
                store_ids=None if store_ids is None else tuple(store_ids),
                type_filter=type_filter,
            )
        except PydanticValidationError as exc:
            raise ValidationError(
                "Invalid report query", context={"errors": exc.errors()}
            ) from exc
        return await self._middleware.execute(query, self._engine.aggregate)

    async def get_month_report(
        self,
        month: str,
        *,
        store_ids: Optional[Iterable[str | int]] = None,
        type_filter: TypeFilter | str | None = TypeFilter.ALL,
    ) -> AggregatePayload:
        try:
            period = month_period(month)
        except ValueError as exc:
            raise ValidationError(str(exc), context={"month": month}) from exc
        return await self.get_report(
            start=period.start,
            end=period.end,
            store_ids=store_ids,
            type_filter=type_filter,
        )

    def invalidate_cache(self) -> None:
        if self._cache is not None:
            self._cache.clear()

    @property
    def config(self) -> AggregatorConfig:
        return self._config

    @property
    def cache(self) -> IResultCache:
        if self._cache is None:
            raise RuntimeError("Result cache not configured")
        return self._cache

    @staticmethod
    def error_document(exc: Exception) -> Tuple[int, Any]:
        """Map a failure onto the (status, body) pair returned to clients."""

        if isinstance(exc, UpstreamError):
            status = exc.status_code or 500
            body = exc.body if exc.body is not None else {"message": exc.message}
            return status, body
        if isinstance(exc, (ConfigurationError, ValidationError)):
            return 400, {"message": exc.message}
        message: Dict[str, Any] = {"message": str(exc) or "Unknown error"}
        return 500, message

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()

    async def __aenter__(self) -> "SalesReportService":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
