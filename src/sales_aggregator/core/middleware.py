"""Middleware system for report cross-cutting concerns."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Protocol, Sequence

from sales_aggregator.domain.exceptions import ValidationError
from sales_aggregator.domain.models import AggregatePayload, ReportQuery

MAX_PERIOD_DAYS = 366


class IMiddleware(Protocol):
    """Protocol describing middleware hooks."""

    def process_request(self, query: ReportQuery) -> ReportQuery: ...

    def process_response(self, payload: AggregatePayload) -> AggregatePayload: ...


class LoggingMiddleware(IMiddleware):
    """Logs inbound report queries and outbound payload summaries."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger(__name__)

    def process_request(self, query: ReportQuery) -> ReportQuery:
        self._logger.info(
            "report_request",
            extra={
                "start": query.start.isoformat() if query.start else None,
                "end": query.end.isoformat() if query.end else None,
                "store_ids": list(query.store_ids or ()),
                "type_filter": query.type_filter.value,
            },
        )
        return query

    def process_response(self, payload: AggregatePayload) -> AggregatePayload:
        self._logger.info(
            "report_response",
            extra={
                "period_start": payload.period.start.isoformat(),
                "period_end": payload.period.end.isoformat(),
                "employees": len(payload.employees),
                "sales": payload.sale_count,
                "total_amount": payload.total_amount,
            },
        )
        return payload


class ValidationMiddleware(IMiddleware):
    """Rejects malformed queries before any upstream call is made."""

    def __init__(self, max_period_days: int = MAX_PERIOD_DAYS) -> None:
        self._max_period_days = max_period_days

    def process_request(self, query: ReportQuery) -> ReportQuery:
        if query.store_ids is not None and any(
            not store_id for store_id in query.store_ids
        ):
            raise ValidationError("Store ids must be non-empty")
        if query.start is not None and query.end is not None:
            span = (query.end - query.start).days + 1
            if span > self._max_period_days:
                raise ValidationError(
                    "Report period exceeds maximum length",
                    context={"days": span, "max_days": self._max_period_days},
                )
        return query

    def process_response(self, payload: AggregatePayload) -> AggregatePayload:
        return payload


class MiddlewareChain:
    """Applies middleware around an async handler using chain of responsibility."""

    def __init__(self, middlewares: Sequence[IMiddleware]) -> None:
        self._middlewares = list(middlewares)

    async def execute(
        self,
        query: ReportQuery,
        handler: Callable[[ReportQuery], Awaitable[AggregatePayload]],
    ) -> AggregatePayload:
        for middleware in self._middlewares:
            query = middleware.process_request(query)

        payload = await handler(query)

        for middleware in reversed(self._middlewares):
            payload = middleware.process_response(payload)

        return payload
