import asyncio
import datetime as dt

import pytest

from sales_aggregator.cache.result_cache import KeyedResultCache
from sales_aggregator.core.config import AggregatorConfig
from sales_aggregator.core.middleware import MiddlewareChain
from sales_aggregator.core.service import SalesReportService
from sales_aggregator.domain.exceptions import (
    ConfigurationError,
    UpstreamError,
    ValidationError,
)
from sales_aggregator.domain.models import (
    AggregatePayload,
    Period,
    ReportQuery,
    TypeFilter,
)


class _EngineStub:
    def __init__(self):
        self.queries = []

    async def aggregate(self, query: ReportQuery) -> AggregatePayload:
        self.queries.append(query)
        start = query.start or dt.date(2025, 9, 1)
        end = query.end or dt.date(2025, 9, 30)
        return AggregatePayload(period=Period(start=start, end=end))


def _service(cache=None):
    engine = _EngineStub()
    service = SalesReportService(
        AggregatorConfig(),
        engine,  # type: ignore[arg-type]
        cache=cache,
        middleware=MiddlewareChain([]),
    )
    return service, engine


def test_get_report_builds_query():
    service, engine = _service()

    asyncio.run(
        service.get_report(
            start=dt.date(2025, 9, 1),
            end=dt.date(2025, 9, 30),
            store_ids=[428885],
            type_filter="vendas_balcao",
        )
    )

    query = engine.queries[0]
    assert query.store_ids == ("428885",)
    assert query.type_filter is TypeFilter.COUNTER_SALE


def test_get_report_defaults_leave_resolution_to_engine():
    service, engine = _service()

    asyncio.run(service.get_report())

    assert engine.queries[0] == ReportQuery()


def test_get_report_rejects_unknown_type_filter():
    service, engine = _service()

    with pytest.raises(ValidationError):
        asyncio.run(service.get_report(type_filter="refunds"))

    assert engine.queries == []


def test_get_month_report_expands_month():
    service, engine = _service()

    payload = asyncio.run(service.get_month_report("2025-02", store_ids=["1"]))

    assert payload.period == Period(start=dt.date(2025, 2, 1), end=dt.date(2025, 2, 28))


def test_get_month_report_rejects_bad_month():
    service, _ = _service()
    with pytest.raises(ValidationError):
        asyncio.run(service.get_month_report("September"))


def test_middleware_and_middlewares_are_exclusive():
    with pytest.raises(ValueError):
        SalesReportService(
            AggregatorConfig(),
            _EngineStub(),  # type: ignore[arg-type]
            middleware=MiddlewareChain([]),
            middlewares=[object()],  # type: ignore[list-item]
        )


def test_invalidate_cache_clears_owned_cache():
    cache = KeyedResultCache(60)
    service, _ = _service(cache)
    cache.put("k", AggregatePayload(period=Period(start=dt.date(2025, 9, 1), end=dt.date(2025, 9, 1))))

    service.invalidate_cache()

    assert service.cache is cache
    assert cache.get("k") is None


def test_cache_property_requires_cache():
    service, _ = _service()
    with pytest.raises(RuntimeError):
        _ = service.cache


@pytest.mark.parametrize(
    "exc, expected",
    [
        (
            UpstreamError("denied", status_code=401, body={"message": "denied"}),
            (401, {"message": "denied"}),
        ),
        (UpstreamError("connection refused"), (500, {"message": "connection refused"})),
        (ConfigurationError("no stores"), (400, {"message": "no stores"})),
        (ValidationError("bad period"), (400, {"message": "bad period"})),
        (RuntimeError(""), (500, {"message": "Unknown error"})),
    ],
)
def test_error_document(exc, expected):
    assert SalesReportService.error_document(exc) == expected
