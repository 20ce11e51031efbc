import asyncio
import datetime as dt
from typing import List

import pytest

from sales_aggregator.core.middleware import (
    LoggingMiddleware,
    MiddlewareChain,
    ValidationMiddleware,
)
from sales_aggregator.domain.exceptions import ValidationError
from sales_aggregator.domain.models import AggregatePayload, Period, ReportQuery


class _FakeLogger:
    def __init__(self):
        self.messages: List[str] = []

    def info(self, msg, *_, **__):
        self.messages.append(msg)


def _payload() -> AggregatePayload:
    return AggregatePayload(
        period=Period(start=dt.date(2025, 9, 1), end=dt.date(2025, 9, 30))
    )


def test_logging_middleware_logs_messages():
    fake_logger = _FakeLogger()
    middleware = LoggingMiddleware(logger=fake_logger)  # type: ignore[arg-type]

    middleware.process_request(ReportQuery(store_ids=["1"]))
    middleware.process_response(_payload())

    assert fake_logger.messages == ["report_request", "report_response"]


def test_validation_middleware_rejects_blank_store_ids():
    with pytest.raises(ValidationError):
        ValidationMiddleware().process_request(ReportQuery(store_ids=["1", "  "]))


def test_validation_middleware_rejects_overlong_periods():
    query = ReportQuery(start=dt.date(2024, 1, 1), end=dt.date(2025, 6, 30))
    with pytest.raises(ValidationError):
        ValidationMiddleware().process_request(query)


def test_validation_middleware_passes_valid_queries():
    query = ReportQuery(start=dt.date(2025, 9, 1), end=dt.date(2025, 9, 30))
    assert ValidationMiddleware().process_request(query) is query


def test_middleware_chain_runs_in_order():
    class _RecordingMiddleware:
        def __init__(self, name: str, log: List[str]):
            self.name = name
            self.log = log

        def process_request(self, query):
            self.log.append(f"req:{self.name}")
            return query

        def process_response(self, payload):
            self.log.append(f"res:{self.name}")
            return payload

    log: List[str] = []
    chain = MiddlewareChain(
        [
            _RecordingMiddleware("a", log),
            _RecordingMiddleware("b", log),
        ]
    )

    async def handler(query: ReportQuery) -> AggregatePayload:
        log.append("handler")
        return _payload()

    asyncio.run(chain.execute(ReportQuery(), handler))

    assert log == ["req:a", "req:b", "handler", "res:b", "res:a"]
