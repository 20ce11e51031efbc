"""Dependency injection container for building fully-wired report services."""

from __future__ import annotations

import datetime as dt
from typing import Callable, Optional

import httpx

from sales_aggregator.cache.result_cache import KeyedResultCache, SingleSlotResultCache
from sales_aggregator.core.config import AggregatorConfig
from sales_aggregator.core.middleware import (
    LoggingMiddleware,
    MiddlewareChain,
    ValidationMiddleware,
)
from sales_aggregator.core.service import SalesReportService
from sales_aggregator.domain.interfaces import IResultCache
from sales_aggregator.engine.aggregator import AggregationEngine
from sales_aggregator.engine.paginator import Paginator
from sales_aggregator.engine.reduction import SalesReducer
from sales_aggregator.normalization.normalizer import FieldNormalizer, NormalizationStats
from sales_aggregator.upstream.base import UpstreamConfig
from sales_aggregator.upstream.employee_directory import HttpEmployeeDirectory
from sales_aggregator.upstream.sales_source import HttpSalesSource


class DIContainer:
    """Factory helpers that assemble a SalesReportService with default wiring."""

    @staticmethod
    def create_service(
        *,
        config: Optional[AggregatorConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        cache: Optional[IResultCache] = None,
        stats: Optional[NormalizationStats] = None,
        today: Callable[[], dt.date] = dt.date.today,
    ) -> SalesReportService:
        cfg = config or AggregatorConfig.from_env()
        upstream_config = UpstreamConfig(
            base_url=cfg.base_url,
            access_token=cfg.access_token,
            secret_access_token=cfg.secret_access_token,
            timeout=cfg.timeout_seconds,
        )
        client = http_client or DIContainer._build_http_client(upstream_config)

        source = HttpSalesSource(
            client,
            upstream_config,
            sort_field=cfg.sort_field,
            sort_direction=cfg.sort_direction,
        )
        directory = HttpEmployeeDirectory(client, upstream_config)
        paginator = Paginator(source, page_size=cfg.page_size, max_pages=cfg.max_pages)
        result_cache = cache if cache is not None else DIContainer._build_cache(cfg)

        engine = AggregationEngine(
            paginator,
            FieldNormalizer(stats),
            directory=directory,
            reducer=SalesReducer(),
            cache=result_cache,
            default_store_ids=cfg.default_store_ids,
            today=today,
        )
        return SalesReportService(
            cfg,
            engine,
            cache=result_cache,
            middleware=DIContainer._build_middleware_chain(),
            http_client=client,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _build_http_client(upstream_config: UpstreamConfig) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=upstream_config.timeout)

    @staticmethod
    def _build_cache(config: AggregatorConfig) -> IResultCache:
        if config.cache_mode == "single_slot":
            return SingleSlotResultCache(config.cache_ttl_seconds)
        return KeyedResultCache(config.cache_ttl_seconds, capacity=config.cache_capacity)

    @staticmethod
    def _build_middleware_chain() -> MiddlewareChain:
        return MiddlewareChain([ValidationMiddleware(), LoggingMiddleware()])
