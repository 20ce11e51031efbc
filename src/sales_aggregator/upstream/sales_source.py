"""Sales listing adapter built on top of ``BaseUpstreamClient``."""

from __future__ import annotations

import datetime as dt
from typing import Any, Dict, List, Mapping, Optional

import httpx

from sales_aggregator.domain.models import SalesPage, SaleType

from .base import BaseUpstreamClient, UpstreamConfig

SALES_PATH = "/vendas"
NEXT_PAGE_FIELD = "proxima_pagina"


class HttpSalesSource(BaseUpstreamClient):
    """Fetches single pages of the upstream ``/vendas`` listing."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        config: UpstreamConfig,
        *,
        sort_field: str = "codigo",
        sort_direction: str = "desc",
    ) -> None:
        super().__init__(http_client, config)
        self._sort_field = sort_field
        self._sort_direction = sort_direction

    async def fetch_page(
        self,
        store_id: str,
        sale_type: Optional[SaleType],
        start: dt.date,
        end: dt.date,
        page: int,
    ) -> SalesPage:
        params = self._build_params(store_id, sale_type, start, end, page)
        data = await self.get_json(SALES_PATH, params)
        return self._map_page(data)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _build_params(
        self,
        store_id: str,
        sale_type: Optional[SaleType],
        start: dt.date,
        end: dt.date,
        page: int,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "loja_id": str(store_id),
            "data_inicio": start.isoformat(),
            "data_fim": end.isoformat(),
            "pagina": str(page),
            "ordenacao": self._sort_field,
            "direcao": self._sort_direction,
        }
        if sale_type is not None:
            params["tipo"] = sale_type.upstream_value
        return params

    @staticmethod
    def _map_page(data: Any) -> SalesPage:
        if not isinstance(data, Mapping):
            return SalesPage()
        rows = data.get("data")
        records: List[Dict[str, Any]] = (
            [dict(row) for row in rows if isinstance(row, Mapping)]
            if isinstance(rows, list)
            else []
        )

        meta = data.get("meta")
        if not isinstance(meta, Mapping) or NEXT_PAGE_FIELD not in meta:
            return SalesPage(records=records)
        return SalesPage(
            records=records,
            next_page=_as_page_number(meta.get(NEXT_PAGE_FIELD)),
            next_page_signaled=True,
        )


def _as_page_number(value: Any) -> Optional[int]:
    if not value or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
