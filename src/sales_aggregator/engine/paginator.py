"""Sequential page walker over one (store, sale type) stream."""

from __future__ import annotations

import datetime as dt
import logging
from typing import Any, AsyncIterator, Dict, List, Optional

from sales_aggregator.domain.exceptions import PaginationError
from sales_aggregator.domain.interfaces import ISalesSource
from sales_aggregator.domain.models import SaleType

DEFAULT_PAGE_SIZE = 100
DEFAULT_MAX_PAGES = 1000


class Paginator:
    """Walks pages 1, 2, 3, ... until the upstream signals exhaustion.

    Two termination contracts are honoured, whichever the response carries:
    an explicit next-page field in the response metadata, or, when that field
    is absent, a short page holding fewer than ``page_size`` records. An empty
    page always ends the stream.
    """

    def __init__(
        self,
        source: ISalesSource,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        max_pages: int = DEFAULT_MAX_PAGES,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if page_size <= 0:
            raise ValueError("page_size must be greater than zero")
        if max_pages <= 0:
            raise ValueError("max_pages must be greater than zero")
        self._source = source
        self._page_size = page_size
        self._max_pages = max_pages
        self._logger = logger or logging.getLogger(__name__)

    async def iter_batches(
        self,
        store_id: str,
        sale_type: Optional[SaleType],
        start: dt.date,
        end: dt.date,
    ) -> AsyncIterator[List[Dict[str, Any]]]:
        page = 1
        requested = 0
        total = 0
        while True:
            if requested >= self._max_pages:
                raise PaginationError(
                    context={
                        "store_id": store_id,
                        "sale_type": sale_type.value if sale_type else None,
                        "max_pages": self._max_pages,
                    }
                )
            result = await self._source.fetch_page(store_id, sale_type, start, end, page)
            requested += 1
            if not result.records:
                break

            total += len(result.records)
            yield list(result.records)

            if result.next_page_signaled:
                if result.next_page is None:
                    break
                page = result.next_page
            elif len(result.records) < self._page_size:
                break
            else:
                page += 1

        self._logger.debug(
            "pagination_complete",
            extra={
                "store_id": store_id,
                "sale_type": sale_type.value if sale_type else None,
                "pages": requested,
                "records": total,
            },
        )

    async def collect(
        self,
        store_id: str,
        sale_type: Optional[SaleType],
        start: dt.date,
        end: dt.date,
    ) -> List[Dict[str, Any]]:
        records: List[Dict[str, Any]] = []
        async for batch in self.iter_batches(store_id, sale_type, start, end):
            records.extend(batch)
        return records
