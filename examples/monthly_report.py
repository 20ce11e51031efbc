"""Print the per-employee report for one month using environment configuration."""

import asyncio
import json
import logging
import sys

from sales_aggregator.core.container import DIContainer
from sales_aggregator.core.service import SalesReportService
from sales_aggregator.domain.exceptions import SalesAggregatorError


async def main(month: str) -> int:
    async with DIContainer.create_service() as service:
        try:
            payload = await service.get_month_report(month)
        except SalesAggregatorError as exc:
            status, body = SalesReportService.error_document(exc)
            print(f"HTTP {status}:", json.dumps(body, ensure_ascii=False))
            return 1

    for employee in payload.employees:
        print(f"{employee.name:<24} {employee.sold_amount:>12.2f} {employee.sale_count:>6}")
    print("Total:", f"{payload.total_amount:.2f}")
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    sys.exit(asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else "2025-09")))
