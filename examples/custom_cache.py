"""Wire a service with a single-slot cache and normalization counters."""

import asyncio

from sales_aggregator.cache.result_cache import SingleSlotResultCache
from sales_aggregator.core.config import AggregatorConfig
from sales_aggregator.core.container import DIContainer
from sales_aggregator.normalization.normalizer import NormalizationStats


async def main() -> None:
    stats = NormalizationStats()
    config = AggregatorConfig.from_env()
    async with DIContainer.create_service(
        config=config, cache=SingleSlotResultCache(120), stats=stats
    ) as service:
        payload = await service.get_report(type_filter="servico")

    print("Employees:", len(payload.employees))
    print("Defaults applied:", stats.as_dict())


if __name__ == "__main__":
    asyncio.run(main())
