import asyncio
import datetime as dt

import httpx
import pytest

from sales_aggregator.core.config import AggregatorConfig
from sales_aggregator.core.container import DIContainer
from sales_aggregator.core.service import SalesReportService
from sales_aggregator.domain.exceptions import ConfigurationError, UpstreamError
from sales_aggregator.normalization.normalizer import NormalizationStats

BASE_URL = "https://api.example.test"


class _UpstreamFake:
    """Serves ``/vendas`` pages per (loja_id, tipo) and the ``/funcionarios`` list."""

    def __init__(self, sales, employees=None, *, failing=()):
        self.sales = sales
        self.employees = employees
        self.failing = set(failing)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        params = request.url.params
        if request.url.path == "/funcionarios":
            if self.employees is None:
                return httpx.Response(500, json={"message": "directory offline"})
            return httpx.Response(200, json={"data": self.employees})

        key = (params.get("loja_id"), params.get("tipo"))
        if key in self.failing:
            return httpx.Response(503, json={"message": "Serviço indisponível"})
        pages = self.sales.get(key, [])
        page = int(params.get("pagina", "1"))
        rows = pages[page - 1] if page <= len(pages) else []
        return httpx.Response(200, json={"data": rows})

    def sales_requests(self):
        return [r for r in self.requests if r.url.path == "/vendas"]


def _service(fake, **config_overrides) -> SalesReportService:
    values = {
        "base_url": BASE_URL,
        "default_store_ids": ["428885", "338180"],
        "page_size": 2,
        "cache_ttl_seconds": 60,
    }
    values.update(config_overrides)
    client = httpx.AsyncClient(transport=httpx.MockTransport(fake))
    return DIContainer.create_service(
        config=AggregatorConfig(**values),
        http_client=client,
        stats=NormalizationStats(),
        today=lambda: dt.date(2025, 9, 17),
    )


def _sale(amount, seller_id=7, name="Ana", day="2025-09-10", tipo="produto"):
    return {
        "id": f"{seller_id}-{amount}",
        "data": day,
        "tipo": tipo,
        "valor_total": amount,
        "vendedor_id": seller_id,
        "vendedor_nome": name,
    }


def test_monthly_report_across_stores_and_types():
    fake = _UpstreamFake(
        {
            ("428885", "produto"): [[_sale(100), _sale(30, 8, "Bruno")], [_sale(20)]],
            ("428885", "servico"): [[_sale("250.50", 8, "Bruno", tipo="Serviço Premium")]],
            ("338180", "vendas_balcao"): [
                [_sale(40, day="28/09/2025", tipo="balcão")]
            ],
        },
        employees=[{"id": 7, "nome": "Ana"}, {"id": 8, "nome": "Bruno"}],
    )

    async def run():
        async with _service(fake) as service:
            return await service.get_report()

    payload = asyncio.run(run())
    document = payload.to_document()

    assert document["period"] == {"start": "2025-09-01", "end": "2025-09-30"}
    assert [(e["employee_id"], e["name"]) for e in document["employees"]] == [
        ("8", "Bruno"),
        ("7", "Ana"),
    ]
    assert document["employees"][0]["sold_amount"] == 280.5
    assert document["employees"][1]["sold_amount"] == 160
    assert document["employees"][1]["sale_count"] == 3
    assert document["total_amount"] == 440.5
    assert isinstance(document["total_amount"], float)
    assert document["by_type"]["service"]["total"] == 250.5
    assert document["by_type"]["counter_sale"]["sale_count"] == 1
    assert [d["date"] for d in document["daily"]] == ["2025-09-10", "2025-09-28"]

    # 2 stores x 3 types, plus a second page for the full first product page.
    assert len(fake.sales_requests()) == 7


def test_repeated_request_is_served_from_cache():
    fake = _UpstreamFake({("428885", "produto"): [[_sale(10)]]}, employees=[])

    async def run():
        async with _service(fake) as service:
            first = await service.get_report(store_ids=["428885"])
            second = await service.get_report(store_ids=["428885"])
            return first, second

    first, second = asyncio.run(run())

    assert first is second
    assert len(fake.sales_requests()) == 3


def test_directory_outage_falls_back_to_sale_identities():
    fake = _UpstreamFake(
        {("428885", "produto"): [[_sale(10), {"valor_total": 5, "vendedor_id": 9}]]},
        employees=None,
    )

    async def run():
        async with _service(fake) as service:
            return await service.get_report(store_ids=["428885"], type_filter="produto")

    payload = asyncio.run(run())

    assert {(e.employee_id, e.name) for e in payload.employees} == {
        ("7", "Ana"),
        ("9", "Unknown"),
    }


def test_upstream_failure_surfaces_status_and_body():
    fake = _UpstreamFake({}, employees=[], failing={("338180", "servico")})

    async def run():
        async with _service(fake) as service:
            return await service.get_report()

    with pytest.raises(UpstreamError) as exc_info:
        asyncio.run(run())

    status, body = SalesReportService.error_document(exc_info.value)
    assert status == 503
    assert body == {"message": "Serviço indisponível"}


def test_missing_store_configuration_is_reported_before_network():
    fake = _UpstreamFake({}, employees=[])

    async def run():
        async with _service(fake, default_store_ids=[]) as service:
            return await service.get_report()

    with pytest.raises(ConfigurationError) as exc_info:
        asyncio.run(run())

    assert fake.requests == []
    assert SalesReportService.error_document(exc_info.value)[0] == 400


def test_month_report_uses_requested_month():
    fake = _UpstreamFake({}, employees=[])

    async def run():
        async with _service(fake) as service:
            return await service.get_month_report("2025-02", store_ids=["1"])

    payload = asyncio.run(run())

    assert payload.employees == ()
    params = fake.sales_requests()[0].url.params
    assert (params["data_inicio"], params["data_fim"]) == ("2025-02-01", "2025-02-28")
