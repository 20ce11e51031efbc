"""Employee listing adapter built on top of ``BaseUpstreamClient``."""

from __future__ import annotations

from typing import Any, List, Mapping

from sales_aggregator.domain.models import Employee
from sales_aggregator.normalization import fields
from sales_aggregator.normalization.normalizer import stringify_id

from .base import BaseUpstreamClient

EMPLOYEES_PATH = "/funcionarios"


class HttpEmployeeDirectory(BaseUpstreamClient):
    """Reads the first page of the upstream ``/funcionarios`` listing."""

    async def list_employees(self) -> List[Employee]:
        data = await self.get_json(EMPLOYEES_PATH, {"pagina": 1})
        rows = data.get("data") if isinstance(data, Mapping) else None
        if not isinstance(rows, list):
            return []
        return [
            employee
            for employee in (self._map_employee(row) for row in rows)
            if employee is not None
        ]

    @staticmethod
    def _map_employee(row: Any) -> Employee | None:
        if not isinstance(row, Mapping):
            return None
        raw_id = next(
            (row[name] for name in fields.DIRECTORY_ID_FIELDS if row.get(name) is not None),
            None,
        )
        raw_name = next(
            (row[name] for name in fields.DIRECTORY_NAME_FIELDS if row.get(name)),
            None,
        )
        if raw_id is None or not raw_name:
            return None
        return Employee(id=stringify_id(raw_id), name=str(raw_name).strip())
