"""Pure business-logic helpers that reduce normalized sales into summaries."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple

from sales_aggregator.domain.models import (
    AggregatePayload,
    DailyTotal,
    EmployeeSummary,
    Period,
    Sale,
    SaleType,
    TypeTotal,
)

LATEST_SALES_LIMIT = 8


class SalesReducer:
    """Performs read-only grouping calculations on normalized sales."""

    def __init__(self, latest_limit: int = LATEST_SALES_LIMIT) -> None:
        self._latest_limit = latest_limit

    def build_payload(self, period: Period, sales: Sequence[Sale]) -> AggregatePayload:
        return AggregatePayload(
            period=period,
            employees=tuple(self.group_by_employee(sales)),
            daily=tuple(self.group_by_day(sales)),
            by_type=self.group_by_type(sales),
            total_amount=self.calculate_total(sales),
            sale_count=len(sales),
            latest_sales=tuple(self.latest_sales(sales)),
        )

    def group_by_employee(self, sales: Sequence[Sale]) -> List[EmployeeSummary]:
        """Sum sales per literal (employee id, employee name) pair.

        The result is sorted by sold amount, highest first; ties keep the order
        in which each pair was first seen.
        """

        totals: Dict[Tuple[Optional[str], str], List[Decimal]] = {}
        for sale in sales:
            bucket = totals.setdefault((sale.employee_id, sale.employee_name), [Decimal(0), 0])
            bucket[0] += sale.amount
            bucket[1] += 1
        summaries = [
            EmployeeSummary(
                employee_id=employee_id,
                name=name,
                sold_amount=amount,
                sale_count=int(count),
                target_amount=None,
            )
            for (employee_id, name), (amount, count) in totals.items()
        ]
        return sorted(summaries, key=lambda summary: summary.sold_amount, reverse=True)

    def group_by_day(self, sales: Sequence[Sale]) -> List[DailyTotal]:
        """Daily totals in ascending date order; undated sales are skipped."""

        totals: Dict[dt.date, List[Decimal]] = {}
        for sale in sales:
            if sale.date is None:
                continue
            bucket = totals.setdefault(sale.date, [Decimal(0), 0])
            bucket[0] += sale.amount
            bucket[1] += 1
        return [
            DailyTotal(date=day, total=amount, sale_count=int(count))
            for day, (amount, count) in sorted(totals.items())
        ]

    def group_by_type(self, sales: Sequence[Sale]) -> Dict[SaleType, TypeTotal]:
        counts = {sale_type: 0 for sale_type in SaleType}
        amounts = {sale_type: Decimal(0) for sale_type in SaleType}
        for sale in sales:
            counts[sale.type] += 1
            amounts[sale.type] += sale.amount
        return {
            sale_type: TypeTotal(sale_count=counts[sale_type], total=amounts[sale_type])
            for sale_type in SaleType
        }

    def latest_sales(self, sales: Sequence[Sale]) -> List[Sale]:
        ordered = sorted(
            sales,
            key=lambda sale: (sale.date is not None, sale.date or dt.date.min),
            reverse=True,
        )
        return ordered[: self._latest_limit]

    @staticmethod
    def calculate_total(sales: Sequence[Sale]) -> Decimal:
        return sum((sale.amount for sale in sales), Decimal(0))
