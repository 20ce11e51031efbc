"""Domain value objects representing sales aggregation concepts."""

from __future__ import annotations

import datetime as dt
import hashlib
import json
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Dict, List, Mapping, Optional, Tuple

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
    model_validator,
)

UNKNOWN_EMPLOYEE = "Unknown"
DEFAULT_CUSTOMER = "Customer"

# Money is summed exactly; JSON documents carry it as a plain number.
Amount = Annotated[
    Decimal,
    Field(ge=0),
    PlainSerializer(float, return_type=float, when_used="json"),
]


class SaleType(str, Enum):
    """Canonical classification of a sale."""

    PRODUCT = "product"
    SERVICE = "service"
    COUNTER_SALE = "counter_sale"

    @property
    def upstream_value(self) -> str:
        """Value the upstream API expects in its ``tipo`` query parameter."""

        return _UPSTREAM_SALE_TYPES[self]


_UPSTREAM_SALE_TYPES = {
    SaleType.PRODUCT: "produto",
    SaleType.SERVICE: "servico",
    SaleType.COUNTER_SALE: "vendas_balcao",
}


class TypeFilter(str, Enum):
    """Sale type selection accepted by the aggregation engine."""

    PRODUCT = "product"
    SERVICE = "service"
    COUNTER_SALE = "counter_sale"
    ALL = "all"

    @classmethod
    def parse(cls, value: "TypeFilter | SaleType | str | None") -> "TypeFilter":
        """Accept canonical names, upstream spellings and ``None`` (all)."""

        if value is None:
            return cls.ALL
        if isinstance(value, cls):
            return value
        if isinstance(value, SaleType):
            return cls(value.value)
        normalized = str(value).strip().lower()
        aliases = {
            "produto": cls.PRODUCT,
            "servico": cls.SERVICE,
            "vendas_balcao": cls.COUNTER_SALE,
            "todos": cls.ALL,
            "": cls.ALL,
        }
        if normalized in aliases:
            return aliases[normalized]
        try:
            return cls(normalized)
        except ValueError as exc:
            raise ValueError(f"Unsupported type filter '{value}'") from exc

    def sale_types(self) -> Tuple[SaleType, ...]:
        """Expand the filter into the explicit sale types to request upstream."""

        if self is TypeFilter.ALL:
            return (SaleType.PRODUCT, SaleType.SERVICE, SaleType.COUNTER_SALE)
        return (SaleType(self.value),)


class Period(BaseModel):
    """Inclusive calendar date range."""

    model_config = ConfigDict(frozen=True)

    start: dt.date
    end: dt.date

    @model_validator(mode="after")
    def validate_bounds(self) -> "Period":
        if self.start > self.end:
            raise ValueError("period start must not be after period end")
        return self


class Sale(BaseModel):
    """Canonical, normalized sale record."""

    model_config = ConfigDict(frozen=True)

    id: Any = None
    date: Optional[dt.date] = None
    employee_id: Optional[str] = None
    employee_name: str = UNKNOWN_EMPLOYEE
    type: SaleType = SaleType.PRODUCT
    amount: Amount = Decimal(0)
    store_id: str
    customer: str = DEFAULT_CUSTOMER
    code: Any = 0


class Employee(BaseModel):
    """Directory entry pairing an employee id with a display name."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str


class SalesPage(BaseModel):
    """One page of raw sale records plus the upstream continuation signal."""

    model_config = ConfigDict(frozen=True)

    records: List[Dict[str, Any]] = Field(default_factory=list)
    next_page: Optional[int] = None
    next_page_signaled: bool = False


class EmployeeSummary(BaseModel):
    """Sales totals for one (employee id, employee name) pair."""

    model_config = ConfigDict(frozen=True)

    employee_id: Optional[str]
    name: str
    sold_amount: Amount
    sale_count: int = Field(..., ge=0)
    target_amount: Optional[Amount] = None


class DailyTotal(BaseModel):
    """Sales totals for one calendar day."""

    model_config = ConfigDict(frozen=True)

    date: dt.date
    total: Amount
    sale_count: int = Field(..., ge=0)


class TypeTotal(BaseModel):
    """Sales totals for one sale type."""

    model_config = ConfigDict(frozen=True)

    sale_count: int = Field(default=0, ge=0)
    total: Amount = Decimal(0)


class AggregatePayload(BaseModel):
    """Grouped summary returned to callers of the aggregation engine."""

    model_config = ConfigDict(frozen=True)

    period: Period
    employees: Tuple[EmployeeSummary, ...] = Field(default_factory=tuple)
    daily: Tuple[DailyTotal, ...] = Field(default_factory=tuple)
    by_type: Dict[SaleType, TypeTotal] = Field(default_factory=dict)
    total_amount: Amount = Decimal(0)
    sale_count: int = Field(default=0, ge=0)
    latest_sales: Tuple[Sale, ...] = Field(default_factory=tuple)

    @model_validator(mode="after")
    def ensure_employee_order(self) -> "AggregatePayload":
        amounts = [summary.sold_amount for summary in self.employees]
        if any(left < right for left, right in zip(amounts, amounts[1:])):
            raise ValueError("employees must be sorted by sold_amount descending")
        return self

    def to_document(self) -> Dict[str, Any]:
        """Serialize into a JSON-compatible document."""

        return self.model_dump(mode="json")


class ReportQuery(BaseModel):
    """Caller-supplied report parameters; omitted values fall back to defaults."""

    model_config = ConfigDict(frozen=True)

    start: Optional[dt.date] = None
    end: Optional[dt.date] = None
    store_ids: Optional[Tuple[str, ...]] = None
    type_filter: TypeFilter = TypeFilter.ALL

    @field_validator("type_filter", mode="before")
    @classmethod
    def parse_type_filter(cls, value: Any) -> TypeFilter:
        return TypeFilter.parse(value)

    @field_validator("store_ids", mode="before")
    @classmethod
    def stringify_store_ids(cls, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, (str, int)):
            value = [value]
        return tuple(str(item).strip() for item in value)

    @model_validator(mode="after")
    def validate_period_bounds(self) -> "ReportQuery":
        if (self.start is None) != (self.end is None):
            raise ValueError("start and end must be supplied together")
        if self.start is not None and self.end is not None and self.start > self.end:
            raise ValueError("period start must not be after period end")
        return self


class ResolvedQuery(BaseModel):
    """Report query after defaults have been applied; drives one aggregation."""

    model_config = ConfigDict(frozen=True)

    period: Period
    store_ids: Tuple[str, ...]
    type_filter: TypeFilter = TypeFilter.ALL

    @field_validator("store_ids")
    @classmethod
    def ensure_store_ids(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        if not value:
            raise ValueError("at least one store id is required")
        if any(not store_id for store_id in value):
            raise ValueError("store ids must be non-empty")
        return tuple(dict.fromkeys(value))

    def cache_key(self) -> str:
        """Deterministic key over the parameters that shape the payload."""

        signature: Mapping[str, Any] = {
            "start": self.period.start.isoformat(),
            "end": self.period.end.isoformat(),
            "stores": sorted(self.store_ids),
            "type": self.type_filter.value,
        }
        encoded = json.dumps(signature, sort_keys=True).encode("utf-8")
        return hashlib.sha256(encoded).hexdigest()
