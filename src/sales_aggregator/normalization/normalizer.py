"""Maps schema-less upstream sale records onto the canonical ``Sale`` model."""

from __future__ import annotations

import datetime as dt
import math
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from sales_aggregator.domain.models import (
    DEFAULT_CUSTOMER,
    UNKNOWN_EMPLOYEE,
    Employee,
    Sale,
    SaleType,
)

from . import fields

_ISO_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}")
_DAY_FIRST = re.compile(r"^(\d{2})/(\d{2})/(\d{4})$")


@dataclass
class NormalizationStats:
    """Counters of silent defaults applied while normalizing."""

    records: int = 0
    undated: int = 0
    defaulted_type: int = 0
    defaulted_amount: int = 0
    unknown_employee: int = 0

    def reset(self) -> None:
        self.records = 0
        self.undated = 0
        self.defaulted_type = 0
        self.defaulted_amount = 0
        self.unknown_employee = 0

    def as_dict(self) -> Dict[str, int]:
        return {
            "records": self.records,
            "undated": self.undated,
            "defaulted_type": self.defaulted_type,
            "defaulted_amount": self.defaulted_amount,
            "unknown_employee": self.unknown_employee,
        }


class FieldNormalizer:
    """Resolves canonical sale attributes from ordered candidate fields.

    Every malformed or missing value degrades to a documented default; the
    normalizer never raises for a mapping input. Passing ``stats`` records how
    often each default kicked in without affecting the produced ``Sale``.
    """

    def __init__(self, stats: Optional[NormalizationStats] = None) -> None:
        self.stats = stats

    def normalize(
        self,
        record: Mapping[str, Any],
        store_id: str,
        directory: Optional[Mapping[str, str]] = None,
    ) -> Sale:
        if not isinstance(record, Mapping):
            record = {}
        sale_type, type_defaulted = self._resolve_type(record)
        sale_date = parse_sale_date(_first_truthy(record, fields.DATE_FIELDS))
        employee_id, employee_name = self._resolve_employee(record, directory)
        parsed_amount = _parse_amount(_first_present(record, fields.AMOUNT_FIELDS))
        amount = parsed_amount if parsed_amount is not None else Decimal(0)

        if self.stats is not None:
            self.stats.records += 1
            self.stats.undated += sale_date is None
            self.stats.defaulted_type += type_defaulted
            self.stats.defaulted_amount += parsed_amount is None
            self.stats.unknown_employee += employee_name == UNKNOWN_EMPLOYEE

        customer = _first_truthy(record, fields.CUSTOMER_FIELDS)
        return Sale(
            id=_first_present(record, fields.SALE_ID_FIELDS),
            date=sale_date,
            employee_id=employee_id,
            employee_name=employee_name,
            type=sale_type,
            amount=amount,
            store_id=str(store_id),
            customer=str(customer) if customer else DEFAULT_CUSTOMER,
            code=_first_truthy(record, fields.CODE_FIELDS) or 0,
        )

    def normalize_batch(
        self,
        records: Iterable[Mapping[str, Any]],
        store_id: str,
        directory: Optional[Mapping[str, str]] = None,
    ) -> List[Sale]:
        return [self.normalize(record, store_id, directory) for record in records]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _resolve_type(record: Mapping[str, Any]) -> tuple[SaleType, bool]:
        text = str(_first_truthy(record, fields.TYPE_TEXT_FIELDS) or "").lower()
        for token, type_name in fields.TYPE_TEXT_TOKENS:
            if token in text:
                return SaleType(type_name), False

        code = _as_type_code(_first_present(record, fields.TYPE_CODE_FIELDS))
        if code in fields.TYPE_CODES:
            return SaleType(fields.TYPE_CODES[code]), False

        # A record explicitly labelled as a product is not a silent default.
        return SaleType.PRODUCT, not text.startswith(("produto", "product"))

    @staticmethod
    def _resolve_employee(
        record: Mapping[str, Any], directory: Optional[Mapping[str, str]]
    ) -> tuple[Optional[str], str]:
        raw_id = _first_present(record, fields.EMPLOYEE_ID_FIELDS)
        employee_id = stringify_id(raw_id) if raw_id is not None else None

        raw_name = _first_present(record, fields.EMPLOYEE_NAME_FIELDS)
        name = str(raw_name).strip() if raw_name is not None else ""
        if not name and employee_id is not None and directory:
            name = directory.get(employee_id) or ""
        return employee_id, name or UNKNOWN_EMPLOYEE


def parse_sale_date(raw: Any) -> Optional[dt.date]:
    """Accept ``YYYY-MM-DD[...]`` or ``DD/MM/YYYY``; anything else is ``None``."""

    if not raw:
        return None
    text = str(raw).strip()
    if _ISO_PREFIX.match(text):
        candidate = text[:10]
    else:
        match = _DAY_FIRST.match(text)
        if not match:
            return None
        day, month, year = match.groups()
        candidate = f"{year}-{month}-{day}"
    try:
        return dt.date.fromisoformat(candidate)
    except ValueError:
        return None


def coerce_amount(raw: Any) -> Decimal:
    """Convert a numeric-like value into a finite, non-negative ``Decimal``."""

    value = _parse_amount(raw)
    return value if value is not None else Decimal(0)


def _parse_amount(raw: Any) -> Optional[Decimal]:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        value = Decimal(raw)
    elif isinstance(raw, float):
        value = Decimal(repr(raw))
    else:
        text = str(raw).strip()
        if "," in text and "." not in text:
            text = text.replace(",", ".")
        try:
            value = Decimal(text)
        except InvalidOperation:
            return None
    # Amounts must stay representable as a JSON number.
    if not value.is_finite() or value < 0 or not math.isfinite(float(value)):
        return None
    return value if value else Decimal(0)


def stringify_id(raw: Any) -> str:
    """Render an upstream identifier; integral floats lose their ``.0``."""

    if isinstance(raw, float) and raw.is_integer():
        return str(int(raw))
    return str(raw)


def directory_from_employees(employees: Sequence[Employee]) -> Dict[str, str]:
    return {employee.id: employee.name for employee in employees}


def directory_from_records(records: Iterable[Mapping[str, Any]]) -> Dict[str, str]:
    """Derive an id -> name directory from the identities embedded in sales."""

    directory: Dict[str, str] = {}
    for record in records:
        raw_id = _first_present(record, fields.EMPLOYEE_ID_FIELDS)
        raw_name = _first_truthy(record, fields.EMPLOYEE_NAME_FIELDS)
        if raw_id is None or raw_id == "" or not raw_name:
            continue
        directory[stringify_id(raw_id)] = str(raw_name).strip()
    return directory


def _first_present(record: Mapping[str, Any], candidates: Sequence[str]) -> Any:
    for name in candidates:
        value = record.get(name)
        if value is not None:
            return value
    return None


def _first_truthy(record: Mapping[str, Any], candidates: Sequence[str]) -> Any:
    for name in candidates:
        value = record.get(name)
        if value:
            return value
    return None


def _as_type_code(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None
