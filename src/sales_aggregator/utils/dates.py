"""Calendar helpers for monthly reporting periods."""

from __future__ import annotations

import calendar
import datetime as dt
import re

from sales_aggregator.domain.models import Period

_MONTH_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")


def month_bounds(year: int, month: int) -> Period:
    last_day = calendar.monthrange(year, month)[1]
    return Period(start=dt.date(year, month, 1), end=dt.date(year, month, last_day))


def current_month_period(today: dt.date) -> Period:
    """First through last day of the month containing ``today``."""

    return month_bounds(today.year, today.month)


def month_period(value: str) -> Period:
    """Parse ``YYYY-MM`` into the period covering that whole month."""

    match = _MONTH_PATTERN.match(value.strip())
    if not match:
        raise ValueError(f"Invalid month '{value}'. Expected YYYY-MM")
    year, month = (int(part) for part in match.groups())
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month '{value}'. Month must be 01-12")
    return month_bounds(year, month)
