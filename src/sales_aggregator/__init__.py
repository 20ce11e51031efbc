"""Sales aggregator package following Clean Architecture layering."""

from .core.container import DIContainer
from .core.service import SalesReportService

__all__ = [
    "SalesReportService",
    "DIContainer",
    "domain",
    "normalization",
    "upstream",
    "engine",
    "cache",
    "core",
    "utils",
]
