"""Aggregator configuration management helpers."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml


def _str_to_int(value: str | None, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"Invalid integer value: {value}") from exc


def _str_to_float(value: str | None, default: float) -> float:
    if value is None:
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise ValueError(f"Invalid number value: {value}") from exc


def _split_list(value: str | None, default: List[str]) -> List[str]:
    if not value:
        return list(default)
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass(frozen=True)
class AggregatorConfig:
    """Immutable configuration object loaded from env or files."""

    base_url: str = "http://localhost:3000"
    access_token: Optional[str] = None
    secret_access_token: Optional[str] = None
    default_store_ids: List[str] = field(default_factory=list)
    timeout_seconds: float = 30.0
    page_size: int = 100
    max_pages: int = 1000
    sort_field: str = "codigo"
    sort_direction: str = "desc"
    cache_ttl_seconds: float = 60.0
    cache_capacity: int = 32
    cache_mode: str = "keyed"

    _ALLOWED_CACHE_MODES = {"keyed", "single_slot"}
    _ALLOWED_SORT_DIRECTIONS = {"asc", "desc"}

    def __post_init__(self) -> None:
        self.validate()

    @classmethod
    def from_env(cls) -> "AggregatorConfig":
        defaults = cls()
        return cls(
            base_url=os.getenv("SALES_API_BASE_URL", defaults.base_url),
            access_token=os.getenv("SALES_API_ACCESS_TOKEN", defaults.access_token),
            secret_access_token=os.getenv(
                "SALES_API_SECRET_ACCESS_TOKEN", defaults.secret_access_token
            ),
            default_store_ids=_split_list(
                os.getenv("SALES_DEFAULT_STORE_IDS"), defaults.default_store_ids
            ),
            timeout_seconds=_str_to_float(
                os.getenv("SALES_TIMEOUT_SECONDS"), defaults.timeout_seconds
            ),
            page_size=_str_to_int(os.getenv("SALES_PAGE_SIZE"), defaults.page_size),
            max_pages=_str_to_int(os.getenv("SALES_MAX_PAGES"), defaults.max_pages),
            sort_field=os.getenv("SALES_SORT_FIELD", defaults.sort_field),
            sort_direction=os.getenv("SALES_SORT_DIRECTION", defaults.sort_direction),
            cache_ttl_seconds=_str_to_float(
                os.getenv("SALES_CACHE_TTL_SECONDS"), defaults.cache_ttl_seconds
            ),
            cache_capacity=_str_to_int(
                os.getenv("SALES_CACHE_CAPACITY"), defaults.cache_capacity
            ),
            cache_mode=os.getenv("SALES_CACHE_MODE", defaults.cache_mode),
        )

    @classmethod
    def from_file(cls, path: str) -> "AggregatorConfig":
        file_path = Path(path)
        if not file_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")
        raw = file_path.read_text()
        data: Dict[str, Any]
        suffix = file_path.suffix.lower()
        if suffix == ".json":
            data = json.loads(raw)
        elif suffix in {".yaml", ".yml"}:
            data = yaml.safe_load(raw) or {}
        else:
            raise ValueError("Unsupported config format. Use JSON or YAML.")
        return cls(**cls._merge_with_defaults(data))

    def validate(self) -> None:
        if not self.base_url:
            raise ValueError("base_url must be provided")
        if not isinstance(self.default_store_ids, list):
            raise ValueError("default_store_ids must be a list")
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be greater than zero")
        if self.page_size <= 0:
            raise ValueError("page_size must be greater than zero")
        if self.max_pages <= 0:
            raise ValueError("max_pages must be greater than zero")
        if self.sort_direction not in self._ALLOWED_SORT_DIRECTIONS:
            raise ValueError(
                f"sort_direction must be one of {sorted(self._ALLOWED_SORT_DIRECTIONS)}"
            )
        if self.cache_ttl_seconds < 0:
            raise ValueError("cache_ttl_seconds must be non-negative")
        if self.cache_capacity <= 0:
            raise ValueError("cache_capacity must be greater than zero")
        if self.cache_mode not in self._ALLOWED_CACHE_MODES:
            raise ValueError(
                f"cache_mode must be one of {sorted(self._ALLOWED_CACHE_MODES)}"
            )

    @classmethod
    def _merge_with_defaults(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        defaults = cls()
        merged = {
            name: data.get(name, getattr(defaults, name))
            for name in (
                "base_url",
                "access_token",
                "secret_access_token",
                "default_store_ids",
                "timeout_seconds",
                "page_size",
                "max_pages",
                "sort_field",
                "sort_direction",
                "cache_ttl_seconds",
                "cache_capacity",
                "cache_mode",
            )
        }
        merged["default_store_ids"] = [
            str(store_id) for store_id in merged["default_store_ids"] or []
        ]
        return merged
