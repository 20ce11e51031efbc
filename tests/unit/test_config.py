import json
from pathlib import Path

import pytest
import yaml

from sales_aggregator.core.config import AggregatorConfig


def test_config_defaults():
    config = AggregatorConfig()
    assert config.timeout_seconds == 30.0
    assert config.page_size == 100
    assert config.default_store_ids == []
    assert config.cache_mode == "keyed"
    assert config.sort_field == "codigo"
    assert config.sort_direction == "desc"


def test_config_from_env(monkeypatch):
    monkeypatch.setenv("SALES_API_BASE_URL", "https://api.example.test")
    monkeypatch.setenv("SALES_API_ACCESS_TOKEN", "token")
    monkeypatch.setenv("SALES_API_SECRET_ACCESS_TOKEN", "secret")
    monkeypatch.setenv("SALES_DEFAULT_STORE_IDS", "428885, 338180,")
    monkeypatch.setenv("SALES_TIMEOUT_SECONDS", "12.5")
    monkeypatch.setenv("SALES_PAGE_SIZE", "50")
    monkeypatch.setenv("SALES_CACHE_TTL_SECONDS", "0")
    monkeypatch.setenv("SALES_CACHE_MODE", "single_slot")

    config = AggregatorConfig.from_env()

    assert config.base_url == "https://api.example.test"
    assert config.access_token == "token"
    assert config.secret_access_token == "secret"
    assert config.default_store_ids == ["428885", "338180"]
    assert config.timeout_seconds == 12.5
    assert config.page_size == 50
    assert config.cache_ttl_seconds == 0
    assert config.cache_mode == "single_slot"


def test_config_from_env_rejects_bad_numbers(monkeypatch):
    monkeypatch.setenv("SALES_PAGE_SIZE", "many")
    with pytest.raises(ValueError):
        AggregatorConfig.from_env()


def test_config_from_file_json(tmp_path: Path):
    data = {
        "base_url": "https://api.example.test",
        "default_store_ids": [428885],
        "cache_capacity": 4,
    }
    path = tmp_path / "config.json"
    path.write_text(json.dumps(data))

    config = AggregatorConfig.from_file(str(path))

    assert config.default_store_ids == ["428885"]
    assert config.cache_capacity == 4
    assert config.page_size == 100


def test_config_from_file_yaml(tmp_path: Path):
    data = {"sort_direction": "asc", "max_pages": 10, "cache_ttl_seconds": 15}
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(data))

    config = AggregatorConfig.from_file(str(path))

    assert config.sort_direction == "asc"
    assert config.max_pages == 10
    assert config.cache_ttl_seconds == 15


def test_config_from_file_rejects_unknown_format(tmp_path: Path):
    path = tmp_path / "config.toml"
    path.write_text("base_url = 'x'")
    with pytest.raises(ValueError):
        AggregatorConfig.from_file(str(path))


def test_config_from_missing_file():
    with pytest.raises(FileNotFoundError):
        AggregatorConfig.from_file("/nonexistent/config.json")


@pytest.mark.parametrize(
    "overrides",
    [
        {"base_url": ""},
        {"timeout_seconds": 0},
        {"page_size": 0},
        {"sort_direction": "sideways"},
        {"cache_ttl_seconds": -1},
        {"cache_mode": "redis"},
    ],
)
def test_config_validate_rejects_invalid_values(overrides):
    with pytest.raises(ValueError):
        AggregatorConfig(**overrides)
