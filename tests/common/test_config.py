from __future__ import annotations

import os
from pathlib import Path

import pytest

from shipsync.config import (
    ConfigurationError,
    MissingConfigurationError,
    get_database_uri,
    get_sheets_config,
    get_shipping_config,
    get_storage_config,
    get_sync_config,
    require_env_var,
    require_env_vars,
)
from shipsync.config.storage import StorageConfig

SHIPPING_ENV = {
    "SHIPPING_DOMAIN": "example.org",
    "SHIPPING_COMPANY": "Example Labs",
    "SHIPPING_STREET_1": "1 MARKET ST",
    "SHIPPING_CITY": "SAN FRANCISCO",
    "SHIPPING_STATE": "CA",
    "SHIPPING_ZIPCODE": "94105",
    "SHIPPING_PHONE": "4155550100",
    "SHIPPING_CUSTOMS_SIGNER": "Pat Doe",
}


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", " value ")

    result = require_env_vars(["EXAMPLE_VAR"])

    assert result["EXAMPLE_VAR"] == "value"


def test_require_env_vars_raises_when_any_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_VAR", raising=False)

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_VAR"])

    assert "MISSING_VAR" in str(exc.value)


def test_require_env_var_handles_blank_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "   ")

    with pytest.raises(MissingConfigurationError):
        require_env_var("EXAMPLE_VAR")


def test_missing_configuration_is_a_configuration_error() -> None:
    assert issubclass(MissingConfigurationError, ConfigurationError)


def test_shipping_config_reads_office_and_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name, value in SHIPPING_ENV.items():
        monkeypatch.setenv(name, value)
    monkeypatch.delenv("SHIPPING_RATE_PREFERENCES", raising=False)
    monkeypatch.delenv("SHIPPING_TIMEZONE", raising=False)

    config = get_shipping_config()

    assert config.office.company == "Example Labs"
    assert config.office.country == "US"
    assert config.sender_email == "packages@example.org"
    assert config.tracking_host == "track.example.org"
    assert config.timezone == "America/Los_Angeles"
    assert config.rate_preferences == ("BESTVALUE", "CHEAPEST")


def test_shipping_config_rate_preferences_override(monkeypatch: pytest.MonkeyPatch) -> None:
    for name, value in SHIPPING_ENV.items():
        monkeypatch.setenv(name, value)
    monkeypatch.setenv("SHIPPING_RATE_PREFERENCES", "FASTEST, CHEAPEST")

    assert get_shipping_config().rate_preferences == ("FASTEST", "CHEAPEST")


def test_shipping_config_lists_every_missing_value(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in SHIPPING_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("SHIPPING_DOMAIN", "example.org")

    with pytest.raises(MissingConfigurationError) as exc:
        get_shipping_config()

    assert "SHIPPING_CITY" in str(exc.value)
    assert "SHIPPING_DOMAIN" not in str(exc.value)


def test_sync_config_validates_numbers(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SHIPSYNC_MAX_CONCURRENCY", "8")
    monkeypatch.setenv("SHIPSYNC_CALL_TIMEOUT_SECONDS", "12.5")

    config = get_sync_config()

    assert (config.max_concurrency, config.call_timeout_seconds) == (8, 12.5)

    monkeypatch.setenv("SHIPSYNC_MAX_CONCURRENCY", "0")
    with pytest.raises(ConfigurationError):
        get_sync_config()

    monkeypatch.setenv("SHIPSYNC_MAX_CONCURRENCY", "many")
    with pytest.raises(ConfigurationError):
        get_sync_config()


def test_sheets_config_requires_a_spreadsheet(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GOOGLE_SHEETS_ACCESS_TOKEN", "token")
    monkeypatch.setenv("SHIPMENT_SPREADSHEET_IDS", "sheet-1, ,sheet-2")
    monkeypatch.delenv("SHIPMENT_SHEET_RANGE", raising=False)

    config = get_sheets_config()

    assert config.spreadsheet_ids == ("sheet-1", "sheet-2")
    assert config.sheet_range == "Form Responses 1"

    monkeypatch.setenv("SHIPMENT_SPREADSHEET_IDS", " , ")
    with pytest.raises(ConfigurationError):
        get_sheets_config()


def test_database_uri_prefers_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "postgresql+psycopg://localhost/shipsync")

    assert get_database_uri() == "postgresql+psycopg://localhost/shipsync"


def test_database_uri_falls_back_to_data_dir(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv("DATABASE_URI", raising=False)

    uri = get_database_uri(storage=StorageConfig(data_dir=tmp_path / "data"))

    assert uri == f"sqlite+pysqlite:///{(tmp_path / 'data').resolve() / 'shipsync.db'}"
    assert (tmp_path / "data").is_dir()
    assert os.environ.get("DATABASE_URI") is None


def test_storage_defaults_to_xdg_data_home(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv("SHIPSYNC_DATA_DIR", raising=False)
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))

    storage = get_storage_config()

    assert storage.data_dir == tmp_path / "shipsync"
    assert storage.http_cache_path() == tmp_path.resolve() / "shipsync" / "http_cache.db"
