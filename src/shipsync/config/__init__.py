"""Application configuration helpers."""

from __future__ import annotations

from .airtable import AirtableConfig, AirtableTables, get_airtable_config
from .env import require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .geocode import GeocodeConfig, get_geocode_config
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .printer import PrinterConfig, get_printer_config
from .sendgrid import SendGridConfig, get_sendgrid_config
from .sheets import SheetsConfig, get_sheets_config
from .shippo import ShippoConfig, get_shippo_config
from .shipping import (
    CustomsDefaults,
    OfficeAddress,
    ParcelDefaults,
    ShippingConfig,
    get_shipping_config,
)
from .storage import StorageConfig, get_database_uri, get_storage_config
from .sync import SyncConfig, get_sync_config

__all__ = [
    "AirtableConfig",
    "AirtableTables",
    "CacheConfig",
    "ConfigurationError",
    "CustomsDefaults",
    "GeocodeConfig",
    "MissingConfigurationError",
    "OfficeAddress",
    "ParcelDefaults",
    "PrinterConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "SendGridConfig",
    "SheetsConfig",
    "ShippingConfig",
    "ShippoConfig",
    "StorageConfig",
    "SyncConfig",
    "configure_logging",
    "get_airtable_config",
    "get_database_uri",
    "get_geocode_config",
    "get_printer_config",
    "get_sendgrid_config",
    "get_sheets_config",
    "get_shipping_config",
    "get_shippo_config",
    "get_storage_config",
    "get_sync_config",
    "require_env_var",
    "require_env_vars",
]
