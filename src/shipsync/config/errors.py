"""Errors raised while reading shipsync settings."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """A setting or credential is unusable; retrying the pass will not help."""


class MissingConfigurationError(ConfigurationError):
    """One or more required environment variables are unset or blank."""
