"""Configuration loading for the Katalon uploader.

Configuration comes from two sources, applied in order:
1. Environment variables (defaults)
2. Command-line flags (overrides), merged with ``update_config``

Environment Variables:
    KATALON_SERVER_URL=https://analytics.katalon.com
    KATALON_EMAIL=you@example.com
    KATALON_API_KEY=your-api-key
    KATALON_PROJECT_ID=1234        (optional)

Values are not validated here. A missing server URL or credential shows
up later as a failed request.
"""

import os
from dataclasses import fields
from typing import Any, Mapping, Optional

from kit_uploader.models import UploaderConfig


class ConfigError(Exception):
    """Raised when configuration overrides are malformed."""

    pass


# Config field -> environment variable
ENV_VARS = {
    "server_url": "KATALON_SERVER_URL",
    "email": "KATALON_EMAIL",
    "apikey": "KATALON_API_KEY",
    "project_id": "KATALON_PROJECT_ID",
}


def load_from_env(environ: Optional[Mapping[str, str]] = None) -> UploaderConfig:
    """Load the default configuration from environment variables.

    Args:
        environ: Environment mapping (defaults to os.environ)

    Returns:
        UploaderConfig with unset variables left as None.
    """
    if environ is None:
        environ = os.environ

    return UploaderConfig(**{
        field_name: environ.get(env_var)
        for field_name, env_var in ENV_VARS.items()
    })


def update_config(config: UploaderConfig, overrides: Mapping[str, Any]) -> UploaderConfig:
    """Apply overrides to a configuration in place.

    Entries whose value is None are ignored, every other entry replaces
    the current value.

    Args:
        config: Configuration to update
        overrides: Mapping of config field name to new value

    Returns:
        The same config object, for chaining.

    Raises:
        ConfigError: If an override names an unknown field.
    """
    known = {f.name for f in fields(config)}

    for key, value in overrides.items():
        if value is None:
            continue
        if key not in known:
            raise ConfigError(f"Unknown configuration key: '{key}'")
        setattr(config, key, value)

    return config
