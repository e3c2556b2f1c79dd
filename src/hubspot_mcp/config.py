"""Process configuration.

Every setting can be supplied through the environment (or a ``.env`` file in
the working directory). ``HUBSPOT_TOKEN`` is the only required one.
"""

from __future__ import annotations

from typing import Any

from pydantic import SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from hubspot_mcp.exceptions import ConfigurationError
from hubspot_mcp.utilities.logging import LogLevel


class Settings(BaseSettings):
    """HubSpot MCP server settings.

    Field names map to upper-case environment variables, e.g. ``PORT=8080``
    sets ``port``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_parse_none_str="None",
        extra="ignore",
    )

    # HubSpot settings
    hubspot_token: SecretStr
    hubspot_base_url: str = "https://api.hubapi.com"
    hubspot_timeout: float | None = 30.0
    """Seconds before an outbound HubSpot call fails; ``None`` (``HUBSPOT_TIMEOUT=None``) disables the limit."""

    # Logging
    log_level: LogLevel = "INFO"

    # HTTP settings
    host: str = "0.0.0.0"
    port: int = 3000
    sse_path: str = "/sse"
    message_path: str = "/messages"

    @field_validator("hubspot_token")
    @classmethod
    def _token_not_blank(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value().strip():
            raise ValueError("HUBSPOT_TOKEN must not be empty")
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


def load_settings(**overrides: Any) -> Settings:
    """Build ``Settings`` from the environment, raising ``ConfigurationError`` when it is unusable.

    Keyword arguments whose value is ``None`` are ignored so that unset CLI
    options fall through to the environment.
    """
    values = {key: value for key, value in overrides.items() if value is not None}
    try:
        return Settings(**values)
    except ValidationError as err:
        missing = [".".join(str(part) for part in error["loc"]) for error in err.errors()]
        raise ConfigurationError(f"Invalid configuration ({', '.join(missing)}): {err}") from err
