"""
Shared configuration management for the Shipping Relay.
"""

from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="RELAY_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Listener
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000)

    # Outbound calls
    outbound_timeout_seconds: float = Field(default=5.0, gt=0)


class RelayConfig(BaseConfig):
    """Relay service configuration.

    Endpoints and credentials have no default: a missing one fails
    validation and the process does not start.
    """

    # Easyship upstream
    postal_code_base_url: str
    item_categories_url: str
    easyship_api_token: SecretStr

    # Webhook sinks
    forwarding_url: str
    discord_webhook_url: SecretStr
    notify_fallback_enabled: bool = Field(default=True)

    # Google Routes (optional, /public-transport is disabled without both)
    google_api_key: Optional[SecretStr] = Field(default=None)
    google_routes_url: Optional[str] = Field(default=None)

    # Cache
    cache_ttl_seconds: int = Field(default=600, gt=0)
    cache_check_period_seconds: int = Field(default=120, ge=0)

    # Outbound throttling (0 disables)
    outbound_rate_limit: float = Field(default=0.0, ge=0)
    outbound_rate_burst: int = Field(default=1, ge=1)
    outbound_max_wait_seconds: float = Field(default=1.0, ge=0)

    # Inbound rate limiting (0 disables)
    inbound_rate_limit: int = Field(default=0, ge=0)
    inbound_rate_window_seconds: int = Field(default=60, gt=0)
    redis_url: str = Field(default="redis://localhost:6379/0")


def get_config(**overrides) -> RelayConfig:
    """Load relay configuration from the environment."""
    return RelayConfig(**overrides)
