"""
Configuration for the Nostr Event Restore Service.

Uses pydantic-settings for environment variable loading. Variables are read
without a prefix (PORT, DATABASE_URL, ...). DATABASE_URL has no default;
constructing Settings without it raises a ValidationError, which the entry
point treats as fatal.
"""

from pydantic import Field
from pydantic_settings import BaseSettings

DEFAULT_PROFILE_RELAYS = [
    "wss://relay.damus.io",
    "wss://yabu.me",
    "wss://nostr.compile-error.net",
]

DEFAULT_RESTORE_RELAYS = [
    "wss://relay.damus.io",
    "wss://nostr-pub.wellorder.net",
    "wss://relay.nostr.band",
    "wss://nostr-relay.nokotaro.com",
    "wss://nostr.bitcoiner.social",
]


class Settings(BaseSettings):
    """Service configuration loaded from environment."""

    # Archive database
    database_url: str = Field(..., description="PostgreSQL connection string")
    db_pool_min_size: int = Field(default=1, ge=0, description="Minimum pooled connections")
    db_pool_max_size: int = Field(default=10, ge=1, description="Maximum pooled connections")
    db_connect_timeout: float = Field(
        default=10.0, gt=0, description="Seconds to wait for a pooled connection"
    )

    # HTTP server
    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=8080, description="Bind port")

    # Relays
    relay_timeout: float = Field(default=5.0, gt=0, description="Per-relay timeout seconds")
    profile_relays: list[str] = Field(
        default_factory=lambda: list(DEFAULT_PROFILE_RELAYS),
        description="Relays queried in order for kind 0 profiles",
    )
    restore_relays: list[str] = Field(
        default_factory=lambda: list(DEFAULT_RESTORE_RELAYS),
        description="Relays the browser publishes restored events to",
    )

    # Logging
    log_level: str = Field(default="INFO", description="DEBUG, INFO, WARNING, ERROR")
    log_format: str = Field(default="text", description="json or text")

    model_config = {"case_sensitive": False}

    @property
    def bind_address(self) -> str:
        """Host and port the HTTP server listens on."""
        return f"{self.host}:{self.port}"
