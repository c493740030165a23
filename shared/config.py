"""
Shared configuration management for the edge gateway.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class GatewayConfig(BaseSettings):
    """Gateway configuration, read from the process environment and `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Cloudflare Access
    cf_access_team_domain: Optional[str] = Field(default=None)
    cf_access_aud: Optional[str] = Field(default=None)

    # Skips access verification entirely; never enable outside local development
    dev_mode: bool = Field(default=False)

    # Key set fetching
    jwks_cache_ttl: int = Field(default=300)
    jwks_http_timeout: float = Field(default=5.0)

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8787)

    @property
    def access_configured(self) -> bool:
        """True when both the team domain and the audience tag are set."""
        return bool(self.cf_access_team_domain and self.cf_access_aud)


def get_config(**overrides) -> GatewayConfig:
    """Get gateway configuration."""
    return GatewayConfig(**overrides)
