"""Application configuration using Pydantic BaseSettings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ig_relay.constants import DEFAULT_PORT, GRAPH_API_BASE_URL, GRAPH_API_VERSION


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Built once at process start and shared read-only by every handler.
    """

    model_config = SettingsConfigDict(
        # Later files override earlier ones, so .env.local takes precedence
        env_file=[".env", ".env.local"],
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Meta / Instagram Configuration
    page_access_token: str | None = Field(
        default=None, description="Page access token used as the Graph API bearer credential"
    )
    verify_token: str | None = Field(
        default=None, description="Shared secret for the webhook verification handshake"
    )
    app_secret: str | None = Field(
        default=None,
        description="App secret for X-Hub-Signature-256 verification (optional)",
    )
    require_signature: bool = Field(
        default=False,
        description="Reject webhook deliveries that cannot be signature-verified",
    )

    # Graph API
    graph_api_base_url: str = Field(
        default=GRAPH_API_BASE_URL, description="Graph API base URL"
    )
    graph_api_version: str = Field(
        default=GRAPH_API_VERSION, description="Graph API version path prefix"
    )

    # Server
    port: int = Field(default=DEFAULT_PORT, description="HTTP listen port")

    # Environment
    env: Literal["local", "railway", "prod"] = Field(
        default="local", description="Current environment"
    )
    log_level: str = Field(default="INFO", description="Python logging level")

    # Sentry Configuration
    sentry_dsn: str | None = Field(
        default=None, description="Sentry DSN for error tracking (optional)"
    )
    sentry_traces_sample_rate: float = Field(
        default=1.0, description="Sentry traces sample rate (0.0 to 1.0)"
    )

    # Logfire Configuration
    logfire_token: str | None = Field(
        default=None, description="Pydantic Logfire token (optional)"
    )

    @property
    def graph_api_url(self) -> str:
        """Versioned Graph API root, e.g. https://graph.facebook.com/v21.0."""
        return f"{self.graph_api_base_url.rstrip('/')}/{self.graph_api_version}"

    def missing_required(self) -> list[str]:
        """Return env names of required credentials that are not configured."""
        missing = []
        if not self.page_access_token:
            missing.append("PAGE_ACCESS_TOKEN")
        if not self.verify_token:
            missing.append("VERIFY_TOKEN")
        return missing


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
