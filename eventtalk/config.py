"""Application configuration."""

from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from eventtalk.domain.value import OrderDirection, OrderField


class GatewaySettings(BaseModel):
    """Remote backend (PostgREST) configuration."""

    # Project URL of the hosted backend; REST lives under /rest/v1
    url: str = "http://localhost:54321"

    # Public anon key, sent as the apikey header
    api_key: str = "CHANGE_ME_IN_PRODUCTION"

    # User session token; anonymous requests fall back to the api key
    access_token: str | None = None

    # Every remote call is bounded by this; a timeout counts as a failure
    timeout_seconds: float = Field(default=10.0, gt=0)

    @property
    def rest_url(self) -> str:
        return f"{self.url.rstrip('/')}/rest/v1"


class CommentSettings(BaseModel):
    """Comment thread cache configuration."""

    page_size: int = Field(default=20, ge=1)

    # Replies are fetched in one go when a thread is expanded
    replies_page_size: int = Field(default=50, ge=1)

    order_by: OrderField = OrderField.CREATED_AT
    order_direction: OrderDirection = OrderDirection.DESC


class NotificationSettings(BaseModel):
    """Notification feed cache configuration."""

    page_size: int = Field(default=20, ge=1)

    # Size of the bell dropdown preview
    recent_limit: int = Field(default=5, ge=1)

    # When False, feeds are opened without a push subscription
    enable_realtime: bool = True


class ObservabilitySettings(BaseModel):
    """Observability configuration for Logfire."""

    # Logfire API token (optional - if not set, logs only go to console)
    # Can be set via OBSERVABILITY__LOGFIRE_TOKEN env var
    logfire_token: str | None = None

    # Whether to send telemetry to Logfire cloud
    # If None, will auto-determine: sends if token is present, otherwise console-only
    send_to_logfire: bool | None = None

    # Console output can be silenced, e.g. in tests
    console: bool = True


class Settings(BaseSettings):
    """Application settings.

    Loaded from the environment and an optional .env file. Nested values
    use a double underscore, for example:

        GATEWAY__URL=https://project.supabase.co
        GATEWAY__API_KEY=...
        COMMENTS__ORDER_DIRECTION=asc
        NOTIFICATIONS__ENABLE_REALTIME=false
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    environment: Literal["test", "development", "staging", "production"] = "development"
    debug: bool = False

    gateway: GatewaySettings = GatewaySettings()
    comments: CommentSettings = CommentSettings()
    notifications: NotificationSettings = NotificationSettings()
    observability: ObservabilitySettings = ObservabilitySettings()
