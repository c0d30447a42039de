"""Process-level setup for applications embedding the sync engine."""

from dishka import AsyncContainer

from eventtalk.config import Settings
from eventtalk.util.di.container import create_container
from eventtalk.util.error import ConfigurationError
from eventtalk.util.logging import setup_logging
from eventtalk.util.observability import configure_logfire, instrument_httpx

PLACEHOLDER_API_KEY = "CHANGE_ME_IN_PRODUCTION"


def validate_settings(settings: Settings) -> None:
    """Reject settings that cannot work against a real backend.

    Raises:
        ConfigurationError: If production runs with the placeholder api key
    """
    if (
        settings.environment == "production"
        and settings.gateway.api_key == PLACEHOLDER_API_KEY
    ):
        raise ConfigurationError("GATEWAY__API_KEY must be set in production")


def bootstrap(settings: Settings | None = None) -> AsyncContainer:
    """Configure logging and Logfire, then build the DI container.

    Logfire must be configured before httpx is instrumented.

    Args:
        settings: Settings to configure observability with; loaded from the
            environment when omitted

    Returns:
        Production DI container; close it on shutdown
    """
    settings = settings or Settings()
    validate_settings(settings)
    setup_logging(settings)
    configure_logfire(settings)
    instrument_httpx()
    return create_container()
