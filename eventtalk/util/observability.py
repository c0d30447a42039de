"""Observability configuration using Logfire.

The caches and adapters log through logfire directly:

    import logfire

    logfire.info("Comment created", comment_id=str(comment.id))

    with logfire.span("comment_thread.load_roots", event_id=str(event_id)):
        ...
"""

from typing import Any

import logfire

from eventtalk.config import Settings


def configure_logfire(settings: Settings) -> None:
    """Configure Logfire for observability.

    Telemetry is only sent to Logfire cloud when explicitly enabled or when
    a token is present; otherwise everything stays local.

    Args:
        settings: Application settings
    """
    observability = settings.observability

    # Priority: explicit setting > token presence > default (False)
    if observability.send_to_logfire is not None:
        send_to_logfire = observability.send_to_logfire
    else:
        send_to_logfire = bool(observability.logfire_token)

    config_kwargs: dict[str, Any] = {
        "service_name": "eventtalk",
        "environment": settings.environment,
        "send_to_logfire": send_to_logfire,
        "console": (
            logfire.ConsoleOptions(
                colors="auto",
                span_style="show-parents",
                include_timestamps=True,
                verbose=settings.debug,
            )
            if observability.console
            else False
        ),
    }

    if observability.logfire_token:
        config_kwargs["token"] = observability.logfire_token

    logfire.configure(**config_kwargs)

    logfire.info(
        "Observability configured",
        environment=settings.environment,
        debug=settings.debug,
        send_to_logfire=send_to_logfire,
        has_token=bool(observability.logfire_token),
    )


def instrument_httpx() -> None:
    """Trace outbound requests to the backend."""
    logfire.instrument_httpx()
    logfire.info("httpx instrumented")
