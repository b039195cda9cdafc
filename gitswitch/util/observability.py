"""Observability configuration using Logfire.

Logfire provides:
- Structured logging with OpenTelemetry
- Spans around multi-step operations (identity switches, reconcile passes)
- Integration with httpx for outbound GitHub calls

Usage:
    import logfire

    # Structured logging (never pass credentials as attributes)
    logfire.info("Identity added", identity_id=str(identity.id))

    # Manual spans for critical operations
    with logfire.span("switch_identity", identity_id=str(identity.id)):
        ...
"""

import logfire
from sqlalchemy.ext.asyncio import AsyncEngine

from gitswitch import __version__
from gitswitch.config import Settings


def configure_logfire(settings: Settings) -> None:
    """Configure Logfire for observability.

    Token Configuration:
    - Set GITSWITCH_OBSERVABILITY__LOGFIRE_TOKEN to enable cloud sending
    - If token is present, logs will be sent to Logfire cloud by default
    - Can be explicitly controlled with GITSWITCH_OBSERVABILITY__SEND_TO_LOGFIRE

    Args:
        settings: Application settings
    """
    # Priority: explicit setting > token presence > default (False)
    if settings.observability.send_to_logfire is not None:
        send_to_logfire = settings.observability.send_to_logfire
    elif settings.observability.logfire_token:
        send_to_logfire = True
    else:
        send_to_logfire = False

    config_kwargs = {
        "service_name": "gitswitch",
        "service_version": __version__,
        "environment": settings.environment,
        "send_to_logfire": send_to_logfire,
        "console": logfire.ConsoleOptions(
            colors="auto",
            span_style="show-parents",
            include_timestamps=True,
            verbose=settings.debug,
            min_log_level="debug" if settings.debug else "warn",
        )
        if settings.observability.console
        else False,
    }

    if settings.observability.logfire_token:
        config_kwargs["token"] = settings.observability.logfire_token

    logfire.configure(**config_kwargs)

    logfire.debug(
        "Observability configured",
        environment=settings.environment,
        debug=settings.debug,
        send_to_logfire=send_to_logfire,
        has_token=bool(settings.observability.logfire_token),
    )


def instrument_httpx() -> None:
    """Instrument httpx client with Logfire.

    Automatically traces outbound requests to the device-flow and REST
    endpoints. Authorization headers are not captured.
    """
    logfire.instrument_httpx()
    logfire.debug("httpx instrumented")


def instrument_sqlalchemy(engine: AsyncEngine) -> None:
    """Instrument SQLAlchemy engine with Logfire.

    Traces reads and writes of the local state database.

    Args:
        engine: SQLAlchemy async engine
    """
    logfire.instrument_sqlalchemy(engine=engine.sync_engine)
    logfire.debug("SQLAlchemy instrumented")
