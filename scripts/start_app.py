#!/usr/bin/env python3
"""Start the background git config watcher with Logfire error tracking for startup errors."""

import asyncio
import sys

import logfire

from gitswitch.config import Settings
from gitswitch.interface.cli.app import watch_forever
from gitswitch.util.di.container import create_container
from gitswitch.util.logging import setup_logging
from gitswitch.util.observability import configure_logfire, instrument_httpx


async def run() -> None:
    container = create_container()
    try:
        async with container() as request_container:
            await watch_forever(request_container)
    finally:
        await container.close()


def main() -> int:
    """Start the watcher and log any startup errors to Logfire."""
    settings = Settings()

    # Configure logging early to catch startup errors
    setup_logging(settings)
    configure_logfire(settings)
    instrument_httpx()

    try:
        logfire.info("Starting gitswitch watcher", data_dir=str(settings.data_dir))
        asyncio.run(run())
        return 0

    except KeyboardInterrupt:
        logfire.info("gitswitch watcher stopped")
        return 0

    except Exception as e:
        logfire.error(
            "Watcher startup failed",
            error=str(e),
            error_type=type(e).__name__,
            _exc_info=sys.exc_info(),
        )
        # Re-raise so the service manager sees the failure
        raise


if __name__ == "__main__":
    sys.exit(main())
