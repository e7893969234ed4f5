#!/usr/bin/env python3
"""
Worker Entry Point - Main Layer

Headless process that owns the daily forecast scheduler. Like app.py it
initializes the container and resources, then arms the scheduler and
blocks until SIGINT or SIGTERM. Run either this or an API process with the
scheduler enabled, not both, so only one timer exists per deployment.
"""

import asyncio
import signal
import sys
from pathlib import Path

# Add the project root to the Python path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

# Now import project modules
from src.main.config import get_settings  # noqa: E402
from src.main.container import app_lifespan, init_container  # noqa: E402
from src.shared import (  # noqa: E402
    configure_logging,
    get_logger,
    update_logging_from_settings,
)

# Configure logging with basic settings first
configure_logging()

# Load settings
settings = get_settings()

# Update logging with complete settings
update_logging_from_settings(settings)

# Get structured logger
logger = get_logger(__name__)


async def run_worker(stop_event: asyncio.Event) -> None:
    """
    Arm the scheduler and wait for ``stop_event``.

    The container lifespan stops the timer and lets a running cycle finish
    before Mongo is closed.
    """
    settings = get_settings()
    init_container(settings)

    async with app_lifespan(start_scheduler=False) as container:
        scheduler = container.forecast_scheduler()
        scheduler.start()
        status = scheduler.status()
        logger.info(
            "worker.started",
            target_hour=status.target_hour,
            timezone=status.timezone,
            minutes_until_next_run=status.minutes_until_next_run,
        )
        await stop_event.wait()
        logger.info("worker.stopping")


def main():
    """Main entry point for the scheduler worker."""

    logger.info("Starting forecast scheduler worker")

    async def _main() -> None:
        stop_event = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, stop_event.set)
            except NotImplementedError:
                # add_signal_handler is unavailable on Windows event loops
                signal.signal(sig, lambda *_: stop_event.set())
        await run_worker(stop_event)

    asyncio.run(_main())
    logger.info("Forecast scheduler worker stopped")


if __name__ == "__main__":
    main()
