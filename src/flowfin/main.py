"""Entry point for the financial reporting API.

Wiring order:
1. AppSettings (configuration)
2. Logging setup
3. Rate table validation (fails fast on a non-positive rate)
4. FastAPI app with the in-memory tenant settings feed
5. uvicorn server
"""

import asyncio

import uvicorn

from flowfin.config import AppSettings
from flowfin.dashboard.app import create_dashboard_app
from flowfin.logging import get_logger, setup_logging


async def run() -> None:
    """Run the reporting API until interrupted."""
    settings = AppSettings()
    setup_logging(settings.log_level, settings.log_format)
    logger = get_logger("flowfin.main")

    app = create_dashboard_app(settings)
    logger.info(
        "reporting_api_starting",
        host=settings.dashboard.host,
        port=settings.dashboard.port,
        default_currency=settings.currency.default_currency,
    )

    config = uvicorn.Config(
        app,
        host=settings.dashboard.host,
        port=settings.dashboard.port,
        # uvicorn records propagate to the root handler installed by setup_logging
        log_config=None,
        log_level=settings.log_level.lower(),
        access_log=False,
    )
    server = uvicorn.Server(config)
    await server.serve()


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
