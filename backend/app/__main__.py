"""
Trophy API - Command Line Entry Point
=======================================

Usage:
    python -m app          (or the `trophy-api` console script)

Reads HOST / PORT / LOG_LEVEL / DATABASE_URL from the environment and runs
uvicorn. Exits with status 1 before binding the port if the configuration is
incomplete; a database that cannot be reached aborts uvicorn's startup.
"""

import logging
import sys

import uvicorn

from app.config import settings
from app.exceptions import ConfigurationError
from app.main import setup_logging

logger = logging.getLogger("trophy_api")


def main() -> None:
    setup_logging(settings.log_level)
    try:
        settings.validate_required()
    except ConfigurationError as e:
        logger.error("%s", e.message)
        sys.exit(1)

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
