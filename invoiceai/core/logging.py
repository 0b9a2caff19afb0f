"""
Loguru configuration shared by the API and the services.

Services import ``from loguru import logger`` directly; this module only
decides where records go.
"""

import sys

from loguru import logger

from .config import settings


def setup_logging(level: str | None = None, log_file: str | None = None):
    """
    Configure loguru sinks and return the logger.

    Args:
        level: Minimum level for all sinks (default: LOG_LEVEL setting)
        log_file: Optional path for a rotating file sink (default: LOG_FILE setting)

    Returns:
        The configured loguru logger
    """
    level = (level or settings.log_level).upper()
    log_file = log_file or settings.log_file

    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan> - "
            "<level>{message}</level> {extra}"
        ),
    )

    if log_file:
        logger.add(
            log_file,
            level=level,
            rotation="10 MB",
            retention="14 days",
            compression="zip",
            serialize=True,
        )

    logger.debug("Logging configured", level=level, log_file=log_file)
    return logger
