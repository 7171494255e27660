# stockroom/core/logging_config.py
"""
Logging setup for the stock service.

The level for stockroom loggers comes from ``Settings.LOG_LEVEL``. Database,
scheduler and mail internals are held at WARNING so that stock events
(quantity changes, raised notifications) are not buried.
"""

import logging
from typing import Optional

from stockroom.core.config import Settings, get_settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Library loggers that only need to surface problems
QUIET_LOGGERS = (
    "sqlalchemy",
    "sqlalchemy.engine",
    "asyncpg",
    "apscheduler",
    "smtplib",
)


def resolve_log_level(name: str) -> int:
    """Map a level name such as "debug" to its logging constant, falling back to INFO."""
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(settings: Optional[Settings] = None) -> int:
    """
    Configure the root handler and the stockroom logger.

    Returns:
        The numeric level applied to stockroom loggers
    """
    settings = settings or get_settings()
    level = resolve_log_level(settings.LOG_LEVEL)

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=[logging.StreamHandler()])

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("stockroom").setLevel(level)
    logging.getLogger("__main__").setLevel(level)

    logging.getLogger(__name__).info(f"Logging configured at level: {logging.getLevelName(level)}")
    return level


# Auto-configure when module is imported
configure_logging()
