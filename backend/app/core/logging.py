"""
logging.py — Logging Setup for the Growth Model Backend

Everything the service records goes through the root logger configured here:
- scenario writes (create / update / delete / baseline promotion)
- baseline derivation, including which fields fell back to defaults
- unexpected failures in the baseline routes (logged with tracebacks)

Format: timestamp | level | module | message
The level comes from settings.LOG_LEVEL; SQL echo is governed separately by
DATABASE_ECHO.
"""

import logging

# -----------------------------------------------------------------------------
# Log Format
# -----------------------------------------------------------------------------

LOG_FORMAT = (
    "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
)

# -----------------------------------------------------------------------------
# Root Logger Initialization
# -----------------------------------------------------------------------------

def configure_logging(level: str = "INFO") -> None:
    """
    Configure the root logger for the API process.

    Parameters:
        level (str): standard level name; unknown names fall back to INFO.

    Called from the application lifespan in `main.py`.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )

    # Keep SQLAlchemy's engine logger quiet unless DATABASE_ECHO turns it on
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    logging.getLogger(__name__).info("Logging initialized with level %s", level)

# -----------------------------------------------------------------------------
# Logger Access Helper
# -----------------------------------------------------------------------------

def get_logger(name: str) -> logging.Logger:
    """Module-level logger; services call get_logger(__name__)."""
    return logging.getLogger(name)
