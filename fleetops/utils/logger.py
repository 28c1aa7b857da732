"""Logging setup shared by the API, CLI, and background helpers."""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO", sql_echo: bool = False) -> None:
    """Attach a stdout handler to the root logger once.

    Args:
        level: Logging level name. Unknown names fall back to INFO.
        sql_echo: Emit SQLAlchemy statement logs at INFO when true.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger()

    if root.handlers:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root.addHandler(handler)
    root.setLevel(numeric_level)

    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if sql_echo else logging.WARNING
    )


def get_logger(name: str) -> logging.Logger:
    """Get a named logger, typically for ``__name__``."""
    return logging.getLogger(name)
