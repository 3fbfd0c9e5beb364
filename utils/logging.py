import logging
import sys
from typing import Optional

NOISY_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "aiosqlite")


def setup_logging(level: Optional[str] = "INFO", sql_echo: bool = False) -> None:
    """
    Configure application-wide logging once, at app creation.
    Uses a concise formatter compatible with Uvicorn's style; SQL chatter is
    kept at WARNING unless explicitly requested.
    """
    log_level = getattr(logging, str(level).upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Clear existing handlers to avoid duplicates in reloads
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.INFO if sql_echo else logging.WARNING)
