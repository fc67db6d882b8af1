"""Logging setup shared by the API server and the CLI commands.

Records go to stdout and to a log file. The level comes from the caller
(AppConfig.log_level) or from the LOG_LEVEL environment variable, INFO by
default. uvicorn loggers propagate to the root logger so server access lines
use the same format; SQLAlchemy engine echo stays at WARNING unless DEBUG is
requested.
"""

import logging
import os
import sys
from pathlib import Path

LOG_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

LOG_FORMAT = "[%(asctime)s] %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_PROPAGATED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def get_log_level(level_name: str | None = None) -> int:
    """Resolve a level name, falling back to LOG_LEVEL and then INFO."""
    name = (level_name or os.getenv("LOG_LEVEL", "INFO")).upper()
    return LOG_LEVEL_MAP.get(name, logging.INFO)


def _handler(handler: logging.Handler, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_server_logging(log_file: str = "logs/server.log", level: str | None = None) -> None:
    """
    Configure the root logger with stdout and file handlers.

    Args:
        log_file: Path to log file, parent directories are created
        level: Level name (default: LOG_LEVEL env var, then INFO)
    """
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    log_level = get_log_level(level)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    root_logger.addHandler(_handler(logging.StreamHandler(sys.stdout), log_level))
    root_logger.addHandler(_handler(logging.FileHandler(log_path, encoding="utf-8"), log_level))

    for name in _PROPAGATED_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers.clear()
        server_logger.propagate = True

    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if log_level == logging.DEBUG else logging.WARNING
    )
