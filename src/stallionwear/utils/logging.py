"""Logging configuration for StallionWear.

Standard library logging carries the handlers (console plus rotating files);
structlog sits on top and renders JSON in production and staging, a plain
console format everywhere else.
"""

import logging
import logging.handlers
import sys
from pathlib import Path

import structlog

from stallionwear.config import get_environment

_LEVELS = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}
_JSON_ENVIRONMENTS = ("production", "staging")

_MAX_LOG_BYTES = 10 * 1024 * 1024
_LOG_BACKUPS = 5


def get_log_level(environment: str, override: str | None = None) -> str:
    return (override or _LEVELS.get(environment, "INFO")).upper()


def _rotating_handler(path: Path, level) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path, maxBytes=_MAX_LOG_BYTES, backupCount=_LOG_BACKUPS, encoding="utf-8"
    )
    handler.setLevel(level)
    return handler


def setup_stdlib_logging(log_level: str, log_dir: Path | str | None = None) -> None:
    """Route everything through stdout, plus ``stallionwear.log`` and
    ``stallionwear_error.log`` under ``log_dir`` when one is given."""
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = [logging.StreamHandler(sys.stdout)]

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        root_logger.addHandler(_rotating_handler(log_dir / "stallionwear.log", log_level))
        root_logger.addHandler(_rotating_handler(log_dir / "stallionwear_error.log", logging.ERROR))

    for noisy in ("protean", "asyncio"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def setup_structlog(environment: str) -> None:
    renderer = (
        structlog.processors.JSONRenderer()
        if environment in _JSON_ENVIRONMENTS
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(
    log_level: str | None = None, log_dir: Path | str | None = None, environment: str | None = None
) -> None:
    """Configure stdlib logging and structlog for ``environment``
    (defaults to the one read from the process environment)."""
    environment = environment or get_environment()
    setup_stdlib_logging(get_log_level(environment, log_level), log_dir)
    setup_structlog(environment)
