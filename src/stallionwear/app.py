"""Process bootstrap for the StallionWear core.

Whatever serves requests (an HTTP app, a worker, a shell) calls
``create_app()`` once at startup. It initializes the domain, configures
logging and installs the media store that the product flows receive.

Usage:
    from stallionwear.app import create_app

    domain = create_app()
    with domain.domain_context():
        ...
"""

import structlog

from stallionwear.config import Settings
from stallionwear.domain import stallionwear
from stallionwear.media import build_media_store, set_media_store
from stallionwear.utils.logging import configure_logging

logger = structlog.get_logger(__name__)

_initialized = False


def create_app(settings: Settings | None = None, log_dir=None):
    """Initialize the domain and process-wide collaborators. Idempotent."""
    global _initialized

    settings = settings or Settings.from_env()
    configure_logging(log_level=settings.log_level, log_dir=log_dir, environment=settings.environment)
    set_media_store(build_media_store(settings))

    if not _initialized:
        stallionwear.init()
        _initialized = True

    logger.info(
        "app_initialized",
        environment=settings.environment,
        media_backend=settings.media_backend,
    )
    return stallionwear
