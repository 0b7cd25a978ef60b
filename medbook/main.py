"""
Application entry point.

Configuration, middleware and lifecycle management are delegated to the
application factory.
"""

import logging

import sentry_sdk

from medbook.config.settings import get_settings
from medbook.core.app_factory import create_app
from medbook.core.shared import configure_logging

settings = get_settings()
configure_logging(level=settings.LOG_LEVEL, format_type=settings.LOG_FORMAT, log_file=settings.LOG_FILE)

logger = logging.getLogger(__name__)

# Initialize Sentry for error tracking
if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        send_default_pii=False,
        environment=settings.ENVIRONMENT,
    )

# Create application using factory
app = create_app(settings)

if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting application in {settings.ENVIRONMENT} mode")
    uvicorn.run(
        "medbook.main:app",
        host="0.0.0.0",
        port=8001,
        reload=settings.DEBUG,
    )
