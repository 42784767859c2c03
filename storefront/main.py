"""
Application entry point.

All configuration, middleware, and lifecycle management is delegated
to specialized modules.
"""

import logging

import sentry_sdk

from storefront.config.settings import get_settings
from storefront.core.app_factory import create_app
from storefront.core.logger import configure_logging

settings = get_settings()

if settings.LOG_JSON:
    configure_logging("DEBUG" if settings.DEBUG else "INFO", format_type="json")
elif settings.is_development:
    configure_logging("DEBUG" if settings.DEBUG else "INFO", format_type="colored")
else:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

logger = logging.getLogger(__name__)

if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        send_default_pii=False,
        environment=settings.ENVIRONMENT,
    )

app = create_app()

if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting application in {settings.ENVIRONMENT} mode")
    uvicorn.run(
        "storefront.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
