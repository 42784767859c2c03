"""
Application factory for the storefront.

Each configuration step is handled by a dedicated method.
"""

import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from storefront.api.exception_handlers import register_exception_handlers
from storefront.api.middleware.auth import AuthenticationMiddleware
from storefront.api.middleware.logging_middleware import RequestLoggingMiddleware
from storefront.api.router import web_router
from storefront.config.settings import Settings, get_settings
from storefront.core.lifecycle import lifespan
from storefront.repositories.cart_store import CartStore, build_cart_store
from storefront.services.image_storage import ProductImageStorage
from storefront.services.session_service import SessionService

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent.parent / "static"


class AppFactory:
    """
    Factory for creating and configuring FastAPI applications.

    Separates application creation from configuration details.
    """

    def __init__(self, settings: Settings | None = None, cart_store: CartStore | None = None) -> None:
        """
        Initialize app factory.

        Args:
            settings: Application settings (uses default if not provided)
            cart_store: Cart backend override (built from CART_BACKEND if not provided)
        """
        self._settings = settings or get_settings()
        self._cart_store = cart_store

    def create_app(self) -> FastAPI:
        app = self._create_base_app()

        self._configure_state(app)
        self._configure_middleware(app)
        self._configure_exception_handlers(app)
        self._configure_routes(app)
        self._configure_static_files(app)
        self._configure_health_endpoint(app)

        logger.info(f"Application created: {self._settings.PROJECT_NAME}")
        return app

    def _create_base_app(self) -> FastAPI:
        return FastAPI(
            title=self._settings.PROJECT_NAME,
            description=self._settings.PROJECT_DESCRIPTION,
            version=self._settings.VERSION,
            docs_url="/docs" if self._settings.DEBUG else None,
            redoc_url=None,
            openapi_url="/openapi.json" if self._settings.DEBUG else None,
            lifespan=lifespan,
        )

    def _configure_state(self, app: FastAPI) -> None:
        app.state.settings = self._settings
        app.state.cart_store = self._cart_store or build_cart_store(self._settings)

    def _configure_middleware(self, app: FastAPI) -> None:
        """
        Configure application middleware.

        The last middleware added is the outermost: request logging wraps
        authentication so denied and redirected requests are logged too.
        """
        app.add_middleware(AuthenticationMiddleware, session_service=SessionService(settings=self._settings))
        app.add_middleware(RequestLoggingMiddleware)

        logger.info("Middleware configured")

    def _configure_exception_handlers(self, app: FastAPI) -> None:
        register_exception_handlers(app)

    def _configure_routes(self, app: FastAPI) -> None:
        app.include_router(web_router)
        logger.info("Routes configured")

    def _configure_static_files(self, app: FastAPI) -> None:
        """Mount css/js assets and the uploaded product images."""
        if STATIC_DIR.exists():
            app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
            logger.info(f"Static files mounted from: {STATIC_DIR}")
        else:
            logger.warning(f"Static directory not found: {STATIC_DIR}")

        images_dir = ProductImageStorage(self._settings).directory
        images_dir.mkdir(parents=True, exist_ok=True)
        app.mount("/productImages", StaticFiles(directory=str(images_dir)), name="product_images")

    def _configure_health_endpoint(self, app: FastAPI) -> None:
        @app.get("/health", tags=["health"])
        async def health_check() -> dict[str, str]:
            return {
                "status": "ok",
                "environment": self._settings.ENVIRONMENT,
            }


def create_app(settings: Settings | None = None, cart_store: CartStore | None = None) -> FastAPI:
    """
    Create the FastAPI application using the factory.

    Args:
        settings: Optional settings override
        cart_store: Optional cart backend override

    Returns:
        Configured FastAPI application
    """
    factory = AppFactory(settings, cart_store)
    return factory.create_app()
