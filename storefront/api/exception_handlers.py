"""
Exception handlers for the storefront.

Errors are rendered as HTML error pages; 401 responses become a redirect to
the login page.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import RedirectResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from storefront.api.templating import render
from storefront.core.exceptions import StorefrontError

logger = logging.getLogger(__name__)

ERROR_TEMPLATES = {
    status.HTTP_403_FORBIDDEN: "error/403.html",
    status.HTTP_404_NOT_FOUND: "error/404.html",
    status.HTTP_500_INTERNAL_SERVER_ERROR: "error/500.html",
}
GENERIC_ERROR_TEMPLATE = "error/error.html"


def render_error(request: Request, status_code: int, message: str | None = None) -> Response:
    """Render the error page for ``status_code``"""
    template = ERROR_TEMPLATES.get(status_code, GENERIC_ERROR_TEMPLATE)
    return render(
        request,
        template,
        {"status_code": status_code, "message": message},
        status_code=status_code,
    )


async def http_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle HTTPException (including routing 404/405) with an error page."""
    if not isinstance(exc, StarletteHTTPException):
        return render_error(request, status.HTTP_500_INTERNAL_SERVER_ERROR)

    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        return RedirectResponse("/login", status_code=status.HTTP_302_FOUND)

    response = render_error(request, exc.status_code, str(exc.detail) if exc.detail else None)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def storefront_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle domain errors using the status code they carry."""
    if not isinstance(exc, StorefrontError):
        return render_error(request, status.HTTP_500_INTERNAL_SERVER_ERROR)

    logger.warning(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    return render_error(request, exc.status_code, exc.message)


async def validation_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle request validation errors (bad path params, missing form fields)."""
    errors = []
    if isinstance(exc, (RequestValidationError, ValidationError)):
        for error in exc.errors():
            errors.append(
                {
                    "field": ".".join(str(loc) for loc in error["loc"]),
                    "message": error["msg"],
                    "type": error["type"],
                }
            )

    logger.warning(f"Validation error on {request.url.path}: {errors}")

    message = "; ".join(f"{e['field']}: {e['message']}" for e in errors) or "Invalid request"
    return render_error(request, status.HTTP_400_BAD_REQUEST, message)


async def global_exception_handler(request: Request, exc: Exception) -> Response:
    """
    Handle all unhandled exceptions.

    Logs the full exception with traceback and renders the 500 page.
    """
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}: {exc!s}",
        exc_info=True,
    )
    return render_error(request, status.HTTP_500_INTERNAL_SERVER_ERROR)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(StorefrontError, storefront_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    logger.info("Exception handlers registered")
