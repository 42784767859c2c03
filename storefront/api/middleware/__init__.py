"""
Middleware package for the storefront.

Contains authentication and request logging middleware.
"""

from storefront.api.middleware.auth import AuthenticationMiddleware
from storefront.api.middleware.logging_middleware import RequestLoggingMiddleware

__all__ = [
    "AuthenticationMiddleware",
    "RequestLoggingMiddleware",
]
