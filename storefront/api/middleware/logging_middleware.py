"""
Access log for storefront pages.

One line per request with the shopper behind it (user id and session id once
the authentication middleware has resolved the cookie), the status and the
time taken. Asset and health paths are not logged but still get the headers.
"""

import logging
import time
import uuid
from collections.abc import Callable
from typing import Any

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"
RESPONSE_TIME_HEADER = "X-Response-Time-Ms"


def shopper_label(request: Request) -> str:
    """``user=<id> sid=<first 8 chars>`` for signed-in requests, ``anonymous`` otherwise"""
    principal = getattr(request.state, "principal", None)
    if principal is None:
        return "anonymous"
    return f"user={principal.user_id} sid={principal.session_id[:8]}"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs storefront requests and stamps correlation and timing headers"""

    QUIET_PREFIXES: tuple[str, ...] = (
        "/health",
        "/static",
        "/productImages",
        "/images",
        "/css",
        "/js",
        "/favicon.ico",
    )

    def __init__(self, app: ASGIApp, quiet_prefixes: tuple[str, ...] | None = None) -> None:
        super().__init__(app)
        self._quiet_prefixes = quiet_prefixes if quiet_prefixes is not None else self.QUIET_PREFIXES

    def _is_quiet(self, path: str) -> bool:
        return any(path == prefix or path.startswith(prefix + "/") for prefix in self._quiet_prefixes)

    async def dispatch(self, request: Request, call_next: Callable[[Request], Any]) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or uuid.uuid4().hex[:12]
        request.state.correlation_id = correlation_id
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.exception(
                f"[{correlation_id}] {request.method} {request.url.path} failed after {elapsed_ms:.1f}ms "
                f"({shopper_label(request)})"
            )
            raise

        elapsed_ms = (time.perf_counter() - started) * 1000
        response.headers[CORRELATION_HEADER] = correlation_id
        response.headers[RESPONSE_TIME_HEADER] = f"{elapsed_ms:.2f}"

        if not self._is_quiet(request.url.path):
            level = logging.WARNING if response.status_code >= 500 else logging.INFO
            logger.log(
                level,
                f"[{correlation_id}] {request.method} {request.url.path} -> {response.status_code} "
                f"in {elapsed_ms:.1f}ms ({shopper_label(request)})",
            )
        return response
