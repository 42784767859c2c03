"""
Authentication middleware for the storefront.

Resolves the session cookie into a Principal and enforces the declarative
security rules before any route handler runs.
"""

import logging
from collections.abc import Callable
from typing import Any

from fastapi import Request, status
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.types import ASGIApp

from storefront.api.security import DEFAULT_SECURITY_RULES, AccessDecision, SecurityRules
from storefront.api.templating import render
from storefront.services.session_service import SessionService

logger = logging.getLogger(__name__)


class AuthenticationMiddleware(BaseHTTPMiddleware):
    """
    HTTP middleware for request authentication and authorization.

    - Unauthenticated requests to protected paths are redirected to the login page.
    - Authenticated requests lacking the required authority get the 403 page.
    """

    def __init__(
        self,
        app: ASGIApp,
        session_service: SessionService | None = None,
        rules: SecurityRules | None = None,
    ) -> None:
        """
        Initialize authentication middleware.

        Args:
            app: ASGI application
            session_service: Optional session service instance (for testing)
            rules: Authorization rules (defaults to DEFAULT_SECURITY_RULES)
        """
        super().__init__(app)
        self._session_service = session_service or SessionService()
        self._rules = rules or DEFAULT_SECURITY_RULES

    def _extract_token(self, request: Request) -> str | None:
        """
        Read the session token from the cookie, falling back to a Bearer header.
        """
        token = request.cookies.get(self._session_service.cookie_name)
        if token:
            return token

        auth_header = request.headers.get("Authorization")
        if not auth_header:
            return None
        parts = auth_header.split()
        if len(parts) != 2 or parts[0].lower() != "bearer":
            return None
        return parts[1]

    async def dispatch(self, request: Request, call_next: Callable[[Request], Any]) -> Response:
        path = request.url.path
        request.state.principal = None

        if self._rules.is_ignored(path):
            return await call_next(request)

        principal = self._session_service.resolve(self._extract_token(request))
        request.state.principal = principal

        decision = self._rules.decide(path, principal)
        if decision is AccessDecision.LOGIN_REQUIRED:
            logger.info(f"Authentication required for {path}, redirecting to login")
            return RedirectResponse(self._rules.login_url, status_code=status.HTTP_302_FOUND)

        if decision is AccessDecision.DENIED:
            logger.warning(f"Access denied to {path} for user {principal.user_id if principal else None}")
            return render(request, "error/403.html", status_code=status.HTTP_403_FORBIDDEN)

        return await call_next(request)
