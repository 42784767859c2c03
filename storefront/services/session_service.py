"""
Cookie-based login sessions.

A session is a signed JWT stored in an HttpOnly cookie. The ``sid`` claim is
a random id generated at login; carts are keyed by it.
"""

import logging
import uuid
from dataclasses import dataclass, field

from fastapi import HTTPException
from starlette.responses import Response

from storefront.config.settings import Settings, get_settings
from storefront.models.db import ROLE_ADMIN, User
from storefront.services.token_service import TokenService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    """Authenticated user resolved from the session token"""

    user_id: int
    email: str
    session_id: str
    roles: tuple[str, ...] = field(default_factory=tuple)

    def has_authority(self, authority: str) -> bool:
        return authority in self.roles

    @property
    def is_admin(self) -> bool:
        return self.has_authority(ROLE_ADMIN)


class SessionService:
    """Issues, resolves and ends login sessions"""

    def __init__(self, token_service: TokenService | None = None, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.token_service = token_service or TokenService(self.settings)

    @property
    def cookie_name(self) -> str:
        return self.settings.SESSION_COOKIE_NAME

    def create_session_token(self, user: User) -> str:
        claims = {
            "sub": str(user.id),
            "email": user.email,
            "roles": user.authorities,
            "sid": uuid.uuid4().hex,
        }
        return self.token_service.create_access_token(data=claims)

    def login(self, response: Response, user: User) -> str:
        """Start a new session for ``user`` and attach its cookie to ``response``"""
        token = self.create_session_token(user)
        response.set_cookie(
            key=self.cookie_name,
            value=token,
            max_age=self.settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
            httponly=True,
            secure=self.settings.SESSION_COOKIE_SECURE,
            samesite="lax",
            path="/",
        )
        logger.info(f"Session started for user {user.id}")
        return token

    def logout(self, response: Response) -> None:
        response.delete_cookie(
            key=self.cookie_name,
            path="/",
            httponly=True,
            secure=self.settings.SESSION_COOKIE_SECURE,
            samesite="lax",
        )

    def resolve(self, token: str | None) -> Principal | None:
        """Turn a session token into a Principal; None when missing or invalid"""
        if not token:
            return None
        try:
            payload = self.token_service.decode_token(token)
        except HTTPException as e:
            logger.debug(f"Rejected session token: {e.detail}")
            return None

        if payload.get("token_type") != "access":
            return None
        try:
            user_id = int(payload["sub"])
        except (KeyError, TypeError, ValueError):
            return None
        session_id = payload.get("sid")
        if not session_id:
            return None

        return Principal(
            user_id=user_id,
            email=payload.get("email", ""),
            session_id=session_id,
            roles=tuple(payload.get("roles", [])),
        )
