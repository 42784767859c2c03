import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
from fastapi import HTTPException, status
from jose import JWTError, jwt

from storefront.config.settings import Settings, get_settings
from storefront.core.exceptions import InvalidPasswordError
from storefront.models.schemas import MAX_PASSWORD_BYTES

logger = logging.getLogger(__name__)

STATE_TOKEN_EXPIRE_MINUTES = 10


class TokenService:
    """
    Password hashing and JWT handling
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

        self.SECRET_KEY = self.settings.JWT_SECRET_KEY
        self.ALGORITHM = "HS256"
        self.ACCESS_TOKEN_EXPIRE_MINUTES = self.settings.ACCESS_TOKEN_EXPIRE_MINUTES

    def verify_password(self, plain_password: str, hashed_password: str | None) -> bool:
        """Check a plain password against a bcrypt hash"""
        if not hashed_password:
            return False
        try:
            return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
        except ValueError as e:
            # Malformed hash or password longer than bcrypt accepts
            logger.warning(f"Password verification rejected: {e}")
            return False

    def get_password_hash(self, password: str) -> str:
        """
        Hash a password with a fresh salt

        Raises:
            InvalidPasswordError: If the password is longer than bcrypt accepts
        """
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise InvalidPasswordError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        hash_bytes = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt())
        return hash_bytes.decode("utf-8")

    def create_access_token(self, data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
        """
        Create a signed access token

        Args:
            data: Claims to include
            expires_delta: Lifetime (defaults to ACCESS_TOKEN_EXPIRE_MINUTES)

        Returns:
            Encoded JWT
        """
        to_encode = data.copy()
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=self.ACCESS_TOKEN_EXPIRE_MINUTES))

        to_encode.update({"exp": expire, "iat": now, "token_type": "access"})
        return jwt.encode(to_encode, self.SECRET_KEY, algorithm=self.ALGORITHM)

    def decode_token(self, token: str) -> Dict[str, Any]:
        """
        Decode and validate a JWT (signature and expiry)

        Raises:
            HTTPException: 401 when the token is invalid or expired
        """
        try:
            return jwt.decode(token, self.SECRET_KEY, algorithms=[self.ALGORITHM])
        except JWTError as e:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=f"Invalid token: {str(e)}",
            ) from e

    def create_state_token(self) -> str:
        """Short-lived signed OAuth2 ``state`` value"""
        now = datetime.now(timezone.utc)
        payload = {
            "nonce": secrets.token_urlsafe(16),
            "exp": now + timedelta(minutes=STATE_TOKEN_EXPIRE_MINUTES),
            "iat": now,
            "token_type": "oauth_state",
        }
        return jwt.encode(payload, self.SECRET_KEY, algorithm=self.ALGORITHM)

    def verify_state_token(self, state: str | None, expected: str | None) -> bool:
        """The state echoed by the provider must equal the one we issued and still be valid"""
        if not state or not expected or not secrets.compare_digest(state, expected):
            return False
        try:
            payload = self.decode_token(state)
        except HTTPException:
            return False
        return payload.get("token_type") == "oauth_state"
