"""
Google OAuth2 / OpenID Connect client

Async client for the authorization-code flow used by "Sign in with Google".

Endpoints:
    - GET  https://accounts.google.com/o/oauth2/v2/auth   - user consent (browser redirect)
    - POST https://oauth2.googleapis.com/token            - code exchange
    - GET  https://openidconnect.googleapis.com/v1/userinfo - profile of the signed-in user
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError

from storefront.config.settings import Settings, get_settings
from storefront.core.exceptions import OAuthError
from storefront.models.schemas import GoogleUserInfo

logger = logging.getLogger(__name__)


class GoogleOAuthClient:
    """
    Async HTTP client for Google's OAuth2 endpoints.

    Example:
        async with GoogleOAuthClient() as client:
            tokens = await client.exchange_code(code)
            info = await client.fetch_user_info(tokens["access_token"])
    """

    AUTHORIZATION_URL = "https://accounts.google.com/o/oauth2/v2/auth"
    TOKEN_URL = "https://oauth2.googleapis.com/token"
    USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"
    SCOPES = ("openid", "email", "profile")

    def __init__(self, settings: Settings | None = None, transport: httpx.AsyncBaseTransport | None = None):
        settings = settings or get_settings()

        self._client_id = settings.GOOGLE_CLIENT_ID
        self._client_secret = settings.GOOGLE_CLIENT_SECRET
        self._redirect_uri = settings.GOOGLE_REDIRECT_URI
        self._timeout = settings.GOOGLE_TIMEOUT
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

        if not (self._client_id and self._client_secret):
            logger.warning("GoogleOAuthClient initialized without GOOGLE_CLIENT_ID/GOOGLE_CLIENT_SECRET")

    async def __aenter__(self) -> GoogleOAuthClient:
        self._client = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
        return self

    async def __aexit__(self, *args) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def authorization_url(self, state: str) -> str:
        """URL the browser is redirected to for user consent"""
        params = {
            "client_id": self._client_id,
            "redirect_uri": self._redirect_uri,
            "response_type": "code",
            "scope": " ".join(self.SCOPES),
            "state": state,
            "access_type": "online",
            "prompt": "select_account",
        }
        return f"{self.AUTHORIZATION_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> dict[str, Any]:
        """
        Exchange an authorization code for tokens.

        Raises:
            OAuthError: When Google rejects the code or cannot be reached
        """
        client = self._require_client()
        data = {
            "code": code,
            "client_id": self._client_id,
            "client_secret": self._client_secret,
            "redirect_uri": self._redirect_uri,
            "grant_type": "authorization_code",
        }
        try:
            response = await client.post(self.TOKEN_URL, data=data, headers={"Accept": "application/json"})
        except httpx.HTTPError as e:
            logger.error(f"Google token endpoint request failed: {e}")
            raise OAuthError("CONNECTION_ERROR", f"Could not reach Google: {e}") from e

        if response.status_code != 200:
            error = self._error_description(response)
            logger.warning(f"Google code exchange failed ({response.status_code}): {error}")
            raise OAuthError("TOKEN_ERROR", error)

        try:
            tokens = response.json()
        except ValueError as e:
            raise OAuthError("TOKEN_ERROR", "Token response is not JSON") from e
        if not isinstance(tokens, dict) or "access_token" not in tokens:
            raise OAuthError("TOKEN_ERROR", "Token response without access_token")
        return tokens

    async def fetch_user_info(self, access_token: str) -> GoogleUserInfo:
        """
        Fetch the OpenID Connect profile of the signed-in user.

        Raises:
            OAuthError: When the request fails or the profile has no usable email
        """
        client = self._require_client()
        try:
            response = await client.get(self.USERINFO_URL, headers={"Authorization": f"Bearer {access_token}"})
        except httpx.HTTPError as e:
            logger.error(f"Google userinfo request failed: {e}")
            raise OAuthError("CONNECTION_ERROR", f"Could not reach Google: {e}") from e

        if response.status_code != 200:
            error = self._error_description(response)
            logger.warning(f"Google userinfo request failed ({response.status_code}): {error}")
            raise OAuthError("USERINFO_ERROR", error)

        try:
            info = GoogleUserInfo.model_validate(response.json())
        except ValidationError as e:
            raise OAuthError("USERINFO_ERROR", "Profile without a valid email") from e
        except ValueError as e:
            raise OAuthError("USERINFO_ERROR", "Profile response is not JSON") from e

        if not info.email_verified:
            raise OAuthError("USERINFO_ERROR", "Email address not verified by Google")
        return info

    def _require_client(self) -> httpx.AsyncClient:
        if not self._client:
            raise OAuthError("CLIENT_NOT_INITIALIZED", "Client not initialized. Use 'async with' context.")
        return self._client

    @staticmethod
    def _error_description(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        return body.get("error_description") or body.get("error") or f"HTTP {response.status_code}"
