import logging
from typing import Callable

from storefront.clients.google_oauth_client import GoogleOAuthClient
from storefront.models.db import User
from storefront.services.user_service import UserService

logger = logging.getLogger(__name__)


class GoogleOAuthService:
    """
    "Sign in with Google": builds the consent redirect and completes the
    authorization-code flow, provisioning the local account on first login.
    """

    def __init__(
        self,
        user_service: UserService,
        client_factory: Callable[[], GoogleOAuthClient] = GoogleOAuthClient,
    ):
        self.user_service = user_service
        self.client_factory = client_factory

    def authorization_url(self, state: str) -> str:
        return self.client_factory().authorization_url(state)

    async def complete_login(self, code: str) -> User:
        """
        Exchange the code, read the Google profile and return the local user.

        Raises:
            OAuthError: If any step against Google fails
        """
        async with self.client_factory() as client:
            tokens = await client.exchange_code(code)
            info = await client.fetch_user_info(tokens["access_token"])

        user = await self.user_service.get_or_register_oauth_user(info)
        logger.info(f"OAuth2 login completed for user {user.id}")
        return user
