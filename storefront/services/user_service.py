import logging
from typing import List, Optional

from storefront.core.exceptions import EmailAlreadyRegisteredError, UserNotFoundError
from storefront.models.db import ROLE_USER, Role, User
from storefront.models.schemas import GoogleUserInfo, UserCreate
from storefront.repositories.role_repository import RoleRepository
from storefront.repositories.user_repository import UserRepository
from storefront.services.token_service import TokenService

logger = logging.getLogger(__name__)


class UserService:
    """
    User accounts: registration, credential checks and OAuth2 provisioning.

    Also serves as the user-detail lookup used by form login
    (``load_user_by_email`` / ``authenticate``).
    """

    def __init__(
        self,
        user_repository: UserRepository,
        role_repository: RoleRepository,
        token_service: TokenService | None = None,
    ):
        self.user_repository = user_repository
        self.role_repository = role_repository
        self.token_service = token_service or TokenService()

    async def load_user_by_email(self, email: str) -> User:
        """
        Load a user by email

        Raises:
            UserNotFoundError: If no account uses this email
        """
        user = await self.user_repository.find_by_email(email)
        if user is None:
            raise UserNotFoundError(email)
        return user

    async def authenticate(self, email: str, password: str) -> Optional[User]:
        """
        Check form-login credentials

        Returns:
            The user if the password matches, None otherwise
        """
        try:
            user = await self.load_user_by_email(email)
        except UserNotFoundError:
            logger.warning(f"Login attempt for unknown email: {email}")
            return None

        if not self.token_service.verify_password(password, user.password_hash):
            logger.warning(f"Failed login attempt for user {user.id}")
            return None

        logger.info(f"Successful login for user {user.id}")
        return user

    async def register(self, form: UserCreate) -> User:
        """
        Create a customer account with ROLE_USER

        Raises:
            EmailAlreadyRegisteredError: If the email is taken
        """
        if await self.user_repository.find_by_email(form.email):
            raise EmailAlreadyRegisteredError(form.email)

        user = User(
            first_name=form.first_name,
            last_name=form.last_name,
            email=form.email,
            password_hash=self.token_service.get_password_hash(form.password),
            roles=[await self._customer_role()],
        )
        user = await self.user_repository.save(user)
        logger.info(f"User registered: {user.email} (ID: {user.id})")
        return user

    async def get_or_register_oauth_user(self, info: GoogleUserInfo) -> User:
        """
        Return the account for an OAuth2 identity, creating it on first login.

        Accounts created here have no password and can only sign in via OAuth2.
        """
        email = str(info.email).strip().lower()
        user = await self.user_repository.find_by_email(email)
        if user is not None:
            return user

        first_name = info.given_name or info.name or email.split("@")[0]
        user = User(
            first_name=first_name,
            last_name=info.family_name,
            email=email,
            password_hash=None,
            roles=[await self._customer_role()],
        )
        user = await self.user_repository.save(user)
        logger.info(f"User registered through OAuth2: {user.email} (ID: {user.id})")
        return user

    def authorities(self, user: User) -> List[str]:
        return user.authorities

    async def _customer_role(self) -> Role:
        role = await self.role_repository.find_by_name(ROLE_USER)
        if role is None:
            role = await self.role_repository.save(Role(name=ROLE_USER))
        return role
