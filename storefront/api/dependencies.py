"""
FastAPI dependencies for injection: database-bound repositories and services,
the cart store, and the current principal.
"""

import logging

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.config.settings import Settings, get_settings
from storefront.database.async_db import get_async_db
from storefront.repositories import (
    CartStore,
    CategoryRepository,
    ProductRepository,
    RoleRepository,
    UserRepository,
)
from storefront.services import (
    CartService,
    CategoryService,
    GoogleOAuthService,
    Principal,
    ProductImageStorage,
    ProductService,
    SessionService,
    TokenService,
    UserService,
)

logger = logging.getLogger(__name__)

_token_service: TokenService | None = None
_session_service: SessionService | None = None


def get_token_service() -> TokenService:
    global _token_service
    if _token_service is None:
        _token_service = TokenService()
    return _token_service


def get_session_service() -> SessionService:
    global _session_service
    if _session_service is None:
        _session_service = SessionService(get_token_service())
    return _session_service


# ============================================================
# REPOSITORIES
# ============================================================


def get_category_repository(db: AsyncSession = Depends(get_async_db)) -> CategoryRepository:  # noqa: B008
    return CategoryRepository(db)


def get_product_repository(db: AsyncSession = Depends(get_async_db)) -> ProductRepository:  # noqa: B008
    return ProductRepository(db)


def get_user_repository(db: AsyncSession = Depends(get_async_db)) -> UserRepository:  # noqa: B008
    return UserRepository(db)


def get_role_repository(db: AsyncSession = Depends(get_async_db)) -> RoleRepository:  # noqa: B008
    return RoleRepository(db)


# ============================================================
# SERVICES
# ============================================================


def get_image_storage(settings: Settings = Depends(get_settings)) -> ProductImageStorage:  # noqa: B008
    return ProductImageStorage(settings)


def get_product_service(
    product_repository: ProductRepository = Depends(get_product_repository),  # noqa: B008
    category_repository: CategoryRepository = Depends(get_category_repository),  # noqa: B008
    image_storage: ProductImageStorage = Depends(get_image_storage),  # noqa: B008
) -> ProductService:
    return ProductService(product_repository, category_repository, image_storage)


def get_category_service(
    category_repository: CategoryRepository = Depends(get_category_repository),  # noqa: B008
    product_repository: ProductRepository = Depends(get_product_repository),  # noqa: B008
) -> CategoryService:
    return CategoryService(category_repository, product_repository)


def get_user_service(
    user_repository: UserRepository = Depends(get_user_repository),  # noqa: B008
    role_repository: RoleRepository = Depends(get_role_repository),  # noqa: B008
    token_service: TokenService = Depends(get_token_service),  # noqa: B008
) -> UserService:
    return UserService(user_repository, role_repository, token_service)


def get_google_oauth_service(
    user_service: UserService = Depends(get_user_service),  # noqa: B008
) -> GoogleOAuthService:
    return GoogleOAuthService(user_service)


def get_cart_store(request: Request) -> CartStore:
    """The cart store created by the app factory"""
    return request.app.state.cart_store


def get_cart_service(
    store: CartStore = Depends(get_cart_store),  # noqa: B008
    product_service: ProductService = Depends(get_product_service),  # noqa: B008
) -> CartService:
    return CartService(store, product_service)


# ============================================================
# PRINCIPAL
# ============================================================


def get_current_principal(request: Request) -> Principal | None:
    """Principal resolved by AuthenticationMiddleware, None for anonymous requests"""
    return getattr(request.state, "principal", None)


def require_principal(principal: Principal | None = Depends(get_current_principal)) -> Principal:  # noqa: B008
    """
    Principal of an authenticated request

    Raises:
        HTTPException: 401 when the request is anonymous
    """
    if principal is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return principal


async def get_cart_count(
    principal: Principal | None = Depends(get_current_principal),  # noqa: B008
    cart_service: CartService = Depends(get_cart_service),  # noqa: B008
) -> int:
    """Item count shown in the page header; 0 for anonymous visitors"""
    if principal is None:
        return 0
    return await cart_service.count(principal.session_id)
