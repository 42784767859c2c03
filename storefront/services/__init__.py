from .cart_service import CartService
from .category_service import CategoryService
from .google_oauth_service import GoogleOAuthService
from .image_storage import ProductImageStorage
from .product_service import ProductService
from .session_service import Principal, SessionService
from .token_service import TokenService
from .user_service import UserService

__all__ = [
    "CartService",
    "CategoryService",
    "GoogleOAuthService",
    "ProductImageStorage",
    "ProductService",
    "Principal",
    "SessionService",
    "TokenService",
    "UserService",
]
