from .base import SQLAlchemyRepository
from .cart_store import CartStore, InMemoryCartStore, RedisCartStore, build_cart_store
from .category_repository import CategoryRepository
from .product_repository import ProductRepository
from .role_repository import RoleRepository
from .user_repository import UserRepository

__all__ = [
    "SQLAlchemyRepository",
    "CartStore",
    "InMemoryCartStore",
    "RedisCartStore",
    "build_cart_store",
    "CategoryRepository",
    "ProductRepository",
    "RoleRepository",
    "UserRepository",
]
