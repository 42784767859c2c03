from .base import Base, TimestampMixin
from .catalog import Category, Product
from .user import ROLE_ADMIN, ROLE_USER, Role, User, user_roles

__all__ = [
    "Base",
    "TimestampMixin",
    "Category",
    "Product",
    "Role",
    "User",
    "user_roles",
    "ROLE_ADMIN",
    "ROLE_USER",
]
