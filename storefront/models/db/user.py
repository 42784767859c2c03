"""
User and role models used by authentication and authorization
"""

from typing import List

from sqlalchemy import Column, ForeignKey, Index, Integer, String, Table
from sqlalchemy.orm import Mapped, relationship

from .base import Base, TimestampMixin

ROLE_ADMIN = "ROLE_ADMIN"
ROLE_USER = "ROLE_USER"

user_roles = Table(
    "user_roles",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)


class Role(Base):
    """Authority granted to users (ROLE_ADMIN, ROLE_USER)"""

    __tablename__ = "roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), unique=True, nullable=False)

    def __repr__(self):
        return f"<Role(id={self.id}, name='{self.name}')>"


class User(Base, TimestampMixin):
    """
    Storefront account.

    Attributes:
        id: Primary key
        first_name: Given name
        last_name: Family name
        email: Unique, lower-cased login name
        password_hash: bcrypt hash; NULL for accounts created through OAuth2
        roles: Granted authorities
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=True)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=True)

    roles: Mapped[List[Role]] = relationship("Role", secondary=user_roles, lazy="selectin")

    __table_args__ = (Index("idx_users_email", email),)

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}')>"

    @property
    def authorities(self) -> list[str]:
        return sorted(role.name for role in self.roles or [])

    def has_authority(self, authority: str) -> bool:
        return authority in self.authorities
