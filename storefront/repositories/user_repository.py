from typing import Optional

from sqlalchemy import select

from storefront.models.db import User

from .base import SQLAlchemyRepository


class UserRepository(SQLAlchemyRepository[User]):
    model = User

    async def find_by_email(self, email: str) -> Optional[User]:
        """Emails are stored lower-cased, so the lookup is case-insensitive"""
        result = await self.session.execute(select(User).where(User.email == email.strip().lower()))
        return result.scalar_one_or_none()
