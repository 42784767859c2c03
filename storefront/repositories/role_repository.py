from typing import Optional

from sqlalchemy import select

from storefront.models.db import Role

from .base import SQLAlchemyRepository


class RoleRepository(SQLAlchemyRepository[Role]):
    model = Role

    async def find_by_name(self, name: str) -> Optional[Role]:
        result = await self.session.execute(select(Role).where(Role.name == name))
        return result.scalar_one_or_none()
