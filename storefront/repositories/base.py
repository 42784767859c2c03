"""
Generic SQLAlchemy repository

Provides the CRUD operations shared by every entity repository.
"""

import logging
from typing import ClassVar, Generic, List, Optional, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")


class SQLAlchemyRepository(Generic[ModelT]):
    """
    CRUD repository over a single mapped class.

    Subclasses only set ``model``. Writes are flushed, not committed;
    the session owner (request dependency or context manager) commits.
    """

    model: ClassVar[Type]

    def __init__(self, session: AsyncSession):
        """
        Initialize repository.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def find_by_id(self, id: int) -> Optional[ModelT]:
        return await self.session.get(self.model, id)

    async def find_all(self, skip: int = 0, limit: Optional[int] = None) -> List[ModelT]:
        stmt = select(self.model).order_by(self.model.id).offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def save(self, entity: ModelT) -> ModelT:
        try:
            self.session.add(entity)
            await self.session.flush()
            await self.session.refresh(entity)
            return entity
        except Exception as e:
            logger.error(f"Error saving {self.model.__name__}: {e}")
            raise

    async def delete(self, id: int) -> bool:
        entity = await self.find_by_id(id)
        if entity is None:
            return False
        await self.session.delete(entity)
        await self.session.flush()
        logger.info(f"Deleted {self.model.__name__} {id}")
        return True

    async def exists(self, id: int) -> bool:
        result = await self.session.execute(select(self.model.id).where(self.model.id == id))
        return result.scalar_one_or_none() is not None

    async def count(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(self.model))
        return result.scalar_one()
