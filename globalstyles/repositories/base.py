"""
Base Repository

Generic async CRUD helpers shared by model repositories.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from globalstyles.models.orm.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Repository over a single ORM model."""

    model: type[ModelT]

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, entity_id: Any) -> ModelT | None:
        """Get an entity by primary key."""
        return await self.session.get(self.model, entity_id)

    async def create(self, entity: ModelT) -> ModelT:
        """Add an entity and flush so the store assigns its id."""
        self.session.add(entity)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def update(self, entity: ModelT, **fields: Any) -> ModelT:
        """
        Apply field changes to an entity and flush them.

        All fields are assigned before the single flush, so the store sees
        one row update.
        """
        for name, value in fields.items():
            setattr(entity, name, value)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity
