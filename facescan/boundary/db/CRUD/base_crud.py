"""
Generic async CRUD for UUID-keyed models.

Insert, primary-key lookup and a guarded UPDATE ... RETURNING that
model-specific CRUD classes build their writes on.

Dependencies: sqlalchemy
System role: Shared statement building for job persistence
"""

from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import ColumnElement, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from facescan.boundary.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseCRUD(Generic[ModelT]):
    """
    Async CRUD bound to one model class.

    Methods never commit; the caller owns the session and its transaction.
    """

    def __init__(self, model: type[ModelT]) -> None:
        self.model = model

    async def create(self, session: AsyncSession, **values: Any) -> ModelT:
        """
        Insert a row and return it with server defaults loaded.

        Args:
            session: Async database session
            **values: Column values

        Returns:
            The inserted instance (flushed, not committed)
        """
        instance = self.model(**values)
        session.add(instance)
        await session.flush()
        await session.refresh(instance)
        return instance

    async def get_by_id(self, session: AsyncSession, id: UUID) -> ModelT | None:
        """Load a row by primary key, None when absent."""
        result = await session.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def update_returning(
        self,
        session: AsyncSession,
        id: UUID,
        *guards: ColumnElement[bool],
        **values: Any,
    ) -> ModelT | None:
        """
        Update one row in a single statement and return its new state.

        Extra guard conditions turn the write into a compare-and-set: the
        row is only touched when every guard still holds.

        Args:
            session: Async database session
            id: Primary key of the row
            *guards: Additional WHERE conditions
            **values: Column values (SQL expressions allowed)

        Returns:
            Updated instance, or None when no row matched id and guards
        """
        stmt = (
            update(self.model)
            .where(self.model.id == id, *guards)
            .values(**values)
            .returning(self.model)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()
