"""
Generic async repository (Data Access Layer).

Implements the Repository pattern on top of SQLAlchemy's ``AsyncSession``.
Concrete repositories inherit from ``BaseRepository[T]`` and add the
entity-specific queries.

Design notes:
- Writes only ``flush()``.  Committing and rolling back belong to the
  service's :func:`app.db.session.unit_of_work`, so several repository calls
  form one transaction.
- **IntegrityError** is not caught here; services translate it into the
  appropriate domain error.
- Every database call is routed through the global ``db_circuit_breaker``.
"""

import logging
from typing import Any, Generic, List, Optional, Sequence, Type, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlmodel import SQLModel

from app.core.resilience import db_circuit_breaker

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=SQLModel)


class BaseRepository(Generic[ModelType]):
    """
    Generic repository for SQLModel entities.

    Parameters
    ----------
    model : Type[ModelType]
        The SQLModel class this repository manages.
    db : AsyncSession
        An active async database session (injected per-request).
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    # ── Internal helpers ──

    async def _execute_with_circuit_breaker(self, func: Any, *args: Any, **kwargs: Any) -> Any:
        return await db_circuit_breaker.call(func, *args, **kwargs)

    # ── Queries ──

    async def get(self, id: Any) -> Optional[ModelType]:
        """Fetch a single entity by primary key.  Returns ``None`` if not found."""

        async def _get() -> Optional[ModelType]:
            return await self.db.get(self.model, id)

        return await self._execute_with_circuit_breaker(_get)

    async def find_first(
        self, *criteria: Any, options: Sequence[Any] = (), refresh: bool = False
    ) -> Optional[ModelType]:
        """
        Return the first entity matching ``criteria`` or ``None``.

        ``refresh=True`` overwrites any copy already held in the identity
        map, including eagerly loaded collections passed in ``options``.
        """

        async def _find() -> Optional[ModelType]:
            stmt = select(self.model).where(*criteria).options(*options).limit(1)
            if refresh:
                stmt = stmt.execution_options(populate_existing=True)
            result = await self.db.execute(stmt)
            return result.scalars().first()

        return await self._execute_with_circuit_breaker(_find)

    async def list_where(self, *criteria: Any, order_by: Sequence[Any] = ()) -> List[ModelType]:
        """Return every entity matching ``criteria``, primary key as the final tiebreak."""

        async def _list() -> List[ModelType]:
            pk_columns = self.model.__table__.primary_key.columns
            stmt = select(self.model).where(*criteria).order_by(*order_by, *pk_columns)
            result = await self.db.execute(stmt)
            return list(result.scalars().all())

        return await self._execute_with_circuit_breaker(_list)

    # ── Commands ──

    async def add(self, entity: ModelType) -> ModelType:
        """Stage a new entity and flush it so database defaults and FKs are checked."""

        async def _add() -> ModelType:
            self.db.add(entity)
            await self.db.flush()
            return entity

        return await self._execute_with_circuit_breaker(_add)

    async def save(self, entity: ModelType) -> ModelType:
        """Flush in-place modifications of an already-tracked entity."""

        async def _save() -> ModelType:
            await self.db.flush()
            return entity

        return await self._execute_with_circuit_breaker(_save)

    async def delete(self, entity: ModelType) -> None:
        """Delete a tracked entity."""

        async def _delete() -> None:
            await self.db.delete(entity)
            await self.db.flush()

        await self._execute_with_circuit_breaker(_delete)
