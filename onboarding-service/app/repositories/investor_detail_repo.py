"""
Investor detail repository: data access for the type-specific detail,
general-info and general-info child tables.

The five investor types use parallel tables with the same foreign-key
layout (``investor_profile_id`` → ``investor_detail_id`` →
``general_info_id``), so one repository serves all of them; callers pass the
concrete model class of the variant they resolved.
"""

from typing import Any, Optional, Type
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlmodel import SQLModel

from app.repositories.base import BaseRepository, ModelType


class InvestorDetailRepository:
    """Repository over the per-type detail and general-info tables."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _repo(self, model: Type[ModelType]) -> BaseRepository[ModelType]:
        return BaseRepository(model, self.db)

    async def get_detail(self, model: Type[ModelType], profile_id: UUID) -> Optional[ModelType]:
        """The detail row owned by ``profile_id`` in the table of ``model``."""
        return await self._repo(model).find_first(model.investor_profile_id == profile_id)

    async def get_general_info(
        self,
        model: Type[ModelType],
        detail_id: UUID,
        children: Optional[str] = None,
        refresh: bool = False,
    ) -> Optional[ModelType]:
        """
        The general-info row owned by ``detail_id``.

        ``children`` names the relationship holding the variant's child
        records; with ``refresh=True`` they are reloaded from the database.
        """
        options = [selectinload(getattr(model, children))] if children else []
        return await self._repo(model).find_first(
            model.investor_detail_id == detail_id, options=options, refresh=refresh
        )

    async def get_general_info_by_id(
        self, model: Type[ModelType], general_info_id: UUID
    ) -> Optional[ModelType]:
        return await self._repo(model).get(general_info_id)

    async def add(self, entity: SQLModel) -> Any:
        return await self._repo(type(entity)).add(entity)

    async def save(self, entity: SQLModel) -> Any:
        return await self._repo(type(entity)).save(entity)
