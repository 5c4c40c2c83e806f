"""
Investor profile repository: data access for ``investor_profiles``.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy.future import select

from app.models.investor_profile import InvestorProfile
from app.repositories.base import BaseRepository


class InvestorProfileRepository(BaseRepository[InvestorProfile]):
    """Concrete repository for :class:`InvestorProfile` entities."""

    async def get_by_user_id(self, user_id: str) -> Optional[InvestorProfile]:
        """Look up the profile owned by ``user_id`` (the column is unique-indexed)."""
        return await self.find_first(self.model.user_id == user_id)

    async def get_for_update(self, profile_id: UUID) -> Optional[InvestorProfile]:
        """
        Load the profile and lock its row until the transaction ends.

        Writers on a profile's beneficiaries or accreditation take this lock
        first, so their read-check-write sequences are serialised.
        ``FOR UPDATE`` locks the row on PostgreSQL.  It is a no-op on SQLite,
        where the writer lock in :mod:`app.db.session` serialises sessions instead.
        """

        async def _lock() -> Optional[InvestorProfile]:
            stmt = (
                select(self.model)
                .where(self.model.id == profile_id)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            result = await self.db.execute(stmt)
            return result.scalar_one_or_none()

        return await self._execute_with_circuit_breaker(_lock)
