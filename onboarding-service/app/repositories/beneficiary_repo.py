"""
Beneficiary repository: data access for the ``beneficiaries`` table.

Queries here are scoped by ``(investor_profile_id, beneficiary_type)``,
the key of one allocation, and are covered by ``ix_beneficiaries_profile_type``.
"""

from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import delete

from app.models.beneficiary import Beneficiary
from app.models.enums import BeneficiaryType
from app.repositories.base import BaseRepository


class BeneficiaryRepository(BaseRepository[Beneficiary]):
    """Concrete repository for :class:`Beneficiary` entities."""

    async def list_by_profile(self, profile_id: UUID) -> List[Beneficiary]:
        """All beneficiaries of a profile, largest share first."""
        return await self.list_where(
            self.model.investor_profile_id == profile_id,
            order_by=[self.model.percentage_of_benefit.desc()],
        )

    async def list_by_profile_and_type(
        self,
        profile_id: UUID,
        beneficiary_type: BeneficiaryType,
        exclude_id: Optional[UUID] = None,
    ) -> List[Beneficiary]:
        """Rows of one allocation, optionally without the row being edited."""
        criteria = [
            self.model.investor_profile_id == profile_id,
            self.model.beneficiary_type == beneficiary_type,
        ]
        if exclude_id is not None:
            criteria.append(self.model.id != exclude_id)
        return await self.list_where(
            *criteria, order_by=[self.model.percentage_of_benefit.desc()]
        )

    async def delete_by_profile_and_types(
        self, profile_id: UUID, beneficiary_types: Iterable[BeneficiaryType]
    ) -> int:
        """Delete every row of the given allocations; returns the number removed."""
        types = list(beneficiary_types)

        async def _delete() -> int:
            stmt = delete(self.model).where(
                self.model.investor_profile_id == profile_id,
                self.model.beneficiary_type.in_(types),
            )
            result = await self.db.execute(stmt)
            return result.rowcount or 0

        return await self._execute_with_circuit_breaker(_delete)
