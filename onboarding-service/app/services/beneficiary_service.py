"""
Beneficiary service: percentage-allocation rules for Primary and Contingent
beneficiaries.

Every write runs in one transaction that first locks the owning profile row
(``SELECT ... FOR UPDATE``), then reads the allocation, checks it and writes.
Concurrent writers on the same profile therefore see each other's committed
totals, and two additions can never jointly push a type past 100%.
"""

import logging
from typing import List
from uuid import UUID

from app.core.exceptions import BusinessRuleViolation, NotFoundException
from app.db.session import unit_of_work
from app.models.beneficiary import Beneficiary
from app.models.enums import BeneficiaryType
from app.repositories.beneficiary_repo import BeneficiaryRepository
from app.repositories.investor_profile_repo import InvestorProfileRepository
from app.schemas.beneficiary import BeneficiaryBulkCreate, BeneficiaryCreate, BeneficiaryUpdate
from app.services import allocation
from app.services.investor_types import require_code

logger = logging.getLogger(__name__)

INVALID_BENEFICIARY_TYPE = "Invalid beneficiary type. Must be 1 (Primary) or 2 (Contingent)"


def parse_beneficiary_type(value: int) -> BeneficiaryType:
    return require_code(BeneficiaryType, value, INVALID_BENEFICIARY_TYPE)


class BeneficiaryService:
    """Encapsulates the allocation invariants for :class:`Beneficiary`."""

    def __init__(
        self,
        beneficiary_repo: BeneficiaryRepository,
        profile_repo: InvestorProfileRepository,
    ):
        self._beneficiary_repo = beneficiary_repo
        self._profile_repo = profile_repo

    # ── Queries ──

    async def list_for_profile(self, profile_id: UUID) -> List[Beneficiary]:
        """All beneficiaries, Primary first, each type by percentage descending."""
        await self._require_profile(profile_id)
        beneficiaries = await self._beneficiary_repo.list_by_profile(profile_id)
        # Stable sort keeps the repository's percentage order within each type.
        return sorted(beneficiaries, key=lambda b: b.beneficiary_type.value)

    async def get_grouped(self, profile_id: UUID) -> allocation.BeneficiaryAllocation:
        """Beneficiaries partitioned by type with totals.  Nothing is enforced here."""
        await self._require_profile(profile_id)
        beneficiaries = await self._beneficiary_repo.list_by_profile(profile_id)
        return allocation.BeneficiaryAllocation.partition(beneficiaries)

    async def _require_profile(self, profile_id: UUID) -> None:
        if not await self._profile_repo.get(profile_id):
            raise NotFoundException("Investor profile", profile_id)

    async def _lock_profile(self, profile_id: UUID) -> None:
        if not await self._profile_repo.get_for_update(profile_id):
            raise NotFoundException("Investor profile", profile_id)

    # ── Commands ──

    async def add_beneficiary(self, payload: BeneficiaryCreate) -> Beneficiary:
        """
        Add one beneficiary on top of the existing allocation.

        Rejected with no write if the type's total would exceed 100%.
        Existing shares are never rescaled.
        """
        profile_id = payload.investor_profile_id

        async with unit_of_work(self._beneficiary_repo.db, "adding the beneficiary"):
            await self._lock_profile(profile_id)
            beneficiary_type = parse_beneficiary_type(payload.beneficiary_type)

            existing = await self._beneficiary_repo.list_by_profile_and_type(
                profile_id, beneficiary_type
            )
            current_total = allocation.total(existing)
            try:
                allocation.ensure_can_add(
                    beneficiary_type, current_total, payload.percentage_of_benefit
                )
            except BusinessRuleViolation:
                logger.warning(
                    "Rejected %s beneficiary for profile %s: %s%% on top of %s%%",
                    beneficiary_type.label,
                    profile_id,
                    payload.percentage_of_benefit,
                    current_total,
                )
                raise

            beneficiary = Beneficiary(
                investor_profile_id=profile_id,
                beneficiary_type=beneficiary_type,
                **payload.model_dump(exclude={"investor_profile_id", "beneficiary_type"}),
            )
            await self._beneficiary_repo.add(beneficiary)

        logger.info(
            "Added %s beneficiary %s (%s%%) for profile %s",
            beneficiary_type.label,
            beneficiary.id,
            beneficiary.percentage_of_benefit,
            profile_id,
        )
        return beneficiary

    async def replace_by_type(self, payload: BeneficiaryBulkCreate) -> List[Beneficiary]:
        """
        Replace the allocations of every type present in the batch.

        Each present type must total exactly 100%, otherwise the whole batch
        is rejected.  Types absent from the batch are left untouched.  The
        delete and the inserts commit together or not at all.
        """
        profile_id = payload.investor_profile_id

        async with unit_of_work(self._beneficiary_repo.db, "replacing beneficiaries"):
            await self._lock_profile(profile_id)

            groups = allocation.group_by_type(
                [
                    (parse_beneficiary_type(item.beneficiary_type), item)
                    for item in payload.beneficiaries
                ]
            )
            allocation.ensure_complete(
                {bt: allocation.total(items) for bt, items in groups.items()}
            )

            removed = await self._beneficiary_repo.delete_by_profile_and_types(
                profile_id, groups.keys()
            )
            created: List[Beneficiary] = []
            for beneficiary_type, items in groups.items():
                for item in items:
                    beneficiary = Beneficiary(
                        investor_profile_id=profile_id,
                        beneficiary_type=beneficiary_type,
                        **item.model_dump(exclude={"beneficiary_type"}),
                    )
                    await self._beneficiary_repo.add(beneficiary)
                    created.append(beneficiary)

        logger.info(
            "Replaced %s beneficiaries for profile %s: removed %d, added %d",
            "/".join(t.label for t in groups),
            profile_id,
            removed,
            len(created),
        )
        return created

    async def update_beneficiary(
        self, beneficiary_id: UUID, payload: BeneficiaryUpdate
    ) -> Beneficiary:
        """Edit a beneficiary in place; its type's total may not exceed 100%."""
        async with unit_of_work(self._beneficiary_repo.db, "updating the beneficiary"):
            beneficiary = await self._beneficiary_repo.get(beneficiary_id)
            if not beneficiary:
                raise NotFoundException("Beneficiary", beneficiary_id)
            await self._lock_profile(beneficiary.investor_profile_id)

            others = await self._beneficiary_repo.list_by_profile_and_type(
                beneficiary.investor_profile_id,
                beneficiary.beneficiary_type,
                exclude_id=beneficiary.id,
            )
            allocation.ensure_can_set(
                beneficiary.beneficiary_type,
                allocation.total(others),
                payload.percentage_of_benefit,
            )

            for name, value in payload.model_dump().items():
                setattr(beneficiary, name, value)
            beneficiary.touch()
            await self._beneficiary_repo.save(beneficiary)

        logger.info(
            "Updated beneficiary %s (%s%%)", beneficiary.id, beneficiary.percentage_of_benefit
        )
        return beneficiary

    async def delete_beneficiary(self, beneficiary_id: UUID) -> None:
        """
        Delete a beneficiary.  The remaining shares are not rebalanced, so the
        type may now total less than 100%.
        """
        async with unit_of_work(self._beneficiary_repo.db, "deleting the beneficiary"):
            beneficiary = await self._beneficiary_repo.get(beneficiary_id)
            if not beneficiary:
                raise NotFoundException("Beneficiary", beneficiary_id)
            await self._lock_profile(beneficiary.investor_profile_id)
            await self._beneficiary_repo.delete(beneficiary)

        logger.warning(
            "Deleted %s beneficiary %s for profile %s; total percentage for %s "
            "beneficiaries may need recalculation",
            beneficiary.beneficiary_type.label,
            beneficiary_id,
            beneficiary.investor_profile_id,
            beneficiary.beneficiary_type.label,
        )
