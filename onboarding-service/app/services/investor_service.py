"""
Investor service: profile creation by type selection, profile read-back and
the profile-level accreditation flag.

A profile is created exactly once per user together with its type-specific
detail row, in one transaction.  The type chosen here is final.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from app.core.exceptions import BusinessRuleViolation, NotFoundException, ValidationException
from app.db.session import unit_of_work
from app.models.enums import AccreditationType
from app.models.investor_profile import InvestorProfile
from app.repositories.investor_detail_repo import InvestorDetailRepository
from app.repositories.investor_profile_repo import InvestorProfileRepository
from app.schemas.investor import PROFILE_FIELDS, TypeSelectionBase
from app.services.investor_types import prepare_fields, require_code, variant_for

logger = logging.getLogger(__name__)

DUPLICATE_PROFILE = "User already has an investor profile"
ACCREDITATION_TYPE_REQUIRED = "Accreditation type is required when investor is accredited"
INVALID_ACCREDITATION_TYPE = "Invalid accreditation type. Must be between 1 and 6."


@dataclass
class ProfileView:
    profile: InvestorProfile
    detail: Optional[Any]


def resolve_accreditation_type(
    is_accredited: bool, accreditation_type: Optional[int]
) -> Optional[AccreditationType]:
    """Accreditation type is required iff accredited, and dropped otherwise."""
    if not is_accredited:
        return None
    if accreditation_type is None:
        raise ValidationException(ACCREDITATION_TYPE_REQUIRED)
    return require_code(AccreditationType, accreditation_type, INVALID_ACCREDITATION_TYPE)


class InvestorService:
    """
    Encapsulates profile creation and lookup.

    Needs the profile repository plus the detail repository, because a
    profile is always created and read together with its detail row.
    """

    def __init__(
        self,
        profile_repo: InvestorProfileRepository,
        detail_repo: InvestorDetailRepository,
    ):
        self._profile_repo = profile_repo
        self._detail_repo = detail_repo

    # ── Queries ──

    async def get_profile_for_user(self, user_id: str) -> ProfileView:
        profile = await self._profile_repo.get_by_user_id(user_id)
        if not profile:
            raise NotFoundException("Investor profile", message="Investor profile not found")
        return await self._with_detail(profile)

    async def get_profile(self, profile_id: UUID) -> ProfileView:
        profile = await self._profile_repo.get(profile_id)
        if not profile:
            raise NotFoundException("Investor profile", profile_id)
        return await self._with_detail(profile)

    async def _with_detail(self, profile: InvestorProfile) -> ProfileView:
        variant = variant_for(profile.investor_type)
        detail = await self._detail_repo.get_detail(variant.detail_model, profile.id)
        return ProfileView(profile=profile, detail=detail)

    # ── Commands ──

    async def select_type(self, user_id: str, selection: TypeSelectionBase) -> ProfileView:
        """
        Create the caller's profile and its type-specific detail row.

        Validation sequence:
        1. The user must not already own a profile → BusinessRuleViolation.
        2. Variant rules: Joint requires ``is_joint_investment``; IRA requires
           a defined IRA type (1-5) → ValidationException.
        3. An accredited investor must name a defined accreditation type.

        Profile and detail are inserted in one transaction; a failure on the
        detail insert leaves no profile behind.
        """
        variant = variant_for(selection.investor_type)

        async with unit_of_work(self._profile_repo.db, "creating the investor profile"):
            if await self._profile_repo.get_by_user_id(user_id):
                logger.warning("Rejected second profile for user %s", user_id)
                raise BusinessRuleViolation(DUPLICATE_PROFILE)

            detail_fields = prepare_fields(
                selection.model_dump(exclude=PROFILE_FIELDS),
                codes=variant.detail_codes,
                flags=variant.detail_flags,
            )
            accreditation_type = resolve_accreditation_type(
                selection.is_accredited, selection.accreditation_type
            )

            profile = InvestorProfile(
                user_id=user_id,
                investor_type=variant.investor_type,
                is_accredited=selection.is_accredited,
                accreditation_type=accreditation_type,
            )
            # The unique index on user_id catches a concurrent duplicate that
            # slipped past the check above.
            try:
                await self._profile_repo.add(profile)
            except IntegrityError as exc:
                logger.warning("IntegrityError creating profile for user %s: %s", user_id, exc)
                raise BusinessRuleViolation(DUPLICATE_PROFILE) from exc

            detail = variant.detail_model(investor_profile_id=profile.id, **detail_fields)
            await self._detail_repo.add(detail)

        logger.info(
            "Created %s investor profile %s for user %s",
            variant.label,
            profile.id,
            user_id,
        )
        return ProfileView(profile=profile, detail=detail)

    async def update_profile_accreditation(
        self, profile_id: UUID, is_accredited: bool, accreditation_type: Optional[int]
    ) -> ProfileView:
        """Set the profile's accreditation flag; the type is cleared when not accredited."""
        async with unit_of_work(self._profile_repo.db, "updating the investor profile"):
            profile = await self._profile_repo.get_for_update(profile_id)
            if not profile:
                raise NotFoundException("Investor profile", profile_id)

            profile.accreditation_type = resolve_accreditation_type(
                is_accredited, accreditation_type
            )
            profile.is_accredited = is_accredited
            profile.touch()
            await self._profile_repo.save(profile)

        logger.info(
            "Updated accreditation of profile %s: accredited=%s type=%s",
            profile_id,
            is_accredited,
            profile.accreditation_type,
        )
        return await self._with_detail(profile)
