"""
General-info service: type-dispatched upsert and read-back of the secondary
onboarding data, plus the child records of Joint, Trust and Entity investors.

The profile's ``investor_type`` selects the variant from
:mod:`app.services.investor_types`; the code paths below are shared by all
five variants.
"""

import logging
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from pydantic import BaseModel

from app.core.exceptions import BusinessRuleViolation, NotFoundException, ValidationException
from app.db.session import unit_of_work
from app.models.enums import InvestorType
from app.repositories.investor_detail_repo import InvestorDetailRepository
from app.repositories.investor_profile_repo import InvestorProfileRepository
from app.services.investor_types import InvestorTypeVariant, prepare_fields, variant_for

logger = logging.getLogger(__name__)

ORDER_INDEX_TOO_LOW = "OrderIndex must be 1 or greater"


@dataclass
class GeneralInfoView:
    investor_type: InvestorType
    general_info: Any


class GeneralInfoService:
    """Upsert / lookup of the general-info variant that matches a profile."""

    def __init__(
        self,
        profile_repo: InvestorProfileRepository,
        detail_repo: InvestorDetailRepository,
    ):
        self._profile_repo = profile_repo
        self._detail_repo = detail_repo

    # ── Queries ──

    async def get_by_profile_id(self, profile_id: UUID) -> GeneralInfoView:
        """
        Resolve profile → detail → general info (with children).

        A missing detail or general-info row is the normal state of an
        unfinished onboarding and is reported as NotFound.
        """
        profile = await self._profile_repo.get(profile_id)
        if not profile:
            raise NotFoundException("Investor profile", profile_id)

        variant = variant_for(profile.investor_type)
        detail = await self._get_detail(variant, profile.id)
        info = await self._detail_repo.get_general_info(
            variant.general_info_model,
            detail.id,
            children=variant.children_relationship,
            refresh=True,
        )
        if not info:
            raise NotFoundException("General Info", message="General Info not found")
        return GeneralInfoView(investor_type=variant.investor_type, general_info=info)

    async def _get_detail(self, variant: InvestorTypeVariant, profile_id: UUID) -> Any:
        detail = await self._detail_repo.get_detail(variant.detail_model, profile_id)
        if not detail:
            raise NotFoundException(
                f"{variant.label} investor detail",
                message=f"{variant.label} investor detail not found",
            )
        return detail

    # ── Commands ──

    async def save_general_info(self, payload: BaseModel) -> GeneralInfoView:
        """
        Create the profile's general info, or update it in place.

        Validation sequence:
        1. The profile must exist → 404.
        2. The payload variant must match the profile's type → 400.
        3. The type-specific detail must exist → 404.
        4. Coded fields must be in range (IRA account type 1-5) → 400.

        An update keeps ``created_at`` and advances ``updated_at``.
        """
        variant = variant_for(payload.investor_type)
        profile_id = payload.investor_profile_id
        fields = payload.model_dump(exclude={"investor_type", "investor_profile_id"})

        async with unit_of_work(self._profile_repo.db, "saving general info"):
            # Row lock serialises concurrent first saves of the same profile.
            profile = await self._profile_repo.get_for_update(profile_id)
            if not profile:
                raise NotFoundException("Investor profile", profile_id)
            if profile.investor_type != variant.investor_type:
                raise BusinessRuleViolation(
                    f"Investor profile is of type {profile.investor_type.value}; "
                    f"{variant.label} general info cannot be saved for it"
                )

            detail = await self._get_detail(variant, profile.id)
            fields = prepare_fields(fields, codes=variant.general_info_codes)

            info = await self._detail_repo.get_general_info(variant.general_info_model, detail.id)
            if info:
                for name, value in fields.items():
                    setattr(info, name, value)
                info.touch()
                await self._detail_repo.save(info)
                action = "Updated"
            else:
                info = variant.general_info_model(investor_detail_id=detail.id, **fields)
                await self._detail_repo.add(info)
                action = "Created"

        logger.info(
            "%s %s general info %s for profile %s", action, variant.label, info.id, profile_id
        )
        reloaded = await self._detail_repo.get_general_info(
            variant.general_info_model,
            detail.id,
            children=variant.children_relationship,
            refresh=True,
        )
        return GeneralInfoView(investor_type=variant.investor_type, general_info=reloaded)

    async def add_child_record(self, investor_type: InvestorType, payload: BaseModel) -> Any:
        """
        Attach a child record (joint account holder, trust grantor or entity
        equity owner) to an existing general-info row.
        """
        variant = variant_for(investor_type)
        child = variant.child
        if child is None:
            raise ValidationException(f"{variant.label} general info has no child records")

        fields = payload.model_dump(exclude={"general_info_id"})

        async with unit_of_work(self._detail_repo.db, f"adding the {child.label.lower()}"):
            parent = await self._detail_repo.get_general_info_by_id(
                variant.general_info_model, payload.general_info_id
            )
            if not parent:
                raise NotFoundException(
                    f"{variant.label} General Info",
                    message=f"{variant.label} General Info not found",
                )
            if child.order_field and fields[child.order_field] < 1:
                raise ValidationException(ORDER_INDEX_TOO_LOW)

            record = child.model(general_info_id=parent.id, **fields)
            await self._detail_repo.add(record)

        logger.info("Added %s %s to general info %s", child.label.lower(), record.id, parent.id)
        return record
