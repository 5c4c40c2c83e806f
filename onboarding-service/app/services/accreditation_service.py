"""
Accreditation service: submission, supporting documents and review.

State machine per profile::

    (no record) → Submitted → Verified | Rejected
                      ↑            │
                      └── resubmit ┘

Resubmitting always returns the record to Submitted and clears the previous
sign-off, whether or not the accreditation type changed.  Verified and
Rejected can be reached from each other by another review.
"""

import logging
from typing import Optional
from uuid import UUID

from app.core.exceptions import NotFoundException, ValidationException
from app.db.session import unit_of_work
from app.models.accreditation import AccreditationDocument, InvestorAccreditation
from app.models.enums import AccreditationType
from app.repositories.accreditation_repo import (
    AccreditationDocumentRepository,
    AccreditationRepository,
)
from app.repositories.investor_profile_repo import InvestorProfileRepository
from app.schemas.accreditation import (
    AccreditationCreate,
    AccreditationDocumentCreate,
    AccreditationVerify,
)
from app.services.investor_service import INVALID_ACCREDITATION_TYPE
from app.services.investor_types import require_code

logger = logging.getLogger(__name__)

LICENSE_NUMBER_REQUIRED = "License Number is required for license-based accreditation types"
STATE_LICENSE_REQUIRED = "State License Held is required for license-based accreditation types"


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class AccreditationService:
    def __init__(
        self,
        accreditation_repo: AccreditationRepository,
        document_repo: AccreditationDocumentRepository,
        profile_repo: InvestorProfileRepository,
    ):
        self._accreditation_repo = accreditation_repo
        self._document_repo = document_repo
        self._profile_repo = profile_repo

    # ── Queries ──

    async def get_for_profile(self, profile_id: UUID) -> InvestorAccreditation:
        """The profile's accreditation with its documents; 404 if never submitted."""
        if not await self._profile_repo.get(profile_id):
            raise NotFoundException("Investor profile", profile_id)
        accreditation = await self._accreditation_repo.get_by_profile_with_documents(profile_id)
        if not accreditation:
            raise NotFoundException(
                "Accreditation", message="Accreditation not found for this investor profile"
            )
        return accreditation

    async def _reload(self, accreditation_id: UUID) -> InvestorAccreditation:
        accreditation = await self._accreditation_repo.get_with_documents(accreditation_id)
        if not accreditation:
            raise NotFoundException("Accreditation", accreditation_id)
        return accreditation

    # ── Commands ──

    async def save_accreditation(self, payload: AccreditationCreate) -> InvestorAccreditation:
        """
        Create or resubmit the profile's accreditation.

        Validation sequence:
        1. The profile must exist → 404.
        2. The type must be a defined value 1-6 → 400.
        3. License-based types (Series 7, 65, 82) need both a license number
           and the licensing state → 400.

        An existing record is updated in place and returned to Submitted.
        """
        profile_id = payload.investor_profile_id

        async with unit_of_work(self._accreditation_repo.db, "saving the accreditation"):
            # Row lock serialises concurrent first submissions for the profile.
            if not await self._profile_repo.get_for_update(profile_id):
                raise NotFoundException("Investor profile", profile_id)

            accreditation_type = require_code(
                AccreditationType, payload.accreditation_type, INVALID_ACCREDITATION_TYPE
            )
            if accreditation_type.is_license_based:
                if _blank(payload.license_number):
                    raise ValidationException(LICENSE_NUMBER_REQUIRED)
                if _blank(payload.state_license_held):
                    raise ValidationException(STATE_LICENSE_REQUIRED)

            accreditation = await self._accreditation_repo.get_by_profile(profile_id)
            if accreditation:
                accreditation.accreditation_type = accreditation_type
                accreditation.license_number = payload.license_number
                accreditation.state_license_held = payload.state_license_held
                accreditation.reset_verification()
                accreditation.touch()
                await self._accreditation_repo.save(accreditation)
                action = "Resubmitted"
            else:
                accreditation = InvestorAccreditation(
                    investor_profile_id=profile_id,
                    accreditation_type=accreditation_type,
                    license_number=payload.license_number,
                    state_license_held=payload.state_license_held,
                )
                await self._accreditation_repo.add(accreditation)
                action = "Submitted"

        logger.info(
            "%s accreditation %s (%s) for profile %s",
            action,
            accreditation.id,
            accreditation_type.name,
            profile_id,
        )
        return await self._reload(accreditation.id)

    async def upload_document(self, payload: AccreditationDocumentCreate) -> AccreditationDocument:
        """Record metadata of an already stored supporting file."""
        async with unit_of_work(self._document_repo.db, "uploading the document"):
            accreditation = await self._accreditation_repo.get(payload.accreditation_id)
            if not accreditation:
                raise NotFoundException("Accreditation", payload.accreditation_id)

            document = AccreditationDocument(
                accreditation_id=accreditation.id,
                document_type=payload.document_type,
                document_path=payload.document_path,
            )
            await self._document_repo.add(document)

        logger.info(
            "Recorded %s document %s for accreditation %s",
            document.document_type,
            document.id,
            accreditation.id,
        )
        return document

    async def verify(
        self, accreditation_id: UUID, reviewer_id: str, payload: AccreditationVerify
    ) -> InvestorAccreditation:
        """
        Approve or reject a submission.

        Approval stamps the reviewer and date; rejection clears them.  Notes
        are overwritten either way.
        """
        async with unit_of_work(self._accreditation_repo.db, "verifying the accreditation"):
            accreditation = await self._accreditation_repo.get(accreditation_id)
            if not accreditation:
                raise NotFoundException("Accreditation", accreditation_id)

            accreditation.record_review(payload.is_approved, reviewer_id, payload.notes)
            await self._accreditation_repo.save(accreditation)

        logger.info(
            "Accreditation %s %s by %s",
            accreditation_id,
            accreditation.status.value.lower(),
            reviewer_id,
        )
        return await self._reload(accreditation_id)

    async def delete_document(self, document_id: UUID) -> None:
        async with unit_of_work(self._document_repo.db, "deleting the document"):
            document = await self._document_repo.get(document_id)
            if not document:
                raise NotFoundException("Accreditation document", document_id)
            await self._document_repo.delete(document)

        logger.info("Deleted accreditation document %s", document_id)
