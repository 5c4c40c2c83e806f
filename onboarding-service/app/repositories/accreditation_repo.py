"""
Accreditation repositories: ``investor_accreditations`` and their documents.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy.orm import selectinload

from app.models.accreditation import AccreditationDocument, InvestorAccreditation
from app.repositories.base import BaseRepository


class AccreditationRepository(BaseRepository[InvestorAccreditation]):
    """Concrete repository for :class:`InvestorAccreditation` entities."""

    async def get_by_profile(self, profile_id: UUID) -> Optional[InvestorAccreditation]:
        return await self.find_first(self.model.investor_profile_id == profile_id)

    async def get_with_documents(self, accreditation_id: UUID) -> Optional[InvestorAccreditation]:
        """Reload the record together with a fresh copy of its documents."""
        return await self.find_first(
            self.model.id == accreditation_id,
            options=[selectinload(self.model.documents)],
            refresh=True,
        )

    async def get_by_profile_with_documents(
        self, profile_id: UUID
    ) -> Optional[InvestorAccreditation]:
        return await self.find_first(
            self.model.investor_profile_id == profile_id,
            options=[selectinload(self.model.documents)],
            refresh=True,
        )


class AccreditationDocumentRepository(BaseRepository[AccreditationDocument]):
    """Concrete repository for :class:`AccreditationDocument` entities."""
