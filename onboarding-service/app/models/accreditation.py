"""
Accreditation domain models.

``InvestorAccreditation`` is 1:1 with a profile and moves through
Submitted → Verified | Rejected.  Any resubmission returns it to Submitted
with the previous sign-off cleared.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import DateTime
from sqlmodel import Field, Relationship, SQLModel

from app.models.common import TimestampMixin, utcnow
from app.models.enums import AccreditationStatus, AccreditationType


class AccreditationDocument(SQLModel, table=True):
    """Metadata of a supporting file already stored by the upload collaborator."""

    __tablename__ = "accreditation_documents"  # type: ignore[assignment]

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    accreditation_id: uuid.UUID = Field(
        foreign_key="investor_accreditations.id",
        index=True,
        ondelete="CASCADE",
    )
    document_type: str = Field(max_length=100)
    document_path: str = Field(max_length=500)
    upload_date: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=DateTime(timezone=True),  # type: ignore[arg-type]
    )


class InvestorAccreditation(TimestampMixin, table=True):
    __tablename__ = "investor_accreditations"  # type: ignore[assignment]

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    investor_profile_id: uuid.UUID = Field(
        foreign_key="investor_profiles.id",
        unique=True,
        index=True,
        ondelete="CASCADE",
    )
    accreditation_type: AccreditationType
    status: AccreditationStatus = Field(default=AccreditationStatus.SUBMITTED, index=True)
    is_verified: bool = Field(default=False)
    verification_date: Optional[datetime] = Field(
        default=None,
        sa_type=DateTime(timezone=True),  # type: ignore[arg-type]
    )
    verified_by_user_id: Optional[str] = Field(default=None, max_length=450)
    license_number: Optional[str] = Field(default=None, max_length=100)
    state_license_held: Optional[str] = Field(default=None, max_length=50)
    notes: Optional[str] = Field(default=None, max_length=1000)

    documents: List[AccreditationDocument] = Relationship(
        sa_relationship_kwargs={
            "order_by": "AccreditationDocument.upload_date",
            "cascade": "all, delete-orphan",
            "lazy": "selectin",
        }
    )

    def reset_verification(self) -> None:
        """Return to Submitted; any earlier sign-off no longer applies."""
        self.status = AccreditationStatus.SUBMITTED
        self.is_verified = False
        self.verification_date = None
        self.verified_by_user_id = None

    def record_review(self, approved: bool, reviewer_id: str, notes: Optional[str]) -> None:
        if approved:
            self.status = AccreditationStatus.VERIFIED
            self.is_verified = True
            self.verification_date = utcnow()
            self.verified_by_user_id = reviewer_id
        else:
            self.status = AccreditationStatus.REJECTED
            self.is_verified = False
            self.verification_date = None
            self.verified_by_user_id = None
        self.notes = notes
        self.touch()
