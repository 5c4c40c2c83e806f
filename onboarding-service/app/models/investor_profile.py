"""
Investor profile domain model.

The root record of an onboarding: one per user, carrying the investor type
selected at creation.  The type never changes afterwards; it decides which
of the five type-specific detail tables holds the profile's detail row.
"""

import uuid
from typing import Optional

from sqlalchemy import CheckConstraint
from sqlmodel import Field

from app.models.common import TimestampMixin
from app.models.enums import AccreditationType, InvestorType

INITIAL_COMPLETION_PERCENTAGE = 10


class InvestorProfile(TimestampMixin, table=True):
    """
    SQLModel table definition for investor profiles.

    Constraints:
    - ``user_id`` is unique: a user holds at most one profile.
    - ``accreditation_type`` is set iff ``is_accredited``; enforced by the
      service layer, which also clears it when accreditation is withdrawn.
    """

    __tablename__ = "investor_profiles"  # type: ignore[assignment]

    __table_args__ = (
        CheckConstraint(
            "profile_completion_percentage BETWEEN 0 AND 100",
            name="ck_investor_profiles_completion_range",
        ),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: str = Field(unique=True, index=True, max_length=450)
    investor_type: InvestorType = Field(index=True)
    is_accredited: bool = Field(default=False)
    accreditation_type: Optional[AccreditationType] = Field(default=None)
    profile_completion_percentage: int = Field(default=INITIAL_COMPLETION_PERCENTAGE)
    is_active: bool = Field(default=True)

    def __repr__(self) -> str:
        return (
            f"<InvestorProfile id={self.id} user={self.user_id} "
            f"type={self.investor_type.value}>"
        )
