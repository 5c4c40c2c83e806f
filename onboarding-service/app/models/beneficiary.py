"""
Beneficiary domain model.

Each row is one share of an investor's Primary or Contingent allocation.
The per-type sum of ``percentage_of_benefit`` is capped at 100 by the
beneficiary service; it is deliberately not a database constraint because
deleting a beneficiary may leave a type under-allocated.
"""

import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import CheckConstraint, Index
from sqlmodel import Field

from app.models.common import TimestampMixin
from app.models.enums import BeneficiaryType


class Beneficiary(TimestampMixin, table=True):
    __tablename__ = "beneficiaries"  # type: ignore[assignment]

    # Covers: WHERE investor_profile_id = ? AND beneficiary_type = ?
    __table_args__ = (
        Index("ix_beneficiaries_profile_type", "investor_profile_id", "beneficiary_type"),
        CheckConstraint(
            "percentage_of_benefit >= 0 AND percentage_of_benefit <= 100",
            name="ck_beneficiaries_percentage_range",
        ),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    investor_profile_id: uuid.UUID = Field(
        foreign_key="investor_profiles.id",
        index=True,
        ondelete="CASCADE",
    )
    beneficiary_type: BeneficiaryType
    first_middle_last_name: str = Field(max_length=200)
    social_security_number: str = Field(max_length=11)
    date_of_birth: date
    phone: str = Field(max_length=20)
    relationship_to_owner: str = Field(max_length=100)
    address: str = Field(max_length=500)
    city: str = Field(max_length=100)
    state: str = Field(max_length=50)
    zip: str = Field(max_length=20)
    percentage_of_benefit: Decimal = Field(max_digits=5, decimal_places=2)

    def __repr__(self) -> str:
        return (
            f"<Beneficiary id={self.id} profile={self.investor_profile_id} "
            f"type={self.beneficiary_type.label} pct={self.percentage_of_benefit}>"
        )
