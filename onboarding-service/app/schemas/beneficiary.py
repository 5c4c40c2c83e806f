"""
Pydantic schemas for Beneficiary API request / response serialisation.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.enums import BeneficiaryType
from app.schemas.common import SSN_PATTERN


class BeneficiaryBase(BaseModel):
    """Fields common to beneficiary payloads."""

    first_middle_last_name: str = Field(..., min_length=1, max_length=200, examples=["Jane Q. Doe"])
    social_security_number: str = Field(..., pattern=SSN_PATTERN, examples=["123-45-6789"])
    date_of_birth: date
    phone: str = Field(..., min_length=7, max_length=20)
    relationship_to_owner: str = Field(..., min_length=1, max_length=100, examples=["Spouse"])
    address: str = Field(..., min_length=1, max_length=500)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=50)
    zip: str = Field(..., min_length=1, max_length=20)
    percentage_of_benefit: Decimal = Field(
        ...,
        gt=0,
        le=100,
        max_digits=5,
        decimal_places=2,
        description="Share of the benefit in percent (0.01 - 100)",
        examples=[50.00],
    )

    @field_validator("date_of_birth")
    @classmethod
    def validate_date_of_birth_not_future(cls, v: date) -> date:
        if v > date.today():
            raise ValueError("date_of_birth cannot be in the future")
        return v


class BeneficiaryCreate(BeneficiaryBase):
    """Schema for ``POST /beneficiaries`` (additive, capped at 100% per type)."""

    investor_profile_id: UUID
    beneficiary_type: int = Field(..., description="1 Primary, 2 Contingent", examples=[1])


class BeneficiaryItem(BeneficiaryBase):
    beneficiary_type: int = Field(..., description="1 Primary, 2 Contingent", examples=[1])


class BeneficiaryBulkCreate(BaseModel):
    """
    Schema for ``POST /beneficiaries/bulk``.

    Replaces every allocation whose type appears in ``beneficiaries``; each
    of those types must total exactly 100%.
    """

    investor_profile_id: UUID
    beneficiaries: List[BeneficiaryItem] = Field(..., min_length=1)


class BeneficiaryUpdate(BeneficiaryBase):
    """Schema for ``PUT /beneficiaries/{id}``.  The type of a beneficiary is fixed."""


class BeneficiaryResponse(BeneficiaryBase):
    id: UUID
    investor_profile_id: UUID
    beneficiary_type: BeneficiaryType
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BeneficiaryAllocationResponse(BaseModel):
    """Beneficiaries partitioned by type with each type's running total."""

    primary: List[BeneficiaryResponse]
    primary_total: Decimal
    contingent: List[BeneficiaryResponse]
    contingent_total: Decimal

    model_config = ConfigDict(from_attributes=True)
