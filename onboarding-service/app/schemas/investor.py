"""
Pydantic schemas for investor-type selection and profile read-back.

``SelectTypeRequest`` is a tagged union on ``investor_type``: the client
sends the fields of exactly one of the five type-specific detail shapes.
"""

from datetime import datetime
from typing import Annotated, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, RootModel

from app.models.enums import (
    AccreditationType,
    EntityType,
    InvestorType,
    IRAType,
    JointAccountType,
    TrustType,
)

_Name = Annotated[str, Field(min_length=1, max_length=100)]
_LongName = Annotated[str, Field(min_length=1, max_length=200)]


# ────────────────────────────────────────────────────────────────────────────
# Type selection requests
# ────────────────────────────────────────────────────────────────────────────


class TypeSelectionBase(BaseModel):
    """Profile-level fields shared by every type selection."""

    is_accredited: bool = Field(default=False)
    accreditation_type: Optional[int] = Field(
        default=None,
        description="1 NetWorth, 2 Income, 3 Series 7, 4 Series 65, 5 Series 82, "
        "6 Professional role.  Required when ``is_accredited`` is true.",
        examples=[1],
    )


# Selection fields stored on the profile itself; the rest go to the detail row.
PROFILE_FIELDS = {"investor_type", "is_accredited", "accreditation_type"}


class IndividualTypeSelection(TypeSelectionBase):
    investor_type: Literal[InvestorType.INDIVIDUAL]
    first_name: _Name
    last_name: _Name
    is_us_citizen: bool


class JointTypeSelection(TypeSelectionBase):
    investor_type: Literal[InvestorType.JOINT]
    is_joint_investment: bool = Field(..., description="Must be true for Joint investors")
    joint_account_type: JointAccountType
    primary_first_name: _Name
    primary_last_name: _Name
    primary_is_us_citizen: bool
    secondary_first_name: Optional[_Name] = None
    secondary_last_name: Optional[_Name] = None
    secondary_is_us_citizen: Optional[bool] = None


class IRATypeSelection(TypeSelectionBase):
    investor_type: Literal[InvestorType.IRA]
    ira_type: int = Field(
        ...,
        description="1 Traditional, 2 Roth, 3 SEP, 4 Inherited, 5 Inherited Roth",
        examples=[1],
    )
    name_of_ira: _LongName
    first_name: _Name
    last_name: _Name
    is_us_citizen: bool


class TrustTypeSelection(TypeSelectionBase):
    investor_type: Literal[InvestorType.TRUST]
    trust_name: _LongName
    is_us_trust: bool
    trust_type: TrustType


class EntityTypeSelection(TypeSelectionBase):
    investor_type: Literal[InvestorType.ENTITY]
    company_name: _LongName
    is_us_company: bool
    entity_type: EntityType


TypeSelection = Annotated[
    Union[
        IndividualTypeSelection,
        JointTypeSelection,
        IRATypeSelection,
        TrustTypeSelection,
        EntityTypeSelection,
    ],
    Field(discriminator="investor_type"),
]


class SelectTypeRequest(RootModel[TypeSelection]):
    """Body of ``POST /investors/select-type``."""


class UpdateProfileAccreditationRequest(BaseModel):
    is_accredited: bool
    accreditation_type: Optional[int] = Field(default=None, examples=[2])


# ────────────────────────────────────────────────────────────────────────────
# Responses
# ────────────────────────────────────────────────────────────────────────────


class _DetailResponse(BaseModel):
    id: UUID
    investor_profile_id: UUID

    model_config = ConfigDict(from_attributes=True)


class IndividualDetailResponse(_DetailResponse):
    investor_type: Literal[InvestorType.INDIVIDUAL] = InvestorType.INDIVIDUAL
    first_name: str
    last_name: str
    is_us_citizen: bool


class JointDetailResponse(_DetailResponse):
    investor_type: Literal[InvestorType.JOINT] = InvestorType.JOINT
    is_joint_investment: bool
    joint_account_type: JointAccountType
    primary_first_name: str
    primary_last_name: str
    primary_is_us_citizen: bool
    secondary_first_name: Optional[str] = None
    secondary_last_name: Optional[str] = None
    secondary_is_us_citizen: Optional[bool] = None


class IRADetailResponse(_DetailResponse):
    investor_type: Literal[InvestorType.IRA] = InvestorType.IRA
    ira_type: IRAType
    name_of_ira: str
    first_name: str
    last_name: str
    is_us_citizen: bool


class TrustDetailResponse(_DetailResponse):
    investor_type: Literal[InvestorType.TRUST] = InvestorType.TRUST
    trust_name: str
    is_us_trust: bool
    trust_type: TrustType


class EntityDetailResponse(_DetailResponse):
    investor_type: Literal[InvestorType.ENTITY] = InvestorType.ENTITY
    company_name: str
    is_us_company: bool
    entity_type: EntityType


DetailResponse = Annotated[
    Union[
        IndividualDetailResponse,
        JointDetailResponse,
        IRADetailResponse,
        TrustDetailResponse,
        EntityDetailResponse,
    ],
    Field(discriminator="investor_type"),
]


class InvestorProfileResponse(BaseModel):
    """Profile plus the type-specific detail selected for it."""

    id: UUID
    user_id: str
    investor_type: InvestorType
    is_accredited: bool
    accreditation_type: Optional[AccreditationType] = None
    profile_completion_percentage: int
    is_active: bool
    created_at: datetime
    updated_at: datetime
    detail: Optional[DetailResponse] = None

    model_config = ConfigDict(from_attributes=True)
