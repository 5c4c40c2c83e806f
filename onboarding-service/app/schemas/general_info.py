"""
Pydantic schemas for general-info upserts, child records and read-back.

``SaveGeneralInfoRequest`` is a tagged union on ``investor_type`` matching
the five general-info shapes.
"""

from datetime import date, datetime
from typing import Annotated, List, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, RootModel

from app.models.enums import EntityType, InvestorType, IRAType, JointAccountType, TrustType
from app.schemas.common import SSN_PATTERN

_Text = Annotated[str, Field(min_length=1, max_length=200)]
_LongText = Annotated[str, Field(min_length=1, max_length=500)]
_Phone = Annotated[str, Field(min_length=7, max_length=20, examples=["+1-555-0100"])]
_SSN = Annotated[str, Field(pattern=SSN_PATTERN, examples=["123-45-6789"])]
_TaxId = Annotated[str, Field(min_length=1, max_length=20, examples=["12-3456789"])]
_Path = Annotated[str, Field(min_length=1, max_length=500)]


class _ContactFields(BaseModel):
    name: _Text
    date_of_birth: date
    ssn: _SSN
    address: _LongText
    phone: _Phone
    email: EmailStr


class _GeneralInfoSave(BaseModel):
    investor_profile_id: UUID


# ────────────────────────────────────────────────────────────────────────────
# Upsert requests
# ────────────────────────────────────────────────────────────────────────────


class IndividualGeneralInfoSave(_ContactFields, _GeneralInfoSave):
    investor_type: Literal[InvestorType.INDIVIDUAL]
    driver_license_path: Optional[_Path] = None
    w9_path: Optional[_Path] = None


class JointGeneralInfoSave(_GeneralInfoSave):
    investor_type: Literal[InvestorType.JOINT]
    is_joint_investment: bool
    joint_account_type: JointAccountType


class IRAGeneralInfoSave(_ContactFields, _GeneralInfoSave):
    investor_type: Literal[InvestorType.IRA]
    custodian_name: _Text
    account_type: int = Field(..., description="IRA account type, 1-5", examples=[2])
    ira_account_number: Annotated[str, Field(min_length=1, max_length=50)]
    is_rolling_over_to_cnb: bool
    custodian_phone_number: _Phone
    custodian_fax_number: Optional[_Phone] = None
    has_liquidated_assets: bool


class _FormationFields(BaseModel):
    date_of_formation: date
    purpose_of_formation: _LongText
    tin_ein: _TaxId


class TrustGeneralInfoSave(_FormationFields, _GeneralInfoSave):
    investor_type: Literal[InvestorType.TRUST]
    trust_name: _Text
    is_us_trust: bool
    trust_type: TrustType


class EntityGeneralInfoSave(_FormationFields, _GeneralInfoSave):
    investor_type: Literal[InvestorType.ENTITY]
    company_name: _Text
    is_us_company: bool
    entity_type: EntityType
    has_operating_agreement: bool


GeneralInfoSave = Annotated[
    Union[
        IndividualGeneralInfoSave,
        JointGeneralInfoSave,
        IRAGeneralInfoSave,
        TrustGeneralInfoSave,
        EntityGeneralInfoSave,
    ],
    Field(discriminator="investor_type"),
]


class SaveGeneralInfoRequest(RootModel[GeneralInfoSave]):
    """Body of ``POST /general-info``."""


# ────────────────────────────────────────────────────────────────────────────
# Child records
# ────────────────────────────────────────────────────────────────────────────


class JointAccountHolderCreate(_ContactFields):
    general_info_id: UUID
    order_index: int = Field(..., description="Position of the holder, starting at 1")


class TrustGrantorCreate(BaseModel):
    general_info_id: UUID
    name: _Text


class EntityEquityOwnerCreate(BaseModel):
    general_info_id: UUID
    name: _Text


class _ChildResponse(BaseModel):
    id: UUID
    general_info_id: UUID
    name: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class JointAccountHolderResponse(_ChildResponse):
    date_of_birth: date
    ssn: str
    address: str
    phone: str
    email: str
    order_index: int


class TrustGrantorResponse(_ChildResponse):
    pass


class EntityEquityOwnerResponse(_ChildResponse):
    pass


# ────────────────────────────────────────────────────────────────────────────
# Read-back
# ────────────────────────────────────────────────────────────────────────────


class _GeneralInfoResponse(BaseModel):
    id: UUID
    investor_detail_id: UUID
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class IndividualGeneralInfoResponse(_GeneralInfoResponse):
    investor_type: Literal[InvestorType.INDIVIDUAL] = InvestorType.INDIVIDUAL
    name: str
    date_of_birth: date
    ssn: str
    address: str
    phone: str
    email: str
    driver_license_path: Optional[str] = None
    w9_path: Optional[str] = None


class JointGeneralInfoResponse(_GeneralInfoResponse):
    investor_type: Literal[InvestorType.JOINT] = InvestorType.JOINT
    is_joint_investment: bool
    joint_account_type: JointAccountType
    account_holders: List[JointAccountHolderResponse] = []


class IRAGeneralInfoResponse(_GeneralInfoResponse):
    investor_type: Literal[InvestorType.IRA] = InvestorType.IRA
    name: str
    date_of_birth: date
    ssn: str
    address: str
    phone: str
    email: str
    custodian_name: str
    account_type: IRAType
    ira_account_number: str
    is_rolling_over_to_cnb: bool
    custodian_phone_number: str
    custodian_fax_number: Optional[str] = None
    has_liquidated_assets: bool


class TrustGeneralInfoResponse(_GeneralInfoResponse):
    investor_type: Literal[InvestorType.TRUST] = InvestorType.TRUST
    trust_name: str
    is_us_trust: bool
    trust_type: TrustType
    date_of_formation: date
    purpose_of_formation: str
    tin_ein: str
    grantors: List[TrustGrantorResponse] = []


class EntityGeneralInfoResponse(_GeneralInfoResponse):
    investor_type: Literal[InvestorType.ENTITY] = InvestorType.ENTITY
    company_name: str
    is_us_company: bool
    entity_type: EntityType
    date_of_formation: date
    purpose_of_formation: str
    tin_ein: str
    has_operating_agreement: bool
    equity_owners: List[EntityEquityOwnerResponse] = []


GeneralInfoResponse = Annotated[
    Union[
        IndividualGeneralInfoResponse,
        JointGeneralInfoResponse,
        IRAGeneralInfoResponse,
        TrustGeneralInfoResponse,
        EntityGeneralInfoResponse,
    ],
    Field(discriminator="investor_type"),
]


class InvestorGeneralInfoResponse(BaseModel):
    """General info tagged with the investor type it belongs to."""

    investor_type: InvestorType
    general_info: GeneralInfoResponse
