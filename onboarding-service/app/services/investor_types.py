"""
Investor-type dispatch table.

Every type-dependent decision (which detail table, which general-info
table, which child records, which response shapes, which coded fields need
range checks) is looked up here from the profile's ``InvestorType``.
Services never branch on the type themselves.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel
from sqlmodel import SQLModel

from app.core.exceptions import ValidationException
from app.models.enums import InvestorType, IRAType, parse_code
from app.models.general_info import (
    EntityEquityOwner,
    EntityGeneralInfo,
    IndividualGeneralInfo,
    IRAGeneralInfo,
    JointAccountHolder,
    JointGeneralInfo,
    TrustGeneralInfo,
    TrustGrantor,
)
from app.models.type_detail import (
    EntityInvestorDetail,
    IndividualInvestorDetail,
    IRAInvestorDetail,
    JointInvestorDetail,
    TrustInvestorDetail,
)
from app.schemas.general_info import (
    EntityEquityOwnerResponse,
    EntityGeneralInfoResponse,
    IndividualGeneralInfoResponse,
    IRAGeneralInfoResponse,
    JointAccountHolderResponse,
    JointGeneralInfoResponse,
    TrustGeneralInfoResponse,
    TrustGrantorResponse,
)
from app.schemas.investor import (
    EntityDetailResponse,
    IndividualDetailResponse,
    IRADetailResponse,
    JointDetailResponse,
    TrustDetailResponse,
)

E = TypeVar("E", bound=Enum)


@dataclass(frozen=True)
class CodedField:
    """An integer field that must name a member of ``enum``."""

    name: str
    enum: Type[Enum]
    message: str


@dataclass(frozen=True)
class RequiredFlag:
    """A boolean field that must be ``True``."""

    name: str
    message: str


@dataclass(frozen=True)
class ChildRecordKind:
    """Ordered child records owned by a general-info row."""

    model: Type[SQLModel]
    relationship: str
    label: str
    response: Type[BaseModel]
    # Field that must be 1 or greater, if the children are explicitly ordered.
    order_field: Optional[str] = None


@dataclass(frozen=True)
class InvestorTypeVariant:
    investor_type: InvestorType
    detail_model: Type[SQLModel]
    detail_response: Type[BaseModel]
    general_info_model: Type[SQLModel]
    general_info_response: Type[BaseModel]
    detail_codes: Tuple[CodedField, ...] = ()
    detail_flags: Tuple[RequiredFlag, ...] = ()
    general_info_codes: Tuple[CodedField, ...] = ()
    child: Optional[ChildRecordKind] = None

    @property
    def label(self) -> str:
        return self.investor_type.value

    @property
    def children_relationship(self) -> Optional[str]:
        return self.child.relationship if self.child else None


VARIANTS: Dict[InvestorType, InvestorTypeVariant] = {
    InvestorType.INDIVIDUAL: InvestorTypeVariant(
        investor_type=InvestorType.INDIVIDUAL,
        detail_model=IndividualInvestorDetail,
        detail_response=IndividualDetailResponse,
        general_info_model=IndividualGeneralInfo,
        general_info_response=IndividualGeneralInfoResponse,
    ),
    InvestorType.JOINT: InvestorTypeVariant(
        investor_type=InvestorType.JOINT,
        detail_model=JointInvestorDetail,
        detail_response=JointDetailResponse,
        general_info_model=JointGeneralInfo,
        general_info_response=JointGeneralInfoResponse,
        detail_flags=(
            RequiredFlag(
                "is_joint_investment",
                "IsJointInvestment must be true for Joint investor type",
            ),
        ),
        child=ChildRecordKind(
            model=JointAccountHolder,
            relationship="account_holders",
            label="Joint account holder",
            response=JointAccountHolderResponse,
            order_field="order_index",
        ),
    ),
    InvestorType.IRA: InvestorTypeVariant(
        investor_type=InvestorType.IRA,
        detail_model=IRAInvestorDetail,
        detail_response=IRADetailResponse,
        general_info_model=IRAGeneralInfo,
        general_info_response=IRAGeneralInfoResponse,
        detail_codes=(CodedField("ira_type", IRAType, "Invalid IRA type"),),
        general_info_codes=(
            CodedField(
                "account_type",
                IRAType,
                "IRA Account Type must be one of the 5 valid types (1-5)",
            ),
        ),
    ),
    InvestorType.TRUST: InvestorTypeVariant(
        investor_type=InvestorType.TRUST,
        detail_model=TrustInvestorDetail,
        detail_response=TrustDetailResponse,
        general_info_model=TrustGeneralInfo,
        general_info_response=TrustGeneralInfoResponse,
        child=ChildRecordKind(
            model=TrustGrantor,
            relationship="grantors",
            label="Trust grantor",
            response=TrustGrantorResponse,
        ),
    ),
    InvestorType.ENTITY: InvestorTypeVariant(
        investor_type=InvestorType.ENTITY,
        detail_model=EntityInvestorDetail,
        detail_response=EntityDetailResponse,
        general_info_model=EntityGeneralInfo,
        general_info_response=EntityGeneralInfoResponse,
        child=ChildRecordKind(
            model=EntityEquityOwner,
            relationship="equity_owners",
            label="Entity equity owner",
            response=EntityEquityOwnerResponse,
        ),
    ),
}


def variant_for(investor_type: InvestorType) -> InvestorTypeVariant:
    return VARIANTS[InvestorType(investor_type)]


def require_code(enum_cls: Type[E], value: Optional[int], message: str) -> E:
    """Convert an integer code to its enum member or raise a validation error."""
    member = parse_code(enum_cls, value)
    if member is None:
        raise ValidationException(message)
    return member


def prepare_fields(
    fields: Dict[str, Any],
    codes: Tuple[CodedField, ...] = (),
    flags: Tuple[RequiredFlag, ...] = (),
) -> Dict[str, Any]:
    """Validate the variant's flags and coded fields; returns a converted copy."""
    for flag in flags:
        if fields.get(flag.name) is not True:
            raise ValidationException(flag.message)
    prepared = dict(fields)
    for code in codes:
        prepared[code.name] = require_code(code.enum, fields.get(code.name), code.message)
    return prepared
