"""
General-info models, one per investor type.

A general-info row belongs 1:1 to the type-specific detail row (not to the
profile directly).  Joint, Trust and Entity general info additionally own an
ordered list of child records that are added once the parent exists.
"""

import uuid
from datetime import date
from typing import Any, List, Optional

from sqlalchemy import CheckConstraint
from sqlmodel import Field, Relationship

from app.models.common import TimestampMixin
from app.models.enums import EntityType, IRAType, JointAccountType, TrustType


def _detail_fk(table: str) -> Any:
    return Field(
        foreign_key=f"{table}.id",
        unique=True,
        index=True,
        ondelete="CASCADE",
    )


def _parent_fk(table: str) -> Any:
    return Field(foreign_key=f"{table}.id", index=True, ondelete="CASCADE")


def _children(order_by: str) -> Any:
    return Relationship(
        sa_relationship_kwargs={
            "order_by": order_by,
            "cascade": "all, delete-orphan",
            "lazy": "selectin",
        }
    )


# ────────────────────────────────────────────────────────────────────────────
# Individual
# ────────────────────────────────────────────────────────────────────────────


class IndividualGeneralInfo(TimestampMixin, table=True):
    __tablename__ = "individual_general_info"  # type: ignore[assignment]

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    investor_detail_id: uuid.UUID = _detail_fk("individual_investor_details")
    name: str = Field(max_length=200)
    date_of_birth: date
    ssn: str = Field(max_length=11)
    address: str = Field(max_length=500)
    phone: str = Field(max_length=20)
    email: str = Field(max_length=320)
    driver_license_path: Optional[str] = Field(default=None, max_length=500)
    w9_path: Optional[str] = Field(default=None, max_length=500)


# ────────────────────────────────────────────────────────────────────────────
# Joint
# ────────────────────────────────────────────────────────────────────────────


class JointAccountHolder(TimestampMixin, table=True):
    __tablename__ = "joint_account_holders"  # type: ignore[assignment]

    __table_args__ = (
        CheckConstraint("order_index >= 1", name="ck_joint_account_holders_order_index"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    general_info_id: uuid.UUID = _parent_fk("joint_general_info")
    name: str = Field(max_length=200)
    date_of_birth: date
    ssn: str = Field(max_length=11)
    address: str = Field(max_length=500)
    phone: str = Field(max_length=20)
    email: str = Field(max_length=320)
    order_index: int


class JointGeneralInfo(TimestampMixin, table=True):
    __tablename__ = "joint_general_info"  # type: ignore[assignment]

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    investor_detail_id: uuid.UUID = _detail_fk("joint_investor_details")
    is_joint_investment: bool
    joint_account_type: JointAccountType

    account_holders: List[JointAccountHolder] = _children("JointAccountHolder.order_index")


# ────────────────────────────────────────────────────────────────────────────
# IRA
# ────────────────────────────────────────────────────────────────────────────


class IRAGeneralInfo(TimestampMixin, table=True):
    __tablename__ = "ira_general_info"  # type: ignore[assignment]

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    investor_detail_id: uuid.UUID = _detail_fk("ira_investor_details")
    name: str = Field(max_length=200)
    date_of_birth: date
    ssn: str = Field(max_length=11)
    address: str = Field(max_length=500)
    phone: str = Field(max_length=20)
    email: str = Field(max_length=320)
    custodian_name: str = Field(max_length=200)
    account_type: IRAType
    ira_account_number: str = Field(max_length=50)
    is_rolling_over_to_cnb: bool
    custodian_phone_number: str = Field(max_length=20)
    custodian_fax_number: Optional[str] = Field(default=None, max_length=20)
    has_liquidated_assets: bool


# ────────────────────────────────────────────────────────────────────────────
# Trust
# ────────────────────────────────────────────────────────────────────────────


class TrustGrantor(TimestampMixin, table=True):
    __tablename__ = "trust_grantors"  # type: ignore[assignment]

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    general_info_id: uuid.UUID = _parent_fk("trust_general_info")
    name: str = Field(max_length=200)


class TrustGeneralInfo(TimestampMixin, table=True):
    __tablename__ = "trust_general_info"  # type: ignore[assignment]

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    investor_detail_id: uuid.UUID = _detail_fk("trust_investor_details")
    trust_name: str = Field(max_length=200)
    is_us_trust: bool
    trust_type: TrustType
    date_of_formation: date
    purpose_of_formation: str = Field(max_length=500)
    tin_ein: str = Field(max_length=20)

    grantors: List[TrustGrantor] = _children("TrustGrantor.created_at")


# ────────────────────────────────────────────────────────────────────────────
# Entity
# ────────────────────────────────────────────────────────────────────────────


class EntityEquityOwner(TimestampMixin, table=True):
    __tablename__ = "entity_equity_owners"  # type: ignore[assignment]

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    general_info_id: uuid.UUID = _parent_fk("entity_general_info")
    name: str = Field(max_length=200)


class EntityGeneralInfo(TimestampMixin, table=True):
    __tablename__ = "entity_general_info"  # type: ignore[assignment]

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    investor_detail_id: uuid.UUID = _detail_fk("entity_investor_details")
    company_name: str = Field(max_length=200)
    is_us_company: bool
    entity_type: EntityType
    date_of_formation: date
    purpose_of_formation: str = Field(max_length=500)
    tin_ein: str = Field(max_length=20)
    has_operating_agreement: bool

    equity_owners: List[EntityEquityOwner] = _children("EntityEquityOwner.created_at")
