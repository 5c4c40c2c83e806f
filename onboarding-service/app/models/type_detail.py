"""
Type-specific investor detail models.

Exactly one of these tables holds a row for a given profile, chosen by the
profile's ``investor_type``.  Each row is created in the same transaction as
its profile and referenced 1:1 through ``investor_profile_id``.
"""

import uuid
from typing import Any, Optional

from sqlmodel import Field

from app.models.common import TimestampMixin
from app.models.enums import EntityType, IRAType, JointAccountType, TrustType


def _profile_fk() -> Any:
    return Field(
        foreign_key="investor_profiles.id",
        unique=True,
        index=True,
        ondelete="CASCADE",
    )


class IndividualInvestorDetail(TimestampMixin, table=True):
    __tablename__ = "individual_investor_details"  # type: ignore[assignment]

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    investor_profile_id: uuid.UUID = _profile_fk()
    first_name: str = Field(max_length=100)
    last_name: str = Field(max_length=100)
    is_us_citizen: bool


class JointInvestorDetail(TimestampMixin, table=True):
    """Joint account detail.  ``is_joint_investment`` is always ``True``."""

    __tablename__ = "joint_investor_details"  # type: ignore[assignment]

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    investor_profile_id: uuid.UUID = _profile_fk()
    is_joint_investment: bool = Field(default=True)
    joint_account_type: JointAccountType
    primary_first_name: str = Field(max_length=100)
    primary_last_name: str = Field(max_length=100)
    primary_is_us_citizen: bool
    secondary_first_name: Optional[str] = Field(default=None, max_length=100)
    secondary_last_name: Optional[str] = Field(default=None, max_length=100)
    secondary_is_us_citizen: Optional[bool] = Field(default=None)


class IRAInvestorDetail(TimestampMixin, table=True):
    __tablename__ = "ira_investor_details"  # type: ignore[assignment]

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    investor_profile_id: uuid.UUID = _profile_fk()
    ira_type: IRAType
    name_of_ira: str = Field(max_length=200)
    first_name: str = Field(max_length=100)
    last_name: str = Field(max_length=100)
    is_us_citizen: bool


class TrustInvestorDetail(TimestampMixin, table=True):
    __tablename__ = "trust_investor_details"  # type: ignore[assignment]

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    investor_profile_id: uuid.UUID = _profile_fk()
    trust_name: str = Field(max_length=200)
    is_us_trust: bool
    trust_type: TrustType = Field(index=True)


class EntityInvestorDetail(TimestampMixin, table=True):
    __tablename__ = "entity_investor_details"  # type: ignore[assignment]

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    investor_profile_id: uuid.UUID = _profile_fk()
    company_name: str = Field(max_length=200)
    is_us_company: bool
    entity_type: EntityType = Field(index=True)
