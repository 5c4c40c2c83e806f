"""
Enumerations shared by the onboarding models and schemas.

Integer-coded enums keep the numeric codes clients submit (e.g. IRA account
type 1-5).  Services convert raw codes with :func:`parse_code` so that an
out-of-range value becomes a validation error with a domain-specific message.
"""

from enum import Enum
from typing import Optional, Type, TypeVar

E = TypeVar("E", bound=Enum)


class InvestorType(str, Enum):
    """The five mutually exclusive investor types.  Immutable once selected."""

    INDIVIDUAL = "Individual"
    JOINT = "Joint"
    IRA = "IRA"
    TRUST = "Trust"
    ENTITY = "Entity"


class BeneficiaryType(int, Enum):
    PRIMARY = 1
    CONTINGENT = 2

    @property
    def label(self) -> str:
        return self.name.title()


class AccreditationType(int, Enum):
    NET_WORTH = 1
    INCOME = 2
    SERIES_7 = 3
    SERIES_65 = 4
    SERIES_82 = 5
    PROFESSIONAL_ROLE = 6

    @property
    def is_license_based(self) -> bool:
        return self in LICENSE_BASED_ACCREDITATIONS


LICENSE_BASED_ACCREDITATIONS = frozenset(
    {AccreditationType.SERIES_7, AccreditationType.SERIES_65, AccreditationType.SERIES_82}
)


class AccreditationStatus(str, Enum):
    """Review state of a submitted accreditation."""

    SUBMITTED = "Submitted"
    VERIFIED = "Verified"
    REJECTED = "Rejected"


class IRAType(int, Enum):
    TRADITIONAL_IRA = 1
    ROTH_IRA = 2
    SEP_IRA = 3
    INHERITED_IRA = 4
    INHERITED_ROTH_IRA = 5


class JointAccountType(int, Enum):
    JOINT_TENANTS_WITH_RIGHT_OF_SURVIVORSHIP = 1
    JOINT_TENANTS_IN_COMMON = 2
    TENANTS_BY_THE_ENTIRETY = 3
    MARRIED_PERSON_SOLE_PROPERTY = 4
    COMMUNITY_PROPERTY_WITH_RIGHTS_OF_SURVIVORSHIP = 5
    COMMUNITY_PROPERTY = 6


class TrustType(int, Enum):
    REVOCABLE = 1
    IRREVOCABLE = 2
    GRANTOR = 3
    CHARITABLE = 4
    OTHER = 5


class EntityType(int, Enum):
    LLC = 1
    CORPORATION = 2
    S_CORPORATION = 3
    PARTNERSHIP = 4
    LIMITED_PARTNERSHIP = 5
    OTHER = 6


def parse_code(enum_cls: Type[E], value: Optional[int]) -> Optional[E]:
    """Return the member of ``enum_cls`` for ``value``, or ``None`` if undefined."""
    if value is None:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        return None
