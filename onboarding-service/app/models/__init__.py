"""
Database model registry.

Importing this package registers every table with SQLModel's metadata,
which is required before calling ``create_all()``.
"""

from app.models.accreditation import AccreditationDocument, InvestorAccreditation  # noqa: F401
from app.models.beneficiary import Beneficiary  # noqa: F401
from app.models.general_info import (  # noqa: F401
    EntityEquityOwner,
    EntityGeneralInfo,
    IndividualGeneralInfo,
    IRAGeneralInfo,
    JointAccountHolder,
    JointGeneralInfo,
    TrustGeneralInfo,
    TrustGrantor,
)
from app.models.investor_profile import InvestorProfile  # noqa: F401
from app.models.type_detail import (  # noqa: F401
    EntityInvestorDetail,
    IndividualInvestorDetail,
    IRAInvestorDetail,
    JointInvestorDetail,
    TrustInvestorDetail,
)
