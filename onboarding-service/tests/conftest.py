"""
Shared pytest fixtures for the test suite.

All tests run with ``USE_SQLITE=true``.  Service and API tests use mocked
repositories or services; the integration tests in ``test_integration.py``
build their own in-memory SQLite database per test.
"""

import os

os.environ.setdefault("USE_SQLITE", "true")

import uuid  # noqa: E402
from datetime import date, datetime, timezone  # noqa: E402
from decimal import Decimal  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402

from app.models.accreditation import AccreditationDocument, InvestorAccreditation  # noqa: E402
from app.models.beneficiary import Beneficiary  # noqa: E402
from app.models.enums import (  # noqa: E402
    AccreditationStatus,
    AccreditationType,
    BeneficiaryType,
    InvestorType,
    IRAType,
)
from app.models.investor_profile import InvestorProfile  # noqa: E402
from app.models.type_detail import IndividualInvestorDetail, IRAInvestorDetail  # noqa: E402

# ────────────────────────────────────────────────────────────────────────────
# Factory helpers — create domain objects with sensible defaults
# ────────────────────────────────────────────────────────────────────────────

USER_ID = "user-0001"
REVIEWER_ID = "advisor-0001"
PROFILE_ID = uuid.UUID("11111111-1111-1111-1111-111111111111")
DETAIL_ID = uuid.UUID("22222222-2222-2222-2222-222222222222")
BENEFICIARY_ID = uuid.UUID("33333333-3333-3333-3333-333333333333")
ACCREDITATION_ID = uuid.UUID("44444444-4444-4444-4444-444444444444")
DOCUMENT_ID = uuid.UUID("55555555-5555-5555-5555-555555555555")
GENERAL_INFO_ID = uuid.UUID("66666666-6666-6666-6666-666666666666")

INVESTOR_HEADERS = {"X-User-Id": USER_ID, "X-User-Role": "Investor"}
REVIEWER_HEADERS = {"X-User-Id": REVIEWER_ID, "X-User-Role": "Advisor"}


def beneficiary_fields(
    percentage: str = "50", beneficiary_type: int = 1, name: str = "Jane Doe"
) -> dict:
    """Request payload fields of a beneficiary (JSON-compatible)."""
    return {
        "beneficiary_type": beneficiary_type,
        "first_middle_last_name": name,
        "social_security_number": "123-45-6789",
        "date_of_birth": "1980-05-17",
        "phone": "555-0100",
        "relationship_to_owner": "Spouse",
        "address": "1 Main Street",
        "city": "Springfield",
        "state": "IL",
        "zip": "62701",
        "percentage_of_benefit": percentage,
    }


def make_profile(
    *,
    id: uuid.UUID = PROFILE_ID,
    user_id: str = USER_ID,
    investor_type: InvestorType = InvestorType.INDIVIDUAL,
    is_accredited: bool = False,
    accreditation_type: AccreditationType | None = None,
) -> InvestorProfile:
    """Create an InvestorProfile domain object with sensible test defaults."""
    return InvestorProfile(
        id=id,
        user_id=user_id,
        investor_type=investor_type,
        is_accredited=is_accredited,
        accreditation_type=accreditation_type,
    )


def make_individual_detail(
    *, id: uuid.UUID = DETAIL_ID, profile_id: uuid.UUID = PROFILE_ID
) -> IndividualInvestorDetail:
    return IndividualInvestorDetail(
        id=id,
        investor_profile_id=profile_id,
        first_name="Ada",
        last_name="Lovelace",
        is_us_citizen=True,
    )


def make_ira_detail(
    *, id: uuid.UUID = DETAIL_ID, profile_id: uuid.UUID = PROFILE_ID
) -> IRAInvestorDetail:
    return IRAInvestorDetail(
        id=id,
        investor_profile_id=profile_id,
        ira_type=IRAType.ROTH_IRA,
        name_of_ira="Lovelace Rollover IRA",
        first_name="Ada",
        last_name="Lovelace",
        is_us_citizen=True,
    )


def make_beneficiary(
    *,
    id: uuid.UUID | None = None,
    profile_id: uuid.UUID = PROFILE_ID,
    beneficiary_type: BeneficiaryType = BeneficiaryType.PRIMARY,
    percentage: Decimal = Decimal("50.00"),
    name: str = "Jane Doe",
) -> Beneficiary:
    """Create a Beneficiary domain object with sensible test defaults."""
    return Beneficiary(
        id=id or uuid.uuid4(),
        investor_profile_id=profile_id,
        beneficiary_type=beneficiary_type,
        first_middle_last_name=name,
        social_security_number="123-45-6789",
        date_of_birth=date(1980, 5, 17),
        phone="555-0100",
        relationship_to_owner="Spouse",
        address="1 Main Street",
        city="Springfield",
        state="IL",
        zip="62701",
        percentage_of_benefit=percentage,
    )


def make_accreditation(
    *,
    id: uuid.UUID = ACCREDITATION_ID,
    profile_id: uuid.UUID = PROFILE_ID,
    accreditation_type: AccreditationType = AccreditationType.NET_WORTH,
    status: AccreditationStatus = AccreditationStatus.SUBMITTED,
    is_verified: bool = False,
    license_number: str | None = None,
    state_license_held: str | None = None,
) -> InvestorAccreditation:
    return InvestorAccreditation(
        id=id,
        investor_profile_id=profile_id,
        accreditation_type=accreditation_type,
        status=status,
        is_verified=is_verified,
        verification_date=datetime.now(timezone.utc) if is_verified else None,
        verified_by_user_id=REVIEWER_ID if is_verified else None,
        license_number=license_number,
        state_license_held=state_license_held,
    )


def make_document(
    *, id: uuid.UUID = DOCUMENT_ID, accreditation_id: uuid.UUID = ACCREDITATION_ID
) -> AccreditationDocument:
    return AccreditationDocument(
        id=id,
        accreditation_id=accreditation_id,
        document_type="Brokerage statement",
        document_path="/uploads/statement.pdf",
    )


def individual_selection(**overrides) -> dict:
    body = {
        "investor_type": "Individual",
        "is_accredited": False,
        "first_name": "Ada",
        "last_name": "Lovelace",
        "is_us_citizen": True,
    }
    body.update(overrides)
    return body


def ira_selection(**overrides) -> dict:
    body = {
        "investor_type": "IRA",
        "is_accredited": False,
        "ira_type": IRAType.ROTH_IRA.value,
        "name_of_ira": "Ada's Roth",
        "first_name": "Ada",
        "last_name": "Lovelace",
        "is_us_citizen": True,
    }
    body.update(overrides)
    return body


# ────────────────────────────────────────────────────────────────────────────
# Pytest fixtures
# ────────────────────────────────────────────────────────────────────────────


@pytest.fixture()
def mock_db():
    """A mocked AsyncSession that tracks add/flush/commit/rollback calls."""
    session = AsyncMock()
    session.add = MagicMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.flush = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.delete = AsyncMock()
    return session


@pytest.fixture(autouse=True)
def _reset_circuit_breaker():
    """Keep the global database breaker CLOSED between tests."""
    from app.core.resilience import db_circuit_breaker

    db_circuit_breaker.reset()
    yield
    db_circuit_breaker.reset()
