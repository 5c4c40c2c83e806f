"""
Service tests against a real in-memory SQLite database.

Each test gets a fresh engine and schema.  Writes go through one session;
what was committed is always read back through a second, independent
session, so a rolled-back transaction cannot hide behind the identity map.
"""

import asyncio
import uuid
from decimal import Decimal

import pytest
import pytest_asyncio
from pydantic import TypeAdapter
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.exceptions import BusinessRuleViolation, InternalError, NotFoundException
from app.db.base import metadata
from app.db.session import build_engine, session_scope, unit_of_work
from app.models.accreditation import AccreditationDocument, InvestorAccreditation
from app.models.beneficiary import Beneficiary
from app.models.enums import AccreditationStatus, InvestorType
from app.models.general_info import IndividualGeneralInfo
from app.models.investor_profile import InvestorProfile
from app.repositories.accreditation_repo import (
    AccreditationDocumentRepository,
    AccreditationRepository,
)
from app.repositories.beneficiary_repo import BeneficiaryRepository
from app.repositories.investor_detail_repo import InvestorDetailRepository
from app.repositories.investor_profile_repo import InvestorProfileRepository
from app.schemas.accreditation import (
    AccreditationCreate,
    AccreditationDocumentCreate,
    AccreditationVerify,
)
from app.schemas.beneficiary import BeneficiaryBulkCreate, BeneficiaryCreate, BeneficiaryUpdate
from app.schemas.general_info import GeneralInfoSave, JointAccountHolderCreate
from app.schemas.investor import TypeSelection
from app.services.accreditation_service import AccreditationService
from app.services.beneficiary_service import BeneficiaryService
from app.services.general_info_service import GeneralInfoService
from app.services.investor_service import InvestorService

from .conftest import REVIEWER_ID, USER_ID, beneficiary_fields, individual_selection

_selection = TypeAdapter(TypeSelection)
_general_info = TypeAdapter(GeneralInfoSave)

CONTACT = {
    "name": "Ada Lovelace",
    "date_of_birth": "1985-12-10",
    "ssn": "123-45-6789",
    "address": "12 St James's Square, London",
    "phone": "555-0100",
    "email": "ada@example.com",
}

# ────────────────────────────────────────────────────────────────────────────
# Fixtures
# ────────────────────────────────────────────────────────────────────────────


@pytest_asyncio.fixture()
async def sessions():
    engine = build_engine("sqlite+aiosqlite://", sqlite=True)
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture()
async def db(sessions):
    async with sessions() as session:
        yield session


def _investor_service(db: AsyncSession) -> InvestorService:
    return InvestorService(
        InvestorProfileRepository(InvestorProfile, db), InvestorDetailRepository(db)
    )


def _beneficiary_service(db: AsyncSession) -> BeneficiaryService:
    return BeneficiaryService(
        BeneficiaryRepository(Beneficiary, db), InvestorProfileRepository(InvestorProfile, db)
    )


def _general_info_service(db: AsyncSession) -> GeneralInfoService:
    return GeneralInfoService(
        InvestorProfileRepository(InvestorProfile, db), InvestorDetailRepository(db)
    )


def _accreditation_service(db: AsyncSession) -> AccreditationService:
    return AccreditationService(
        AccreditationRepository(InvestorAccreditation, db),
        AccreditationDocumentRepository(AccreditationDocument, db),
        InvestorProfileRepository(InvestorProfile, db),
    )


async def _create_profile(db: AsyncSession, selection: dict = None):
    view = await _investor_service(db).select_type(
        USER_ID, _selection.validate_python(selection or individual_selection())
    )
    return view.profile.id


async def _count(sessions, model) -> int:
    async with sessions() as fresh:
        return (await fresh.execute(select(func.count()).select_from(model))).scalar_one()


async def _grouped(sessions, profile_id):
    async with sessions() as fresh:
        return await _beneficiary_service(fresh).get_grouped(profile_id)


def _add(profile_id, percentage: str, beneficiary_type: int = 1, name: str = "Jane Doe"):
    return BeneficiaryCreate(
        investor_profile_id=profile_id,
        **beneficiary_fields(percentage, beneficiary_type, name),
    )


def _bulk(profile_id, *items):
    return BeneficiaryBulkCreate(investor_profile_id=profile_id, beneficiaries=list(items))


# ────────────────────────────────────────────────────────────────────────────
# Sessions
# ────────────────────────────────────────────────────────────────────────────


class TestSqliteSessions:
    @pytest.mark.asyncio
    async def test_scoped_sessions_do_not_overlap(self):
        events = []

        async def _hold(name: str):
            async with session_scope():
                events.append(f"{name} open")
                await asyncio.sleep(0)
                events.append(f"{name} close")

        await asyncio.gather(_hold("a"), _hold("b"))

        assert events == ["a open", "a close", "b open", "b close"]

    @pytest.mark.asyncio
    async def test_unit_of_work_inside_a_scoped_session(self):
        async with session_scope() as session:
            async with unit_of_work(session, "checking the writer lock"):
                await session.execute(select(1))


# ────────────────────────────────────────────────────────────────────────────
# Profiles
# ────────────────────────────────────────────────────────────────────────────


class TestProfiles:
    @pytest.mark.asyncio
    async def test_one_profile_per_user(self, db, sessions):
        await _create_profile(db)

        with pytest.raises(BusinessRuleViolation):
            await _create_profile(db)

        assert await _count(sessions, InvestorProfile) == 1

    @pytest.mark.asyncio
    async def test_profile_reads_back_with_detail(self, db, sessions):
        profile_id = await _create_profile(db)

        async with sessions() as fresh:
            view = await _investor_service(fresh).get_profile(profile_id)

        assert view.profile.user_id == USER_ID
        assert view.profile.investor_type == InvestorType.INDIVIDUAL
        assert view.detail.investor_profile_id == profile_id
        assert view.detail.last_name == "Lovelace"


# ────────────────────────────────────────────────────────────────────────────
# Beneficiary allocation
# ────────────────────────────────────────────────────────────────────────────


class TestBeneficiaryAllocation:
    @pytest.mark.asyncio
    async def test_additions_are_capped_per_type(self, db, sessions):
        profile_id = await _create_profile(db)
        service = _beneficiary_service(db)

        await service.add_beneficiary(_add(profile_id, "60"))
        with pytest.raises(BusinessRuleViolation, match="Current total: 60"):
            await service.add_beneficiary(_add(profile_id, "50"))
        # The cap is per type: Contingent starts from zero.
        await service.add_beneficiary(_add(profile_id, "100", beneficiary_type=2))

        grouped = await _grouped(sessions, profile_id)
        assert grouped.primary_total == Decimal("60")
        assert grouped.contingent_total == Decimal("100")
        assert len(grouped.primary) == 1

    @pytest.mark.asyncio
    async def test_concurrent_additions_cannot_exceed_cap(self, db, sessions):
        profile_id = await _create_profile(db)

        async def _add_in_own_session(percentage: str, name: str):
            async with sessions() as session:
                return await _beneficiary_service(session).add_beneficiary(
                    _add(profile_id, percentage, name=name)
                )

        results = await asyncio.gather(
            _add_in_own_session("60", "First"),
            _add_in_own_session("60", "Second"),
            return_exceptions=True,
        )

        assert sum(isinstance(r, Beneficiary) for r in results) == 1
        rejected = [r for r in results if isinstance(r, BusinessRuleViolation)]
        assert len(rejected) == 1
        assert "Current total: 60" in rejected[0].message
        grouped = await _grouped(sessions, profile_id)
        assert grouped.primary_total == Decimal("60")
        assert await _count(sessions, Beneficiary) == 1

    @pytest.mark.asyncio
    async def test_concurrent_replacements_leave_one_complete_set(self, db, sessions):
        profile_id = await _create_profile(db)

        async def _replace_in_own_session(*items):
            async with sessions() as session:
                return await _beneficiary_service(session).replace_by_type(
                    _bulk(profile_id, *items)
                )

        await asyncio.gather(
            _replace_in_own_session(beneficiary_fields("100", name="Solo")),
            _replace_in_own_session(
                beneficiary_fields("60", name="Pair A"), beneficiary_fields("40", name="Pair B")
            ),
        )

        grouped = await _grouped(sessions, profile_id)
        assert grouped.primary_total == Decimal("100")
        assert [b.first_middle_last_name for b in grouped.primary] in (
            ["Solo"],
            ["Pair A", "Pair B"],
        )

    @pytest.mark.asyncio
    async def test_update_excludes_own_share(self, db, sessions):
        profile_id = await _create_profile(db)
        service = _beneficiary_service(db)
        first = await service.add_beneficiary(_add(profile_id, "60"))
        await service.add_beneficiary(_add(profile_id, "40"))
        first_id = first.id

        await service.update_beneficiary(
            first_id, BeneficiaryUpdate(**beneficiary_fields("60", name="Jane Q. Doe"))
        )
        with pytest.raises(BusinessRuleViolation):
            await service.update_beneficiary(
                first_id, BeneficiaryUpdate(**beneficiary_fields("61"))
            )

        grouped = await _grouped(sessions, profile_id)
        assert grouped.primary_total == Decimal("100")
        assert "Jane Q. Doe" in [b.first_middle_last_name for b in grouped.primary]

    @pytest.mark.asyncio
    async def test_replace_keeps_absent_types(self, db, sessions):
        profile_id = await _create_profile(db)
        service = _beneficiary_service(db)
        await service.add_beneficiary(_add(profile_id, "100", beneficiary_type=2, name="Kept"))
        await service.add_beneficiary(_add(profile_id, "30", name="Replaced"))

        created = await service.replace_by_type(
            _bulk(
                profile_id,
                beneficiary_fields("70", name="New A"),
                beneficiary_fields("30", name="New B"),
            )
        )

        assert len(created) == 2
        grouped = await _grouped(sessions, profile_id)
        assert [b.first_middle_last_name for b in grouped.primary] == ["New A", "New B"]
        assert [b.first_middle_last_name for b in grouped.contingent] == ["Kept"]

    @pytest.mark.asyncio
    async def test_incomplete_batch_writes_nothing(self, db, sessions):
        profile_id = await _create_profile(db)
        service = _beneficiary_service(db)
        await service.add_beneficiary(_add(profile_id, "100", name="Original"))

        with pytest.raises(BusinessRuleViolation, match="must equal 100%"):
            await service.replace_by_type(
                _bulk(
                    profile_id,
                    beneficiary_fields("100", name="Primary"),
                    beneficiary_fields("90", beneficiary_type=2, name="Contingent"),
                )
            )

        grouped = await _grouped(sessions, profile_id)
        assert [b.first_middle_last_name for b in grouped.primary] == ["Original"]
        assert grouped.contingent == []

    @pytest.mark.asyncio
    async def test_failed_insert_rolls_back_the_delete(self, db, sessions, monkeypatch):
        profile_id = await _create_profile(db)
        service = _beneficiary_service(db)
        await service.add_beneficiary(_add(profile_id, "100", name="Original"))

        repo = service._beneficiary_repo
        real_add = repo.add
        calls = {"n": 0}

        async def _failing_add(entity):
            calls["n"] += 1
            if calls["n"] == 2:
                raise OperationalError("INSERT", {}, Exception("disk I/O error"))
            return await real_add(entity)

        monkeypatch.setattr(repo, "add", _failing_add)

        with pytest.raises(InternalError, match="An error occurred while replacing beneficiaries"):
            await service.replace_by_type(
                _bulk(
                    profile_id,
                    beneficiary_fields("50", name="New A"),
                    beneficiary_fields("50", name="New B"),
                )
            )

        grouped = await _grouped(sessions, profile_id)
        assert [b.first_middle_last_name for b in grouped.primary] == ["Original"]
        assert grouped.primary_total == Decimal("100")

    @pytest.mark.asyncio
    async def test_delete_may_leave_type_under_allocated(self, db, sessions):
        profile_id = await _create_profile(db)
        service = _beneficiary_service(db)
        created = await service.replace_by_type(
            _bulk(profile_id, beneficiary_fields("40"), beneficiary_fields("60"))
        )

        await service.delete_beneficiary(created[0].id)

        grouped = await _grouped(sessions, profile_id)
        assert grouped.primary_total == Decimal("60")
        assert await _count(sessions, Beneficiary) == 1

    @pytest.mark.asyncio
    async def test_unknown_profile_writes_nothing(self, db, sessions):
        with pytest.raises(NotFoundException):
            await _beneficiary_service(db).add_beneficiary(_add(uuid.uuid4(), "10"))

        assert await _count(sessions, Beneficiary) == 0


# ────────────────────────────────────────────────────────────────────────────
# General info
# ────────────────────────────────────────────────────────────────────────────


class TestGeneralInfo:
    @pytest.mark.asyncio
    async def test_second_save_updates_in_place(self, db, sessions):
        profile_id = await _create_profile(db)
        service = _general_info_service(db)
        body = {"investor_type": "Individual", "investor_profile_id": str(profile_id), **CONTACT}

        first = await service.save_general_info(_general_info.validate_python(body))
        first_id = first.general_info.id
        first_created = first.general_info.created_at.replace(tzinfo=None)

        second = await service.save_general_info(
            _general_info.validate_python({**body, "address": "Marylebone, London"})
        )

        assert second.general_info.id == first_id
        async with sessions() as fresh:
            stored = await _general_info_service(fresh).get_by_profile_id(profile_id)
        info = stored.general_info
        assert info.id == first_id
        assert info.address == "Marylebone, London"
        assert info.created_at.replace(tzinfo=None) == first_created
        assert info.updated_at.replace(tzinfo=None) >= first_created

    @pytest.mark.asyncio
    async def test_identical_save_only_advances_updated_at(self, db, sessions):
        profile_id = await _create_profile(db)
        service = _general_info_service(db)
        body = {"investor_type": "Individual", "investor_profile_id": str(profile_id), **CONTACT}

        await service.save_general_info(_general_info.validate_python(body))
        async with sessions() as fresh:
            first = (await _general_info_service(fresh).get_by_profile_id(profile_id)).general_info

        await service.save_general_info(_general_info.validate_python(body))
        async with sessions() as fresh:
            second = (await _general_info_service(fresh).get_by_profile_id(profile_id)).general_info

        assert second.id == first.id
        assert second.created_at == first.created_at
        assert second.updated_at > first.updated_at
        for name in CONTACT:
            assert getattr(second, name) == getattr(first, name)
        assert await _count(sessions, IndividualGeneralInfo) == 1

    @pytest.mark.asyncio
    async def test_joint_account_holders_are_returned_in_order(self, db, sessions):
        profile_id = await _create_profile(
            db,
            {
                "investor_type": "Joint",
                "is_joint_investment": True,
                "joint_account_type": 1,
                "primary_first_name": "Ada",
                "primary_last_name": "Lovelace",
                "primary_is_us_citizen": True,
            },
        )
        service = _general_info_service(db)
        saved = await service.save_general_info(
            _general_info.validate_python(
                {
                    "investor_type": "Joint",
                    "investor_profile_id": str(profile_id),
                    "is_joint_investment": True,
                    "joint_account_type": 1,
                }
            )
        )
        general_info_id = saved.general_info.id

        for order_index, name in [(2, "Second Holder"), (1, "First Holder")]:
            await service.add_child_record(
                InvestorType.JOINT,
                JointAccountHolderCreate(
                    general_info_id=general_info_id,
                    order_index=order_index,
                    **{**CONTACT, "name": name},
                ),
            )

        async with sessions() as fresh:
            view = await _general_info_service(fresh).get_by_profile_id(profile_id)
        holders = view.general_info.account_holders
        assert [h.name for h in holders] == ["First Holder", "Second Holder"]


# ────────────────────────────────────────────────────────────────────────────
# Accreditation
# ────────────────────────────────────────────────────────────────────────────


class TestAccreditation:
    @pytest.mark.asyncio
    async def test_resubmission_resets_review(self, db, sessions):
        profile_id = await _create_profile(db)
        service = _accreditation_service(db)

        submitted = await service.save_accreditation(
            AccreditationCreate(investor_profile_id=profile_id, accreditation_type=1)
        )
        accreditation_id = submitted.id
        await service.upload_document(
            AccreditationDocumentCreate(
                accreditation_id=accreditation_id,
                document_type="Brokerage statement",
                document_path="/uploads/statement.pdf",
            )
        )
        verified = await service.verify(
            accreditation_id, REVIEWER_ID, AccreditationVerify(is_approved=True)
        )
        assert verified.status == AccreditationStatus.VERIFIED
        assert verified.verified_by_user_id == REVIEWER_ID

        await service.save_accreditation(
            AccreditationCreate(
                investor_profile_id=profile_id,
                accreditation_type=3,
                license_number="L-1",
                state_license_held="NY",
            )
        )

        async with sessions() as fresh:
            stored = await _accreditation_service(fresh).get_for_profile(profile_id)
        assert stored.id == accreditation_id
        assert stored.status == AccreditationStatus.SUBMITTED
        assert stored.is_verified is False
        assert stored.verified_by_user_id is None
        assert stored.verification_date is None
        assert len(stored.documents) == 1
        assert await _count(sessions, InvestorAccreditation) == 1

    @pytest.mark.asyncio
    async def test_resubmitting_the_same_type_resets_review(self, db, sessions):
        profile_id = await _create_profile(db)
        service = _accreditation_service(db)
        submission = AccreditationCreate(investor_profile_id=profile_id, accreditation_type=2)

        accreditation_id = (await service.save_accreditation(submission)).id
        await service.verify(
            accreditation_id, REVIEWER_ID, AccreditationVerify(is_approved=True, notes="ok")
        )
        await service.save_accreditation(submission)

        async with sessions() as fresh:
            stored = await _accreditation_service(fresh).get_for_profile(profile_id)
        assert stored.id == accreditation_id
        assert stored.accreditation_type == 2
        assert stored.status == AccreditationStatus.SUBMITTED
        assert stored.is_verified is False
        assert stored.verified_by_user_id is None
        assert stored.verification_date is None
        assert await _count(sessions, InvestorAccreditation) == 1

    @pytest.mark.asyncio
    async def test_deleting_a_document(self, db, sessions):
        profile_id = await _create_profile(db)
        service = _accreditation_service(db)
        accreditation = await service.save_accreditation(
            AccreditationCreate(investor_profile_id=profile_id, accreditation_type=2)
        )
        document = await service.upload_document(
            AccreditationDocumentCreate(
                accreditation_id=accreditation.id,
                document_type="Tax return",
                document_path="/uploads/1040.pdf",
            )
        )

        await service.delete_document(document.id)

        assert await _count(sessions, AccreditationDocument) == 0
        assert await _count(sessions, InvestorAccreditation) == 1

