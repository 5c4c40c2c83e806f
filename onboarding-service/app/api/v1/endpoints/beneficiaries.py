"""
Beneficiary API endpoints.

- POST    /beneficiaries                                  — Add one beneficiary
- POST    /beneficiaries/bulk                             — Replace allocations by type
- PUT     /beneficiaries/{id}                             — Update a beneficiary
- DELETE  /beneficiaries/{id}                             — Delete a beneficiary
- GET     /beneficiaries/investor/{profile_id}            — List a profile's beneficiaries
- GET     /beneficiaries/investor/{profile_id}/grouped    — Grouped by type with totals
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.models.beneficiary import Beneficiary
from app.models.investor_profile import InvestorProfile
from app.repositories.beneficiary_repo import BeneficiaryRepository
from app.repositories.investor_profile_repo import InvestorProfileRepository
from app.schemas.beneficiary import (
    BeneficiaryAllocationResponse,
    BeneficiaryBulkCreate,
    BeneficiaryCreate,
    BeneficiaryResponse,
    BeneficiaryUpdate,
)
from app.schemas.common import ApiResponse, ErrorResponse, ValidationErrorResponse
from app.services.beneficiary_service import BeneficiaryService

router = APIRouter()


# ── Dependency injection ──


def _get_beneficiary_service(db: AsyncSession = Depends(get_db)) -> BeneficiaryService:
    """Build a BeneficiaryService wired to the current request's DB session."""
    return BeneficiaryService(
        beneficiary_repo=BeneficiaryRepository(Beneficiary, db),
        profile_repo=InvestorProfileRepository(InvestorProfile, db),
    )


_ALLOCATION_ERRORS = {
    400: {
        "model": ValidationErrorResponse,
        "description": "Validation error or allocation rule violation",
    },
}


# ── Endpoints ──


@router.post(
    "",
    response_model=ApiResponse[BeneficiaryResponse],
    status_code=201,
    summary="Add a beneficiary",
    description=(
        "Adds one Primary (1) or Contingent (2) beneficiary.  Rejected if the "
        "type's total percentage would exceed 100%."
    ),
    responses={
        **_ALLOCATION_ERRORS,
        404: {"model": ErrorResponse, "description": "Investor profile not found"},
    },
)
async def add_beneficiary(
    request: BeneficiaryCreate,
    service: BeneficiaryService = Depends(_get_beneficiary_service),
) -> ApiResponse[BeneficiaryResponse]:
    beneficiary = await service.add_beneficiary(request)
    return ApiResponse[BeneficiaryResponse].ok(
        beneficiary, "Beneficiary added successfully", 201
    )


@router.post(
    "/bulk",
    response_model=ApiResponse[List[BeneficiaryResponse]],
    status_code=201,
    summary="Replace beneficiaries by type",
    description=(
        "Replaces every beneficiary of each type present in the batch.  Each "
        "present type must total exactly 100%; types absent from the batch "
        "are left untouched.  All or nothing."
    ),
    responses={
        **_ALLOCATION_ERRORS,
        404: {"model": ErrorResponse, "description": "Investor profile not found"},
    },
)
async def replace_beneficiaries(
    request: BeneficiaryBulkCreate,
    service: BeneficiaryService = Depends(_get_beneficiary_service),
) -> ApiResponse[List[BeneficiaryResponse]]:
    beneficiaries = await service.replace_by_type(request)
    return ApiResponse[List[BeneficiaryResponse]].ok(
        beneficiaries, "Beneficiaries saved successfully", 201
    )


@router.put(
    "/{beneficiary_id}",
    response_model=ApiResponse[BeneficiaryResponse],
    summary="Update a beneficiary",
    description="The beneficiary's type cannot be changed.",
    responses={
        **_ALLOCATION_ERRORS,
        404: {"model": ErrorResponse, "description": "Beneficiary not found"},
    },
)
async def update_beneficiary(
    beneficiary_id: UUID,
    request: BeneficiaryUpdate,
    service: BeneficiaryService = Depends(_get_beneficiary_service),
) -> ApiResponse[BeneficiaryResponse]:
    beneficiary = await service.update_beneficiary(beneficiary_id, request)
    return ApiResponse[BeneficiaryResponse].ok(beneficiary, "Beneficiary updated successfully")


@router.delete(
    "/{beneficiary_id}",
    response_model=ApiResponse[None],
    summary="Delete a beneficiary",
    description="Remaining shares are not rebalanced.",
    responses={404: {"model": ErrorResponse, "description": "Beneficiary not found"}},
)
async def delete_beneficiary(
    beneficiary_id: UUID,
    service: BeneficiaryService = Depends(_get_beneficiary_service),
) -> ApiResponse[None]:
    await service.delete_beneficiary(beneficiary_id)
    return ApiResponse[None].ok(None, "Beneficiary deleted successfully")


@router.get(
    "/investor/{profile_id}",
    response_model=ApiResponse[List[BeneficiaryResponse]],
    summary="List beneficiaries of an investor profile",
    responses={404: {"model": ErrorResponse, "description": "Investor profile not found"}},
)
async def list_beneficiaries(
    profile_id: UUID,
    service: BeneficiaryService = Depends(_get_beneficiary_service),
) -> ApiResponse[List[BeneficiaryResponse]]:
    beneficiaries = await service.list_for_profile(profile_id)
    return ApiResponse[List[BeneficiaryResponse]].ok(beneficiaries)


@router.get(
    "/investor/{profile_id}/grouped",
    response_model=ApiResponse[BeneficiaryAllocationResponse],
    summary="Beneficiaries grouped by type",
    description="Primary and Contingent beneficiaries with their percentage totals.",
    responses={404: {"model": ErrorResponse, "description": "Investor profile not found"}},
)
async def get_grouped_beneficiaries(
    profile_id: UUID,
    service: BeneficiaryService = Depends(_get_beneficiary_service),
) -> ApiResponse[BeneficiaryAllocationResponse]:
    grouped = await service.get_grouped(profile_id)
    return ApiResponse[BeneficiaryAllocationResponse].ok(grouped)
