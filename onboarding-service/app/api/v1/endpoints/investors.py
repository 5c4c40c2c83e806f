"""
Investor profile API endpoints.

- POST  /investors/select-type                 — Create the caller's profile
- GET   /investors/profile                     — The caller's own profile
- GET   /investors/profile/{id}                — Any profile (reviewers)
- PUT   /investors/profile/{id}/accreditation  — Set the accreditation flag (reviewers)
"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import REVIEWER_ROLES, CurrentUser, get_current_user, require_roles
from app.db.session import get_db
from app.models.investor_profile import InvestorProfile
from app.repositories.investor_detail_repo import InvestorDetailRepository
from app.repositories.investor_profile_repo import InvestorProfileRepository
from app.schemas.common import ApiResponse, ErrorResponse, ValidationErrorResponse
from app.schemas.investor import (
    InvestorProfileResponse,
    SelectTypeRequest,
    UpdateProfileAccreditationRequest,
)
from app.services.investor_service import InvestorService, ProfileView
from app.services.investor_types import variant_for

router = APIRouter()


# ── Dependency injection ──


def _get_investor_service(db: AsyncSession = Depends(get_db)) -> InvestorService:
    """Build an InvestorService wired to the current request's DB session."""
    return InvestorService(
        profile_repo=InvestorProfileRepository(InvestorProfile, db),
        detail_repo=InvestorDetailRepository(db),
    )


def _to_response(view: ProfileView) -> InvestorProfileResponse:
    response = InvestorProfileResponse.model_validate(view.profile)
    if view.detail is not None:
        detail_response = variant_for(view.profile.investor_type).detail_response
        response.detail = detail_response.model_validate(view.detail)
    return response


# ── Endpoints ──


@router.post(
    "/select-type",
    response_model=ApiResponse[InvestorProfileResponse],
    status_code=201,
    summary="Select the investor type",
    description=(
        "Creates the caller's investor profile together with the detail "
        "record of the chosen type.  A user can do this exactly once."
    ),
    responses={
        400: {"model": ValidationErrorResponse, "description": "Invalid selection"},
        401: {"model": ErrorResponse, "description": "Caller not identified"},
    },
)
async def select_investor_type(
    request: SelectTypeRequest,
    user: CurrentUser = Depends(get_current_user),
    service: InvestorService = Depends(_get_investor_service),
) -> ApiResponse[InvestorProfileResponse]:
    view = await service.select_type(user.user_id, request.root)
    return ApiResponse[InvestorProfileResponse].ok(
        _to_response(view), "Investor type selected successfully", 201
    )


@router.get(
    "/profile",
    response_model=ApiResponse[InvestorProfileResponse],
    summary="Get the caller's investor profile",
    responses={404: {"model": ErrorResponse, "description": "No profile yet"}},
)
async def get_my_profile(
    user: CurrentUser = Depends(get_current_user),
    service: InvestorService = Depends(_get_investor_service),
) -> ApiResponse[InvestorProfileResponse]:
    view = await service.get_profile_for_user(user.user_id)
    return ApiResponse[InvestorProfileResponse].ok(_to_response(view))


@router.get(
    "/profile/{profile_id}",
    response_model=ApiResponse[InvestorProfileResponse],
    summary="Get an investor profile by id",
    responses={
        403: {"model": ErrorResponse, "description": "Reviewer role required"},
        404: {"model": ErrorResponse, "description": "Profile not found"},
    },
)
async def get_profile(
    profile_id: UUID,
    _: CurrentUser = Depends(require_roles(*REVIEWER_ROLES)),
    service: InvestorService = Depends(_get_investor_service),
) -> ApiResponse[InvestorProfileResponse]:
    view = await service.get_profile(profile_id)
    return ApiResponse[InvestorProfileResponse].ok(_to_response(view))


@router.put(
    "/profile/{profile_id}/accreditation",
    response_model=ApiResponse[InvestorProfileResponse],
    summary="Update the profile's accreditation flag",
    description=(
        "The accreditation type is required when ``is_accredited`` is true "
        "and is cleared when it is false."
    ),
    responses={
        400: {"model": ValidationErrorResponse, "description": "Invalid accreditation type"},
        403: {"model": ErrorResponse, "description": "Reviewer role required"},
        404: {"model": ErrorResponse, "description": "Profile not found"},
    },
)
async def update_profile_accreditation(
    profile_id: UUID,
    request: UpdateProfileAccreditationRequest,
    _: CurrentUser = Depends(require_roles(*REVIEWER_ROLES)),
    service: InvestorService = Depends(_get_investor_service),
) -> ApiResponse[InvestorProfileResponse]:
    view = await service.update_profile_accreditation(
        profile_id, request.is_accredited, request.accreditation_type
    )
    return ApiResponse[InvestorProfileResponse].ok(
        _to_response(view), "Profile accreditation updated successfully"
    )
