"""
General-info API endpoints.

- POST  /general-info                          — Create or update general info
- POST  /general-info/joint/account-holders    — Add a joint account holder
- POST  /general-info/trust/grantors           — Add a trust grantor
- POST  /general-info/entity/equity-owners     — Add an entity equity owner
- GET   /general-info/investor/{profile_id}    — General info of a profile
"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.models.enums import InvestorType
from app.models.investor_profile import InvestorProfile
from app.repositories.investor_detail_repo import InvestorDetailRepository
from app.repositories.investor_profile_repo import InvestorProfileRepository
from app.schemas.common import ApiResponse, ErrorResponse, ValidationErrorResponse
from app.schemas.general_info import (
    EntityEquityOwnerCreate,
    EntityEquityOwnerResponse,
    InvestorGeneralInfoResponse,
    JointAccountHolderCreate,
    JointAccountHolderResponse,
    SaveGeneralInfoRequest,
    TrustGrantorCreate,
    TrustGrantorResponse,
)
from app.services.general_info_service import GeneralInfoService, GeneralInfoView
from app.services.investor_types import variant_for

router = APIRouter()


# ── Dependency injection ──


def _get_general_info_service(db: AsyncSession = Depends(get_db)) -> GeneralInfoService:
    return GeneralInfoService(
        profile_repo=InvestorProfileRepository(InvestorProfile, db),
        detail_repo=InvestorDetailRepository(db),
    )


def _to_response(view: GeneralInfoView) -> InvestorGeneralInfoResponse:
    response_model = variant_for(view.investor_type).general_info_response
    return InvestorGeneralInfoResponse(
        investor_type=view.investor_type,
        general_info=response_model.model_validate(view.general_info),
    )


_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Parent record not found"}}
_INVALID = {400: {"model": ValidationErrorResponse, "description": "Validation error"}}


# ── Endpoints ──


@router.post(
    "",
    response_model=ApiResponse[InvestorGeneralInfoResponse],
    summary="Save general info",
    description=(
        "Creates the general info of the profile's investor type, or updates "
        "it in place if it already exists.  ``investor_type`` must match the "
        "type selected for the profile."
    ),
    responses={**_INVALID, **_NOT_FOUND},
)
async def save_general_info(
    request: SaveGeneralInfoRequest,
    service: GeneralInfoService = Depends(_get_general_info_service),
) -> ApiResponse[InvestorGeneralInfoResponse]:
    view = await service.save_general_info(request.root)
    return ApiResponse[InvestorGeneralInfoResponse].ok(
        _to_response(view), "General info saved successfully"
    )


@router.post(
    "/joint/account-holders",
    response_model=ApiResponse[JointAccountHolderResponse],
    status_code=201,
    summary="Add a joint account holder",
    responses={**_INVALID, **_NOT_FOUND},
)
async def add_joint_account_holder(
    request: JointAccountHolderCreate,
    service: GeneralInfoService = Depends(_get_general_info_service),
) -> ApiResponse[JointAccountHolderResponse]:
    holder = await service.add_child_record(InvestorType.JOINT, request)
    return ApiResponse[JointAccountHolderResponse].ok(
        holder, "Joint account holder added successfully", 201
    )


@router.post(
    "/trust/grantors",
    response_model=ApiResponse[TrustGrantorResponse],
    status_code=201,
    summary="Add a trust grantor",
    responses={**_INVALID, **_NOT_FOUND},
)
async def add_trust_grantor(
    request: TrustGrantorCreate,
    service: GeneralInfoService = Depends(_get_general_info_service),
) -> ApiResponse[TrustGrantorResponse]:
    grantor = await service.add_child_record(InvestorType.TRUST, request)
    return ApiResponse[TrustGrantorResponse].ok(grantor, "Trust grantor added successfully", 201)


@router.post(
    "/entity/equity-owners",
    response_model=ApiResponse[EntityEquityOwnerResponse],
    status_code=201,
    summary="Add an entity equity owner",
    responses={**_INVALID, **_NOT_FOUND},
)
async def add_entity_equity_owner(
    request: EntityEquityOwnerCreate,
    service: GeneralInfoService = Depends(_get_general_info_service),
) -> ApiResponse[EntityEquityOwnerResponse]:
    owner = await service.add_child_record(InvestorType.ENTITY, request)
    return ApiResponse[EntityEquityOwnerResponse].ok(
        owner, "Entity equity owner added successfully", 201
    )


@router.get(
    "/investor/{profile_id}",
    response_model=ApiResponse[InvestorGeneralInfoResponse],
    summary="Get general info of an investor profile",
    description=(
        "Returns the general info matching the profile's investor type, "
        "including its account holders, grantors or equity owners."
    ),
    responses=_NOT_FOUND,
)
async def get_general_info(
    profile_id: UUID,
    service: GeneralInfoService = Depends(_get_general_info_service),
) -> ApiResponse[InvestorGeneralInfoResponse]:
    view = await service.get_by_profile_id(profile_id)
    return ApiResponse[InvestorGeneralInfoResponse].ok(_to_response(view))
