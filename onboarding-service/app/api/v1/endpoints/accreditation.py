"""
Accreditation API endpoints.

- POST    /accreditation                           — Submit or resubmit
- POST    /accreditation/documents                 — Record a supporting document
- PUT     /accreditation/{id}/verify               — Approve or reject (reviewers)
- GET     /accreditation/investor/{profile_id}     — A profile's accreditation
- DELETE  /accreditation/documents/{document_id}   — Remove a document
"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import REVIEWER_ROLES, CurrentUser, require_roles
from app.db.session import get_db
from app.models.accreditation import AccreditationDocument, InvestorAccreditation
from app.models.investor_profile import InvestorProfile
from app.repositories.accreditation_repo import (
    AccreditationDocumentRepository,
    AccreditationRepository,
)
from app.repositories.investor_profile_repo import InvestorProfileRepository
from app.schemas.accreditation import (
    AccreditationCreate,
    AccreditationDocumentCreate,
    AccreditationDocumentResponse,
    AccreditationResponse,
    AccreditationVerify,
)
from app.schemas.common import ApiResponse, ErrorResponse, ValidationErrorResponse
from app.services.accreditation_service import AccreditationService

router = APIRouter()


# ── Dependency injection ──


def _get_accreditation_service(db: AsyncSession = Depends(get_db)) -> AccreditationService:
    return AccreditationService(
        accreditation_repo=AccreditationRepository(InvestorAccreditation, db),
        document_repo=AccreditationDocumentRepository(AccreditationDocument, db),
        profile_repo=InvestorProfileRepository(InvestorProfile, db),
    )


# ── Endpoints ──


@router.post(
    "",
    response_model=ApiResponse[AccreditationResponse],
    summary="Submit accreditation",
    description=(
        "Creates the profile's accreditation or resubmits it.  Resubmission "
        "clears any previous verification.  Series 7, 65 and 82 require a "
        "license number and the licensing state."
    ),
    responses={
        400: {"model": ValidationErrorResponse, "description": "Validation error"},
        404: {"model": ErrorResponse, "description": "Investor profile not found"},
    },
)
async def save_accreditation(
    request: AccreditationCreate,
    service: AccreditationService = Depends(_get_accreditation_service),
) -> ApiResponse[AccreditationResponse]:
    accreditation = await service.save_accreditation(request)
    return ApiResponse[AccreditationResponse].ok(
        accreditation, "Accreditation saved successfully"
    )


@router.post(
    "/documents",
    response_model=ApiResponse[AccreditationDocumentResponse],
    status_code=201,
    summary="Record an accreditation document",
    description="Stores metadata of a file already uploaded to document storage.",
    responses={404: {"model": ErrorResponse, "description": "Accreditation not found"}},
)
async def upload_document(
    request: AccreditationDocumentCreate,
    service: AccreditationService = Depends(_get_accreditation_service),
) -> ApiResponse[AccreditationDocumentResponse]:
    document = await service.upload_document(request)
    return ApiResponse[AccreditationDocumentResponse].ok(
        document, "Document uploaded successfully", 201
    )


@router.put(
    "/{accreditation_id}/verify",
    response_model=ApiResponse[AccreditationResponse],
    summary="Verify or reject an accreditation",
    responses={
        403: {"model": ErrorResponse, "description": "Reviewer role required"},
        404: {"model": ErrorResponse, "description": "Accreditation not found"},
    },
)
async def verify_accreditation(
    accreditation_id: UUID,
    request: AccreditationVerify,
    reviewer: CurrentUser = Depends(require_roles(*REVIEWER_ROLES)),
    service: AccreditationService = Depends(_get_accreditation_service),
) -> ApiResponse[AccreditationResponse]:
    accreditation = await service.verify(accreditation_id, reviewer.user_id, request)
    message = "Accreditation verified" if request.is_approved else "Accreditation rejected"
    return ApiResponse[AccreditationResponse].ok(accreditation, message)


@router.get(
    "/investor/{profile_id}",
    response_model=ApiResponse[AccreditationResponse],
    summary="Get the accreditation of an investor profile",
    responses={404: {"model": ErrorResponse, "description": "Nothing submitted yet"}},
)
async def get_accreditation(
    profile_id: UUID,
    service: AccreditationService = Depends(_get_accreditation_service),
) -> ApiResponse[AccreditationResponse]:
    accreditation = await service.get_for_profile(profile_id)
    return ApiResponse[AccreditationResponse].ok(accreditation)


@router.delete(
    "/documents/{document_id}",
    response_model=ApiResponse[None],
    summary="Delete an accreditation document",
    responses={404: {"model": ErrorResponse, "description": "Document not found"}},
)
async def delete_document(
    document_id: UUID,
    service: AccreditationService = Depends(_get_accreditation_service),
) -> ApiResponse[None]:
    await service.delete_document(document_id)
    return ApiResponse[None].ok(None, "Document deleted successfully")
