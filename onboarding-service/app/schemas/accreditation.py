"""
Pydantic schemas for the accreditation workflow.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import AccreditationStatus, AccreditationType


class AccreditationCreate(BaseModel):
    """
    Schema for ``POST /accreditation`` (create or resubmit).

    License number and state are required for the license-based types
    (Series 7, 65 and 82); the service enforces this.
    """

    investor_profile_id: UUID
    accreditation_type: int = Field(
        ...,
        description=(
            "1 NetWorth, 2 Income, 3 Series 7, 4 Series 65, 5 Series 82, 6 Professional role"
        ),
        examples=[3],
    )
    license_number: Optional[str] = Field(default=None, max_length=100, examples=["ABC123"])
    state_license_held: Optional[str] = Field(default=None, max_length=50, examples=["CA"])


class AccreditationDocumentCreate(BaseModel):
    """Metadata of a file already stored by the upload collaborator."""

    accreditation_id: UUID
    document_type: str = Field(..., min_length=1, max_length=100, examples=["Brokerage statement"])
    document_path: str = Field(..., min_length=1, max_length=500)


class AccreditationVerify(BaseModel):
    """Schema for ``PUT /accreditation/{id}/verify``."""

    is_approved: bool
    notes: Optional[str] = Field(default=None, max_length=1000)


class AccreditationDocumentResponse(BaseModel):
    id: UUID
    accreditation_id: UUID
    document_type: str
    document_path: str
    upload_date: datetime

    model_config = ConfigDict(from_attributes=True)


class AccreditationResponse(BaseModel):
    id: UUID
    investor_profile_id: UUID
    accreditation_type: AccreditationType
    status: AccreditationStatus
    is_verified: bool
    verification_date: Optional[datetime] = None
    verified_by_user_id: Optional[str] = None
    license_number: Optional[str] = None
    state_license_held: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    documents: List[AccreditationDocumentResponse] = []

    model_config = ConfigDict(from_attributes=True)
