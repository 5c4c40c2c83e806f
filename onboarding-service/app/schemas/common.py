"""
Common / shared Pydantic schemas used across multiple endpoints.

Every response, success or failure, uses the same envelope::

    {"success": true, "message": "...", "status_code": 200, "data": {...}}

The error models exist so OpenAPI documents the failure payloads too.
"""

from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")

SSN_PATTERN = r"^\d{3}-\d{2}-\d{4}$"


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope wrapping the payload of every endpoint."""

    success: bool = Field(default=True)
    message: str = Field(default="Success", examples=["Beneficiary added successfully"])
    status_code: int = Field(default=200)
    data: Optional[T] = None

    @classmethod
    def ok(cls, data: Any, message: str = "Success", status_code: int = 200) -> "ApiResponse[T]":
        """
        Wrap ``data`` (ORM objects are read attribute-by-attribute).

        Call on the parametrised class, e.g.
        ``ApiResponse[BeneficiaryResponse].ok(beneficiary)``.
        """
        return cls.model_validate(
            {"success": True, "message": message, "status_code": status_code, "data": data},
            from_attributes=True,
        )


class ErrorResponse(BaseModel):
    """Standard error envelope returned by all non-validation error handlers."""

    success: bool = Field(default=False, description="Always ``false`` for errors")
    message: str = Field(
        ...,
        description="Human-readable error description",
        examples=["Investor profile not found"],
    )
    status_code: int = Field(..., examples=[404])
    data: None = None


class ValidationErrorDetail(BaseModel):
    """Single field-level validation failure."""

    field: str = Field(
        ...,
        description="Arrow-separated path to the invalid field",
        examples=["body -> percentage_of_benefit"],
    )
    message: str = Field(
        ...,
        description="Explanation of the validation failure",
        examples=["Input should be less than or equal to 100"],
    )


class ValidationErrorResponse(ErrorResponse):
    """
    Response body for a 400 caused by a malformed request.

    ``details`` lets clients map errors to individual form fields.
    """

    message: str = Field(default="Validation failed", description="Summary message")
    status_code: int = Field(default=400)
    details: List[ValidationErrorDetail] = Field(..., description="Per-field validation failures")
