"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
Field constraints for registration live in the domain layer so that every
rejection is reported as a ValidationError with the same error body.
"""

from pydantic import BaseModel, Field


class RegistrationSubmitRequest(BaseModel):
    """Request model for a registration submission."""

    username: str | None = Field(default=None, description="Username (3-50 characters)")
    password: str | None = Field(default=None, description="Password (8-50 characters)")
    email: str | None = Field(default=None, description="E-mail address (max 100 characters)")


class DecisionRequest(BaseModel):
    """Request model for an administrator decision."""

    status: str | None = Field(default=None, description="APPROVED or REJECTED")


class StatusResponse(BaseModel):
    """Acknowledgement of a successful operation."""

    status: str = "ok"


class PendingRequestItem(BaseModel):
    """A pending registration request, without its password hash."""

    id: str
    username: str
    email: str
    create_date: int = Field(..., description="Creation time in epoch milliseconds")


class PendingRequestsResponse(BaseModel):
    """Response model for the pending request list, newest first."""

    requests: list[PendingRequestItem]


class LoginResponse(BaseModel):
    """Response model for a successful login."""

    username: str
    email: str
    onboarding: bool


class ErrorDetail(BaseModel):
    """Error type name and human-readable message."""

    type: str
    message: str


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: ErrorDetail
