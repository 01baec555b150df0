"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
"""

from pydantic import BaseModel, Field

from src.domain.ports import Verdict


class FormFieldsResponse(BaseModel):
    """Fields to inject into a form about to be rendered."""

    hidden_fields: dict[str, str] = Field(
        ..., description="Hidden inputs (form_token, user_agent); empty if no token was issued"
    )
    honeypot_fields: list[str] = Field(
        ..., description="Names of decoy inputs the form must render off-screen"
    )


class SubmissionRequest(BaseModel):
    """Request model for submission validation."""

    fields: dict[str, str] = Field(..., description="Posted form field values by name")
    spam: bool = Field(False, description="Spam verdict reached by upstream checks")


class SubmissionResponse(BaseModel):
    """Response model for a validated submission."""

    verdict: Verdict
    rule: str | None = Field(None, description="Rule that decided the verdict, if any")
    spam: bool


class TokenRefreshRequest(BaseModel):
    """Request model for token refresh."""

    action: str = "regenerate_token"


class TokenRefreshResponse(BaseModel):
    """Response model for a refreshed token."""

    token: str


class TokenRefreshError(BaseModel):
    """Error payload for a failed token refresh."""

    error: str
