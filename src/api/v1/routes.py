"""
API v1 routes.

Defines REST endpoints for the form anti-spam gate.
Endpoints are plain functions so FastAPI runs the blocking
token store calls in its threadpool.
"""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from src.api.dependencies import get_submission_validator, get_token_lifecycle
from src.api.models import (
    FormFieldsResponse,
    SubmissionRequest,
    SubmissionResponse,
    TokenRefreshError,
    TokenRefreshRequest,
    TokenRefreshResponse,
)
from src.domain.lifecycle import TokenLifecycle
from src.domain.ports import Verdict
from src.domain.validator import (
    DECOY_CHECKBOX_FIELD,
    HONEYPOT_FIELDS,
    Submission,
    SubmissionValidator,
)

router = APIRouter(tags=["v1"])


@router.get(
    "/form-fields",
    response_model=FormFieldsResponse,
    summary="Issue hidden fields for a form render",
    description="Mints and stores a single-use token and returns the hidden fields "
    "to embed in the form, together with the honeypot field names.",
)
def form_fields(
    request: Request,
    lifecycle: TokenLifecycle = Depends(get_token_lifecycle),
) -> FormFieldsResponse:
    """
    Issue a token for a form about to be rendered.

    Returns empty hidden fields if minting or storage failed; the
    submission then takes the missing-token path.
    """
    hidden_fields = lifecycle.on_form_render(request.headers.get("user-agent"))
    return FormFieldsResponse(
        hidden_fields=hidden_fields,
        honeypot_fields=[*HONEYPOT_FIELDS, DECOY_CHECKBOX_FIELD],
    )


@router.post(
    "/submissions",
    response_model=SubmissionResponse,
    summary="Validate a form submission",
    description="Runs the token and heuristic checks against the posted fields. "
    "An accepted submission consumes its token.",
)
def validate_submission(
    request_data: SubmissionRequest,
    request: Request,
    validator: SubmissionValidator = Depends(get_submission_validator),
    lifecycle: TokenLifecycle = Depends(get_token_lifecycle),
) -> SubmissionResponse:
    """
    Validate a submission and consume its token on acceptance.

    - **fields**: posted form fields, including hidden and honeypot fields
    - **spam**: upstream verdict, returned unchanged when no rule fires

    Always returns a verdict.
    """
    prior = Verdict.REJECT if request_data.spam else Verdict.ACCEPT
    submission = Submission(
        fields=request_data.fields,
        actual_user_agent=request.headers.get("user-agent"),
    )

    decision = validator.evaluate(submission, prior)
    if decision.verdict is Verdict.ACCEPT:
        lifecycle.on_submission_accepted(submission.token)

    return SubmissionResponse(
        verdict=decision.verdict,
        rule=decision.rule,
        spam=decision.verdict is Verdict.REJECT,
    )


@router.post(
    "/tokens/refresh",
    response_model=TokenRefreshResponse,
    responses={
        503: {"model": TokenRefreshError, "description": "Token could not be issued"},
    },
    summary="Issue a replacement token",
    description="Called by the page after a successful submission so the form "
    "can be submitted again with a fresh token.",
)
def refresh_token(
    request_data: TokenRefreshRequest | None = None,
    lifecycle: TokenLifecycle = Depends(get_token_lifecycle),
) -> TokenRefreshResponse | JSONResponse:
    """Mint and store a new token for a long-lived page."""
    payload = lifecycle.on_token_refresh_request()
    if "token" in payload:
        return TokenRefreshResponse(token=payload["token"])

    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=TokenRefreshError(error=payload["error"]).model_dump(),
    )
