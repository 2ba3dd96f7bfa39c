"""
API v1 routes.

Defines REST endpoints for the gated registration API:
- PUT  /v1/user/registration       - Submit a registration request
- GET  /v1/user/registration       - List pending requests (admin)
- POST /v1/user/registration/{id}  - Approve or reject a request (admin)
- POST /v1/user/login              - Authenticate with differentiated denials

Endpoints are plain functions: the domain does blocking database and bcrypt
work, so FastAPI runs them in its threadpool.
"""

from fastapi import APIRouter, Depends, Path, status

from src.api.dependencies import (
    get_authentication_gate,
    get_basic_auth_credentials,
    get_registration_workflow,
    require_admin,
)
from src.api.errors import client_error_exception
from src.api.models import (
    DecisionRequest,
    ErrorResponse,
    LoginResponse,
    PendingRequestItem,
    PendingRequestsResponse,
    RegistrationSubmitRequest,
    StatusResponse,
)
from src.domain.authentication import AuthenticationGate
from src.domain.ports import Account
from src.domain.registration import RegistrationWorkflow
from src.domain.validation import REQUEST_ID_PATTERN

router = APIRouter(tags=["v1"])

_INTERNAL_ERROR = {500: {"model": ErrorResponse, "description": "Unknown server error"}}


@router.put(
    "/user/registration",
    response_model=StatusResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Validation error"},
        409: {"model": ErrorResponse, "description": "Username taken or request already pending"},
        **_INTERNAL_ERROR,
    },
    summary="Submit a registration request",
    description="Submit username, password and email. "
    "The account is created only once an administrator approves the request.",
)
def submit_registration(
    request_data: RegistrationSubmitRequest,
    workflow: RegistrationWorkflow = Depends(get_registration_workflow),
) -> StatusResponse:
    """
    Create a PENDING registration request.

    - **username**: 3-50 characters, letters, digits and _ @ . -
    - **password**: 8-50 characters
    - **email**: Valid email address, max 100 characters
    """
    result = workflow.submit(request_data.username, request_data.password, request_data.email)
    if not result.ok:
        raise client_error_exception(result.error)
    return StatusResponse()


@router.get(
    "/user/registration",
    response_model=PendingRequestsResponse,
    responses={
        403: {"model": ErrorResponse, "description": "Access denied"},
        **_INTERNAL_ERROR,
    },
    summary="List pending registration requests",
    description="Administrators only. Requests are returned newest first.",
    dependencies=[Depends(require_admin)],
)
def list_pending_registrations(
    workflow: RegistrationWorkflow = Depends(get_registration_workflow),
) -> PendingRequestsResponse:
    requests = workflow.list_pending()
    return PendingRequestsResponse(
        requests=[
            PendingRequestItem(
                id=request.id,
                username=request.username,
                email=request.email,
                create_date=request.create_date_millis,
            )
            for request in requests
        ]
    )


@router.post(
    "/user/registration/{request_id}",
    response_model=StatusResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Validation error"},
        403: {"model": ErrorResponse, "description": "Access denied"},
        404: {"model": ErrorResponse, "description": "Request not found or not pending"},
        409: {"model": ErrorResponse, "description": "Username taken since the request was submitted"},
        **_INTERNAL_ERROR,
    },
    summary="Approve or reject a registration request",
    description="Administrators only. Approval creates the user account.",
)
def decide_registration(
    request_data: DecisionRequest,
    request_id: str = Path(..., pattern=REQUEST_ID_PATTERN.pattern),
    admin: Account = Depends(require_admin),
    workflow: RegistrationWorkflow = Depends(get_registration_workflow),
) -> StatusResponse:
    """
    Decide a PENDING request.

    - **status**: APPROVED or REJECTED
    """
    result = workflow.decide(request_id, request_data.status, actor_id=admin.id)
    if not result.ok:
        raise client_error_exception(result.error)
    return StatusResponse()


@router.post(
    "/user/login",
    response_model=LoginResponse,
    responses={
        403: {
            "model": ErrorResponse,
            "description": "Invalid credentials, pending approval or rejected registration",
        },
        **_INTERNAL_ERROR,
    },
    summary="Authenticate a user",
    description="Credentials (username:password) are provided via HTTP BASIC AUTH. "
    "Users whose registration is pending or rejected are told so.",
)
def login(
    credentials: tuple[str, str] = Depends(get_basic_auth_credentials),
    gate: AuthenticationGate = Depends(get_authentication_gate),
) -> LoginResponse:
    username, password = credentials
    result = gate.authenticate(username, password)
    if not result.ok:
        raise client_error_exception(result.error)
    account = result.value
    return LoginResponse(
        username=account.username, email=account.email, onboarding=account.onboarding
    )
