from fastapi import APIRouter, Depends, status

from ...models.auth_models import (
    RegisterRequest, LoginRequest, MfaLoginRequest, MfaVerifyRequest,
    MfaPreferenceRequest, IdentityResponse, AuthResponse, MfaSetupResponse,
    MessageResponse
)
from ..schemas import ErrorResponse
from ...auth.dependencies import get_current_identity, get_identity_service
from ...services.credential_store import IdentityRecord
from ...services.identity_service import IdentityService, LoginResult, public_identity

router = APIRouter(
    prefix="/auth",
    tags=["authentication"],
    responses={401: {"model": ErrorResponse}}
)


def to_auth_response(result: LoginResult) -> AuthResponse:
    return AuthResponse(
        token=result.token,
        user=IdentityResponse(**public_identity(result.identity)),
        mfa_required=result.mfa_required,
        mfa_token=result.mfa_token
    )


@router.post(
    "/register",
    response_model=AuthResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED
)
async def register_user(
    request: RegisterRequest,
    identity_service: IdentityService = Depends(get_identity_service)
):
    """Register a new account and start a session"""
    result = await identity_service.register(
        name=request.name,
        email=request.email,
        password=request.password
    )
    return to_auth_response(result)


@router.post("/login", response_model=AuthResponse, response_model_exclude_none=True)
async def login_user(
    request: LoginRequest,
    identity_service: IdentityService = Depends(get_identity_service)
):
    """Password login; answers mfaRequired with a pending reference when MFA is on"""
    result = await identity_service.login(
        email=request.email,
        password=request.password,
        mfa_code=request.mfa_code
    )
    return to_auth_response(result)


@router.post("/login/mfa", response_model=AuthResponse, response_model_exclude_none=True)
async def complete_mfa_login(
    request: MfaLoginRequest,
    identity_service: IdentityService = Depends(get_identity_service)
):
    """Finish a pending login with the one-time code"""
    result = await identity_service.complete_mfa_login(request.mfa_token, request.code)
    return to_auth_response(result)


@router.get("/me", response_model=IdentityResponse)
async def get_me(identity: IdentityRecord = Depends(get_current_identity)):
    return IdentityResponse(**public_identity(identity))


@router.post("/mfa/setup", response_model=MfaSetupResponse)
async def setup_mfa(
    identity: IdentityRecord = Depends(get_current_identity),
    identity_service: IdentityService = Depends(get_identity_service)
):
    """Enroll a fresh TOTP secret; any previous secret stops working"""
    enrollment = await identity_service.setup_mfa(identity)
    return MfaSetupResponse(secret=enrollment.secret, qr_code_url=enrollment.setup_uri)


@router.post("/mfa/verify", response_model=AuthResponse, response_model_exclude_none=True)
async def verify_mfa(
    request: MfaVerifyRequest,
    identity: IdentityRecord = Depends(get_current_identity),
    identity_service: IdentityService = Depends(get_identity_service)
):
    result = await identity_service.verify_mfa(identity, request.code)
    return to_auth_response(result)


@router.patch("/mfa/preferences", response_model=MessageResponse)
async def update_mfa_preferences(
    request: MfaPreferenceRequest,
    identity: IdentityRecord = Depends(get_current_identity),
    identity_service: IdentityService = Depends(get_identity_service)
):
    await identity_service.update_mfa_preferences(identity, request.enabled, request.preferred_type)
    return MessageResponse(message="MFA preferences updated successfully")
