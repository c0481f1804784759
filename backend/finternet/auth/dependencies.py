from fastapi import Depends, Request

from ..services.asset_service import AssetService
from ..services.credential_store import IdentityRecord
from ..services.exceptions import InvalidTokenError
from ..services.identity_service import IdentityService


def get_bearer_token(request: Request) -> str:
    """Extract the token from the Authorization header"""
    auth_header = request.headers.get("Authorization")

    if not auth_header:
        raise InvalidTokenError("Authorization header required")
    if not auth_header.startswith("Bearer "):
        raise InvalidTokenError("Authorization header must use the Bearer scheme")

    token = auth_header[len("Bearer "):].strip()
    if not token:
        raise InvalidTokenError("Authorization header required")
    return token


def get_identity_service(request: Request) -> IdentityService:
    return request.app.state.identity_service


def get_asset_service(request: Request) -> AssetService:
    return request.app.state.asset_service


async def get_current_identity(
    token: str = Depends(get_bearer_token),
    identity_service: IdentityService = Depends(get_identity_service)
) -> IdentityRecord:
    """
    Dependency that resolves the bearer session to a stored identity.
    Use this on all protected identity-service endpoints.
    """
    return await identity_service.authenticate(token)


async def get_current_owner(
    token: str = Depends(get_bearer_token),
    asset_service: AssetService = Depends(get_asset_service)
) -> str:
    """
    Dependency that resolves the bearer session to the caller's identity
    reference, checked locally by the asset service.
    """
    return asset_service.authenticate(token)
