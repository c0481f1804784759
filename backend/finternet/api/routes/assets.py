from fastapi import APIRouter, Depends, status
from typing import List

from ...models.asset_models import CreateAssetRequest, TransferAssetRequest, AssetResponse
from ..schemas import ErrorResponse
from ...auth.dependencies import get_current_owner, get_asset_service
from ...services.asset_service import AssetService

router = APIRouter(
    prefix="/assets",
    tags=["assets"],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}
)


@router.get("", response_model=List[AssetResponse])
async def list_assets(
    owner_id: str = Depends(get_current_owner),
    asset_service: AssetService = Depends(get_asset_service)
):
    """List assets currently owned by the caller"""
    assets = await asset_service.list_assets(owner_id)
    return [AssetResponse.model_validate(asset) for asset in assets]


@router.get("/{asset_id}", response_model=AssetResponse)
async def get_asset(
    asset_id: str,
    owner_id: str = Depends(get_current_owner),
    asset_service: AssetService = Depends(get_asset_service)
):
    asset = await asset_service.get_asset(asset_id, owner_id)
    return AssetResponse.model_validate(asset)


@router.post("", response_model=AssetResponse, status_code=status.HTTP_201_CREATED)
async def create_asset(
    request: CreateAssetRequest,
    owner_id: str = Depends(get_current_owner),
    asset_service: AssetService = Depends(get_asset_service)
):
    """Mint a new asset owned by the caller"""
    asset = await asset_service.create_asset(
        owner_id=owner_id,
        name=request.name,
        asset_type=request.type,
        description=request.description,
        value=request.value,
        metadata=request.metadata
    )
    return AssetResponse.model_validate(asset)


@router.post("/{asset_id}/transfer", response_model=AssetResponse)
async def transfer_asset(
    asset_id: str,
    request: TransferAssetRequest,
    owner_id: str = Depends(get_current_owner),
    asset_service: AssetService = Depends(get_asset_service)
):
    """Transfer an owned asset to the recipient address"""
    asset = await asset_service.transfer_asset(asset_id, owner_id, request.recipient_address)
    return AssetResponse.model_validate(asset)
