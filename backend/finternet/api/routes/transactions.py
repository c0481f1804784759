from fastapi import APIRouter, Depends
from typing import List

from ...models.asset_models import TransactionResponse
from ..schemas import ErrorResponse
from ...auth.dependencies import get_current_owner, get_asset_service
from ...services.asset_service import AssetService

router = APIRouter(
    prefix="/transactions",
    tags=["transactions"],
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}
)


@router.get("", response_model=List[TransactionResponse])
async def list_transactions(
    party: str = Depends(get_current_owner),
    asset_service: AssetService = Depends(get_asset_service)
):
    """Mints and transfers where the caller is sender or recipient"""
    transactions = await asset_service.list_transactions(party)
    return [TransactionResponse.model_validate(tx) for tx in transactions]


@router.get("/{transaction_id}", response_model=TransactionResponse)
async def get_transaction(
    transaction_id: str,
    party: str = Depends(get_current_owner),
    asset_service: AssetService = Depends(get_asset_service)
):
    transaction = await asset_service.get_transaction(transaction_id, party)
    return TransactionResponse.model_validate(transaction)
