from datetime import datetime
from pydantic import Field, field_validator
from typing import Optional

from .auth_models import CamelModel
from ..services.ownership_ledger import TransactionType


class CreateAssetRequest(CamelModel):
    """Request model for minting an asset"""
    name: str = Field(..., min_length=1, max_length=200)
    type: str = Field(..., min_length=1, max_length=100, description="Asset category, e.g. realestate")
    description: str = Field("", max_length=5000)
    value: float = Field(..., ge=0, allow_inf_nan=False, description="Declared value")
    metadata: Optional[str] = Field(None, description="Opaque metadata blob")

    @field_validator('name', 'type')
    @classmethod
    def validate_not_blank(cls, v):
        if not v.strip():
            raise ValueError('Field cannot be empty or whitespace only')
        return v.strip()


class TransferAssetRequest(CamelModel):
    recipient_address: str = Field(..., min_length=8, max_length=256)


class AssetResponse(CamelModel):
    id: str
    owner_id: str
    name: str
    type: str
    description: str
    value: float
    metadata: Optional[str] = None
    token_id: str
    created_at: datetime
    updated_at: Optional[datetime] = None


class TransactionResponse(CamelModel):
    id: str
    asset_id: str
    asset_name: str
    type: TransactionType
    from_id: Optional[str] = Field(None, alias="from")
    to_id: str = Field(..., alias="to")
    status: str
    timestamp: datetime
