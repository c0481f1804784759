import logging
from typing import Optional, List

from .exceptions import InvalidTokenError
from .ownership_ledger import (
    OwnershipLedger, AssetRecord, LedgerTransaction, resolve_recipient
)
from .session_issuer import SessionIssuer, get_session_issuer

logger = logging.getLogger(__name__)


class AssetService:
    """
    Asset operations scoped to the caller named by a session token.

    Tokens are checked locally with the shared signing key; the identity
    service is never consulted, so the caller reference is the token subject.
    """

    def __init__(self, ledger: OwnershipLedger, issuer: SessionIssuer):
        self.ledger = ledger
        self.issuer = issuer

    def authenticate(self, token: str) -> str:
        """Verify a session token and return the caller's identity reference"""
        if not token:
            raise InvalidTokenError("Authorization header required")
        return self.issuer.verify(token)

    async def create_asset(
        self,
        owner_id: str,
        name: str,
        asset_type: str,
        description: str = "",
        value: float = 0.0,
        metadata: Optional[str] = None
    ) -> AssetRecord:
        return await self.ledger.create(owner_id, name, asset_type, description, value, metadata)

    async def list_assets(self, owner_id: str) -> List[AssetRecord]:
        return list(await self.ledger.list_by_owner(owner_id))

    async def get_asset(self, asset_id: str, owner_id: str) -> AssetRecord:
        return await self.ledger.get_for_owner(asset_id, owner_id)

    async def transfer_asset(self, asset_id: str, owner_id: str, recipient_address: str) -> AssetRecord:
        """Resolve the recipient address and move the asset to it"""
        recipient_id = resolve_recipient(recipient_address)
        return await self.ledger.transfer(asset_id, owner_id, recipient_id)

    async def list_transactions(self, party: str) -> List[LedgerTransaction]:
        return list(await self.ledger.list_transactions(party))

    async def get_transaction(self, transaction_id: str, party: str) -> LedgerTransaction:
        return await self.ledger.get_transaction(transaction_id, party)


# Singleton instance
_asset_service = None

def get_asset_service() -> AssetService:
    """Get singleton AssetService instance"""
    global _asset_service
    if _asset_service is None:
        _asset_service = AssetService(OwnershipLedger(), get_session_issuer())
    return _asset_service
