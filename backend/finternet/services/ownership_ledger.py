"""
In-memory ownership ledger.

Assets are frozen records keyed by id in insertion order. Every owner change
swaps the stored record for a new one while holding the ledger lock, so the
find-and-check and the write can never interleave with another transfer.
Readers get snapshots of the records as they were when the lock was held.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Dict, List, Iterator, Callable

from .exceptions import NotFoundError, RequestValidationFailed

logger = logging.getLogger(__name__)

RECIPIENT_SUFFIX_LENGTH = 8


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AssetRecord:
    """Tokenized asset with exactly one current owner"""
    id: str
    owner_id: str
    name: str
    type: str
    description: str
    value: float
    token_id: str
    created_at: datetime
    metadata: Optional[str] = None
    updated_at: Optional[datetime] = None


class TransactionType(str, Enum):
    MINT = "mint"
    TRANSFER = "transfer"


@dataclass(frozen=True)
class LedgerTransaction:
    """History entry written alongside every mint and transfer"""
    id: str
    asset_id: str
    asset_name: str
    type: TransactionType
    from_id: Optional[str]
    to_id: str
    timestamp: datetime
    status: str = "completed"

    def involves(self, party: str) -> bool:
        return self.from_id == party or self.to_id == party


class RecordSnapshot:
    """
    Restartable view over records captured at one instant.

    Filtering happens lazily on each iteration; the captured records never
    change, so iterating twice yields the same sequence.
    """

    def __init__(self, records: List, predicate: Callable[[object], bool]):
        self._records = records
        self._predicate = predicate

    def __iter__(self) -> Iterator:
        return (record for record in self._records if self._predicate(record))


def resolve_recipient(recipient_address: str) -> str:
    """Map a transfer address to an owner reference: ``user_`` + last 8 chars"""
    address = (recipient_address or "").strip()
    if len(address) < RECIPIENT_SUFFIX_LENGTH:
        raise RequestValidationFailed(
            f"recipientAddress must be at least {RECIPIENT_SUFFIX_LENGTH} characters"
        )
    return "user_" + address[-RECIPIENT_SUFFIX_LENGTH:]


class OwnershipLedger:
    """Asset records plus their transaction history, guarded by one lock"""

    def __init__(self):
        self._assets: Dict[str, AssetRecord] = {}
        self._transactions: Dict[str, LedgerTransaction] = {}
        self._lock = asyncio.Lock()

    def _record_transaction(self, asset: AssetRecord, kind: TransactionType, from_id: Optional[str], to_id: str, at: datetime):
        # Caller holds the lock
        transaction = LedgerTransaction(
            id=str(uuid.uuid4()),
            asset_id=asset.id,
            asset_name=asset.name,
            type=kind,
            from_id=from_id,
            to_id=to_id,
            timestamp=at,
        )
        self._transactions[transaction.id] = transaction
        return transaction

    async def create(
        self,
        owner_id: str,
        name: str,
        asset_type: str,
        description: str = "",
        value: float = 0.0,
        metadata: Optional[str] = None
    ) -> AssetRecord:
        """Mint a new asset owned by ``owner_id``"""
        now = utcnow()
        asset = AssetRecord(
            id=f"asset_{uuid.uuid4().hex}",
            owner_id=owner_id,
            name=name,
            type=asset_type,
            description=description or "",
            value=value,
            token_id=f"token_{uuid.uuid4().hex}",
            created_at=now,
            metadata=metadata,
        )

        async with self._lock:
            self._assets[asset.id] = asset
            self._record_transaction(asset, TransactionType.MINT, None, owner_id, now)

        logger.info(f"Asset created: {asset.id}, TokenID: {asset.token_id}, Owner: {owner_id}")
        return asset

    async def list_by_owner(self, owner_id: str) -> RecordSnapshot:
        async with self._lock:
            records = list(self._assets.values())
        return RecordSnapshot(records, lambda asset: asset.owner_id == owner_id)

    async def get_for_owner(self, asset_id: str, owner_id: str) -> AssetRecord:
        """Missing and foreign assets are reported identically"""
        async with self._lock:
            asset = self._assets.get(asset_id)
        if asset is None or asset.owner_id != owner_id:
            raise NotFoundError("Asset not found")
        return asset

    async def transfer(self, asset_id: str, owner_id: str, recipient_id: str) -> AssetRecord:
        """Move the asset from ``owner_id`` to ``recipient_id`` atomically"""
        async with self._lock:
            current = self._assets.get(asset_id)
            if current is None or current.owner_id != owner_id:
                raise NotFoundError("Asset not found")

            now = utcnow()
            updated = replace(current, owner_id=recipient_id, updated_at=now)
            self._assets[asset_id] = updated
            self._record_transaction(updated, TransactionType.TRANSFER, owner_id, recipient_id, now)

        logger.info(
            f"Asset transferred: {updated.id}, TokenID: {updated.token_id}, "
            f"From: {owner_id}, To: {recipient_id}"
        )
        return updated

    async def list_transactions(self, party: str) -> RecordSnapshot:
        async with self._lock:
            transactions = list(self._transactions.values())
        return RecordSnapshot(transactions, lambda tx: tx.involves(party))

    async def get_transaction(self, transaction_id: str, party: str) -> LedgerTransaction:
        async with self._lock:
            transaction = self._transactions.get(transaction_id)
        if transaction is None or not transaction.involves(party):
            raise NotFoundError("Transaction not found")
        return transaction
