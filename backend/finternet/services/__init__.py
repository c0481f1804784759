from .credential_store import CredentialStore, IdentityRecord, MfaChannel
from .session_issuer import SessionIssuer, get_session_issuer
from .mfa_manager import MfaChallengeManager, MfaState
from .identity_service import IdentityService, LoginResult, get_identity_service
from .ownership_ledger import OwnershipLedger, AssetRecord, LedgerTransaction
from .asset_service import AssetService, get_asset_service

__all__ = [
    "CredentialStore",
    "IdentityRecord",
    "MfaChannel",
    "SessionIssuer",
    "get_session_issuer",
    "MfaChallengeManager",
    "MfaState",
    "IdentityService",
    "LoginResult",
    "get_identity_service",
    "OwnershipLedger",
    "AssetRecord",
    "LedgerTransaction",
    "AssetService",
    "get_asset_service"
]
