import logging
from dataclasses import dataclass
from typing import Optional, Dict, Any

from ..core.config import settings
from .credential_store import CredentialStore, IdentityRecord, MfaChannel
from .exceptions import InvalidCredentialsError, UnknownIdentityError
from .mfa_manager import MfaChallengeManager, MfaEnrollment, mfa_state
from .session_issuer import SessionIssuer, get_session_issuer

logger = logging.getLogger(__name__)


@dataclass
class LoginResult:
    """
    Outcome of a password login.

    Either ``token`` is set, or ``mfa_required`` is True and ``mfa_token``
    holds the short-lived reference used to finish the login.
    """
    identity: IdentityRecord
    token: Optional[str] = None
    mfa_required: bool = False
    mfa_token: Optional[str] = None


def public_identity(identity: IdentityRecord) -> Dict[str, Any]:
    data = identity.to_public()
    data["mfa_state"] = mfa_state(identity)
    return data


class IdentityService:
    """Registration, login and MFA flows over the credential store"""

    def __init__(
        self,
        store: CredentialStore,
        issuer: SessionIssuer,
        mfa_manager: Optional[MfaChallengeManager] = None
    ):
        self.store = store
        self.issuer = issuer
        self.mfa_manager = mfa_manager or MfaChallengeManager(store)

    async def register(self, name: str, email: str, password: str) -> LoginResult:
        """Create the identity and issue a session; MFA is off for new accounts"""
        identity = await self.store.register(name, email, password)
        token = self.issuer.issue(identity.id)
        return LoginResult(identity=identity, token=token)

    async def login(self, email: str, password: str, mfa_code: Optional[str] = None) -> LoginResult:
        """
        Password login with optional MFA step-up.

        With MFA enabled and no ``mfa_code`` the result carries a pending
        challenge reference instead of a session token. A supplied code is
        verified in the same call.
        """
        # Unknown emails and wrong passwords fail the same way
        identity = await self.store.verify_credentials(email, password)
        if identity is None:
            logger.info("Login rejected: invalid credentials")
            raise InvalidCredentialsError()

        if not identity.mfa_enabled:
            logger.info(f"Login succeeded for {identity.id}")
            return LoginResult(identity=identity, token=self.issuer.issue(identity.id))

        if mfa_code:
            return await self._complete_mfa(identity.id, mfa_code)

        logger.info(f"Login for {identity.id} waiting on MFA")
        return LoginResult(
            identity=identity,
            mfa_required=True,
            mfa_token=self.issuer.issue_challenge(identity.id)
        )

    async def complete_mfa_login(self, mfa_token: str, code: str) -> LoginResult:
        """Finish a pending login with the challenge reference and a one-time code"""
        identity_id = self.issuer.verify_challenge(mfa_token)
        return await self._complete_mfa(identity_id, code)

    async def _complete_mfa(self, identity_id: str, code: str) -> LoginResult:
        identity = await self.mfa_manager.verify(identity_id, code)
        return LoginResult(identity=identity, token=self.issuer.issue(identity.id))

    async def authenticate(self, token: str) -> IdentityRecord:
        """Resolve a session token to its stored identity"""
        identity_id = self.issuer.verify(token)
        identity = await self.store.find_by_id(identity_id)
        if identity is None:
            raise UnknownIdentityError()
        return identity

    async def setup_mfa(self, identity: IdentityRecord) -> MfaEnrollment:
        return await self.mfa_manager.enroll(identity.id)

    async def verify_mfa(self, identity: IdentityRecord, code: str) -> LoginResult:
        """Confirm an enrollment (or re-prove possession) and issue a fresh session"""
        return await self._complete_mfa(identity.id, code)

    async def update_mfa_preferences(self, identity: IdentityRecord, enabled: bool, channel: MfaChannel) -> IdentityRecord:
        return await self.mfa_manager.set_preference(identity.id, enabled, channel)


# Singleton instance
_identity_service = None

def get_identity_service() -> IdentityService:
    """Get singleton IdentityService instance"""
    global _identity_service
    if _identity_service is None:
        store = CredentialStore()
        _identity_service = IdentityService(
            store=store,
            issuer=get_session_issuer(),
            mfa_manager=MfaChallengeManager(
                store,
                issuer_name=settings.MFA_ISSUER,
                valid_window=settings.MFA_VALID_WINDOW
            )
        )
    return _identity_service
