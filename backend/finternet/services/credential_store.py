import asyncio
import bcrypt
import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Dict, Any, Callable

from ..core.config import settings
from .exceptions import DuplicateEmailError, RequestValidationFailed

logger = logging.getLogger(__name__)


class MfaChannel(str, Enum):
    """Out-of-band channel a user prefers for MFA"""
    APP = "app"
    EMAIL = "email"
    SMS = "sms"


@dataclass
class IdentityRecord:
    """Registered user with credential and MFA state"""
    id: str
    name: str
    email: str
    password_hash: str
    mfa_enabled: bool = False
    mfa_secret: Optional[str] = None
    mfa_verified: bool = False
    mfa_last_counter: Optional[int] = None
    preferred_mfa_type: Optional[MfaChannel] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_public(self) -> Dict[str, Any]:
        """Outward view: never includes the password hash or the MFA secret"""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "mfa_enabled": self.mfa_enabled,
            "mfa_verified": self.mfa_verified,
            "preferred_mfa_type": self.preferred_mfa_type,
        }


# bcrypt only looks at the first 72 bytes and refuses longer input
MAX_PASSWORD_BYTES = 72


def hash_password(password: str, rounds: int = None) -> str:
    """Hash password using bcrypt"""
    salt = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(password: str, hashed: str) -> bool:
    """Verify password against hash"""
    try:
        return bcrypt.checkpw(password.encode('utf-8'), hashed.encode('utf-8'))
    except ValueError:
        return False


class CredentialStore:
    """In-memory identity store; owns uniqueness of email"""

    def __init__(self, bcrypt_rounds: int = None):
        self.bcrypt_rounds = bcrypt_rounds or settings.BCRYPT_ROUNDS
        self._identities: Dict[str, IdentityRecord] = {}
        self._ids_by_email: Dict[str, str] = {}
        self._lock = asyncio.Lock()
        # Checked when the email is unknown so every login pays one bcrypt round
        self._dummy_hash = hash_password("finternet-placeholder", self.bcrypt_rounds)

    async def register(self, name: str, email: str, password: str) -> IdentityRecord:
        """Create a credential record; fails with DuplicateEmailError"""
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise RequestValidationFailed(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

        # Hashing is slow, keep it off the event loop and outside the critical section
        loop = asyncio.get_event_loop()
        password_hash = await loop.run_in_executor(
            None,
            hash_password,
            password,
            self.bcrypt_rounds
        )

        async with self._lock:
            if email in self._ids_by_email:
                raise DuplicateEmailError()

            record = IdentityRecord(
                id=f"user_{uuid.uuid4().hex}",
                name=name,
                email=email,
                password_hash=password_hash,
            )
            self._identities[record.id] = record
            self._ids_by_email[email] = record.id

        logger.info(f"Registered identity {record.id}")
        return replace(record)

    async def find_by_email(self, email: str) -> Optional[IdentityRecord]:
        async with self._lock:
            identity_id = self._ids_by_email.get(email)
            record = self._identities.get(identity_id) if identity_id else None
            return replace(record) if record else None

    async def verify_credentials(self, email: str, password: str) -> Optional[IdentityRecord]:
        """Return the identity when email and password match, otherwise None"""
        identity = await self.find_by_email(email)
        hashed = identity.password_hash if identity else self._dummy_hash

        loop = asyncio.get_event_loop()
        matches = await loop.run_in_executor(None, verify_password, password, hashed)
        if identity is None or not matches:
            return None
        return identity

    async def find_by_id(self, identity_id: str) -> Optional[IdentityRecord]:
        async with self._lock:
            record = self._identities.get(identity_id)
            return replace(record) if record else None

    async def update_mfa_fields(
        self,
        identity_id: str,
        mutator: Callable[[IdentityRecord], None]
    ) -> Optional[IdentityRecord]:
        """
        Apply ``mutator`` to a copy of the record and store the result.

        The lookup, the mutation and the write-back happen under one lock, so
        the mutator sees the latest state and may raise to abort the update.
        Returns None when the identity does not exist.
        """
        async with self._lock:
            current = self._identities.get(identity_id)
            if current is None:
                return None

            updated = replace(current)
            mutator(updated)
            self._identities[identity_id] = updated
            return replace(updated)

    async def count(self) -> int:
        async with self._lock:
            return len(self._identities)
