"""
Time-based one-time password enrollment and verification.

An identity moves through three states:

    disabled -> enrolling (secret stored, never confirmed) -> verified

Enrollment always generates a fresh secret and drops the verified flag.
A successful ``verify`` is the only way to set it again.
"""

import base64
import logging
import secrets
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import pyotp

from .credential_store import CredentialStore, IdentityRecord, MfaChannel
from .exceptions import InvalidCodeError, UnknownIdentityError

logger = logging.getLogger(__name__)

SECRET_BYTES = 16  # 128 bits
TOTP_INTERVAL = 30


class MfaState(str, Enum):
    DISABLED = "disabled"
    ENROLLING = "enrolling"
    VERIFIED = "verified"


def mfa_state(identity: IdentityRecord) -> MfaState:
    if not identity.mfa_enabled or not identity.mfa_secret:
        return MfaState.DISABLED
    if identity.mfa_verified:
        return MfaState.VERIFIED
    return MfaState.ENROLLING


@dataclass
class MfaEnrollment:
    """Secret and provisioning URI returned by enroll"""
    secret: str
    setup_uri: str


def generate_mfa_secret() -> str:
    """Generate a random base-32 TOTP secret"""
    return base64.b32encode(secrets.token_bytes(SECRET_BYTES)).decode("ascii").rstrip("=")


class MfaChallengeManager:
    """Enrollment, code verification and preference updates"""

    def __init__(self, store: CredentialStore, issuer_name: str = "Finternet", valid_window: int = 1):
        self.store = store
        self.issuer_name = issuer_name
        self.valid_window = valid_window

    async def enroll(self, identity_id: str) -> MfaEnrollment:
        """Replace any existing secret with a fresh one and enable MFA"""
        secret = generate_mfa_secret()

        def apply(record: IdentityRecord):
            record.mfa_secret = secret
            record.mfa_enabled = True
            record.mfa_verified = False
            record.mfa_last_counter = None

        updated = await self.store.update_mfa_fields(identity_id, apply)
        if updated is None:
            raise UnknownIdentityError()

        setup_uri = pyotp.TOTP(secret, interval=TOTP_INTERVAL).provisioning_uri(
            name=updated.email,
            issuer_name=self.issuer_name
        )
        logger.info(f"MFA enrollment started for {identity_id}")
        return MfaEnrollment(secret=secret, setup_uri=setup_uri)

    def _matching_counter(self, secret: str, code: str, at: float) -> Optional[int]:
        """Return the time-step the code belongs to, or None"""
        if not code or not code.isdigit():
            return None

        totp = pyotp.TOTP(secret, interval=TOTP_INTERVAL)
        current = int(at // TOTP_INTERVAL)
        for offset in range(-self.valid_window, self.valid_window + 1):
            counter = current + offset
            if secrets.compare_digest(totp.generate_otp(counter), code):
                return counter
        return None

    async def verify(self, identity_id: str, code: str, at: Optional[float] = None) -> IdentityRecord:
        """
        Check ``code`` against the stored secret and mark MFA as verified.

        A code is accepted once: its time-step must be later than the step of
        the last accepted code. Raises InvalidCodeError otherwise.
        """
        at = time.time() if at is None else at

        def apply(record: IdentityRecord):
            if not record.mfa_secret:
                raise InvalidCodeError()

            counter = self._matching_counter(record.mfa_secret, code, at)
            if counter is None:
                raise InvalidCodeError()
            if record.mfa_last_counter is not None and counter <= record.mfa_last_counter:
                raise InvalidCodeError("MFA code already used")

            record.mfa_last_counter = counter
            record.mfa_verified = True

        try:
            updated = await self.store.update_mfa_fields(identity_id, apply)
        except InvalidCodeError:
            logger.warning(f"MFA verification failed for {identity_id}")
            raise

        if updated is None:
            raise UnknownIdentityError()

        logger.info(f"MFA verified for {identity_id}")
        return updated

    async def set_preference(self, identity_id: str, enabled: bool, channel: MfaChannel) -> IdentityRecord:
        """Toggle the MFA requirement and preferred channel; verification state is kept"""
        def apply(record: IdentityRecord):
            record.mfa_enabled = enabled
            record.preferred_mfa_type = MfaChannel(channel)

        updated = await self.store.update_mfa_fields(identity_id, apply)
        if updated is None:
            raise UnknownIdentityError()

        if enabled and not updated.mfa_secret:
            logger.warning(f"MFA enabled for {identity_id} without an enrolled secret")
        return updated
