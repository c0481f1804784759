import jwt
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from ..core.config import settings, require_signing_key
from .exceptions import InvalidTokenError, ExpiredTokenError

logger = logging.getLogger(__name__)

SESSION_TOKEN = "session"
MFA_CHALLENGE_TOKEN = "mfa_challenge"


@dataclass
class SessionClaims:
    """Decoded token data"""
    subject: str
    token_type: str
    issued_at: datetime
    expires_at: datetime


class SessionIssuer:
    """Stateless signed-token issuing and verification"""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        session_duration_hours: int = 24,
        challenge_duration_minutes: int = 5
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.session_duration = timedelta(hours=session_duration_hours)
        self.challenge_duration = timedelta(minutes=challenge_duration_minutes)

    def _encode(self, subject: str, token_type: str, lifetime: timedelta, now: Optional[datetime] = None) -> str:
        now = now or datetime.now(timezone.utc)
        payload = {
            "sub": subject,
            "typ": token_type,
            "jti": uuid.uuid4().hex,
            "iat": now,
            "exp": now + lifetime,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def issue(self, identity_id: str, now: Optional[datetime] = None) -> str:
        """Sign a session token for the identity, valid for the session duration"""
        return self._encode(identity_id, SESSION_TOKEN, self.session_duration, now)

    def issue_challenge(self, identity_id: str, now: Optional[datetime] = None) -> str:
        """Sign a short-lived reference to a pending MFA login"""
        return self._encode(identity_id, MFA_CHALLENGE_TOKEN, self.challenge_duration, now)

    def decode(self, token: str, token_type: str = SESSION_TOKEN) -> SessionClaims:
        """Verify signature, expiry and type and return the claims"""
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp", "iat"]}
            )
        except jwt.ExpiredSignatureError:
            raise ExpiredTokenError()
        except jwt.InvalidTokenError as e:
            logger.debug(f"Rejected token: {e}")
            raise InvalidTokenError()

        if payload.get("typ") != token_type:
            raise InvalidTokenError()

        return SessionClaims(
            subject=payload["sub"],
            token_type=payload["typ"],
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )

    def verify(self, token: str) -> str:
        """Verify a session token and return the identity id it asserts"""
        return self.decode(token, SESSION_TOKEN).subject

    def verify_challenge(self, token: str) -> str:
        """Verify a pending MFA reference and return its identity id"""
        return self.decode(token, MFA_CHALLENGE_TOKEN).subject


# Singleton instance
_session_issuer = None

def get_session_issuer() -> SessionIssuer:
    """Get singleton SessionIssuer instance; fails without a signing key"""
    global _session_issuer
    if _session_issuer is None:
        _session_issuer = SessionIssuer(
            secret_key=require_signing_key(settings),
            algorithm=settings.JWT_ALGORITHM,
            session_duration_hours=settings.SESSION_DURATION_HOURS,
            challenge_duration_minutes=settings.MFA_CHALLENGE_MINUTES
        )
    return _session_issuer
