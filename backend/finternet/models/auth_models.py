import re
from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional

from ..services.credential_store import MfaChannel, MAX_PASSWORD_BYTES
from ..services.mfa_manager import MfaState

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def check_password_bytes(v: str) -> str:
    if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return v


class CamelModel(BaseModel):
    """Base model exposing camelCase JSON field names"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class RegisterRequest(CamelModel):
    """Request model for user registration"""
    name: str = Field(..., min_length=1, max_length=100, description="User's display name")
    email: str = Field(..., max_length=254, description="Login email, kept exactly as typed")
    password: str = Field(..., min_length=6, max_length=128, description="User's password")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError('Name cannot be empty or whitespace only')
        return v.strip()

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        if not EMAIL_PATTERN.match(v):
            raise ValueError('Email must be a valid address')
        return v

    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        return check_password_bytes(v)


class LoginRequest(CamelModel):
    """Request model for password login; mfaCode enables single-call step-up"""
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=1, max_length=128)
    mfa_code: Optional[str] = Field(None, min_length=6, max_length=8, description="Optional one-time code")

    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        return check_password_bytes(v)


class MfaLoginRequest(CamelModel):
    """Request model for finishing a login that is waiting on MFA"""
    mfa_token: str = Field(..., min_length=1, description="Pending challenge reference from /login")
    code: str = Field(..., min_length=6, max_length=8)


class MfaVerifyRequest(CamelModel):
    code: str = Field(..., min_length=6, max_length=8)


class MfaPreferenceRequest(CamelModel):
    enabled: bool
    preferred_type: MfaChannel


class IdentityResponse(CamelModel):
    """Public identity: never carries the password hash or MFA secret"""
    id: str
    name: str
    email: str
    mfa_enabled: bool
    mfa_verified: bool
    mfa_state: MfaState
    preferred_mfa_type: Optional[MfaChannel] = None


class AuthResponse(CamelModel):
    """Login/registration result; token is absent while MFA is pending"""
    token: Optional[str] = None
    user: IdentityResponse
    mfa_required: bool = False
    mfa_token: Optional[str] = None


class MfaSetupResponse(CamelModel):
    secret: str
    qr_code_url: str


class MessageResponse(CamelModel):
    message: str
