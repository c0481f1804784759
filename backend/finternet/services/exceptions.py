"""
Domain errors for the identity and asset services.

Each error carries the stable ``code`` reported to callers and the HTTP
status the transport layer answers with.
"""


class FinternetError(Exception):
    """Base exception for expected, caller-recoverable failures"""
    code = "Error"
    status_code = 400
    message = "Request failed"

    def __init__(self, message: str = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class DuplicateEmailError(FinternetError):
    """Raised when registering an email that already exists"""
    code = "DuplicateEmail"
    status_code = 409
    message = "Email already registered"


class InvalidCredentialsError(FinternetError):
    """Raised when the email is unknown or the password does not match"""
    code = "InvalidCredentials"
    status_code = 401
    message = "Invalid credentials"


class InvalidTokenError(FinternetError):
    """Raised when a token is malformed, of the wrong type or badly signed"""
    code = "InvalidToken"
    status_code = 401
    message = "Invalid token"


class ExpiredTokenError(FinternetError):
    """Raised when a token signature is valid but its expiry has passed"""
    code = "ExpiredToken"
    status_code = 401
    message = "Token has expired"


class UnknownIdentityError(FinternetError):
    """Raised when a valid token names an identity that no longer resolves"""
    code = "UnknownIdentity"
    status_code = 401
    message = "User not found"


class InvalidCodeError(FinternetError):
    """Raised when a one-time code is wrong, stale or replayed"""
    code = "InvalidCode"
    status_code = 401
    message = "Invalid MFA code"


class NotFoundError(FinternetError):
    """Raised when a record is missing or not owned by the caller"""
    code = "NotFound"
    status_code = 404
    message = "Not found"


class RequestValidationFailed(FinternetError):
    """Raised when caller-supplied data cannot be used"""
    code = "ValidationError"
    status_code = 422
    message = "Validation error"
