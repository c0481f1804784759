from pydantic_settings import BaseSettings
from typing import Optional


class ConfigurationError(RuntimeError):
    """Raised when a service cannot start with the current settings"""
    pass


class Settings(BaseSettings):
    # Application settings
    APP_NAME: str = "Finternet"
    VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # API settings
    API_PREFIX: str = "/api"

    # CORS settings
    BACKEND_CORS_ORIGINS: list[str] = ["*"]

    # Session tokens (no default: the signing key must be provided)
    JWT_SECRET: Optional[str] = None
    JWT_ALGORITHM: str = "HS256"
    SESSION_DURATION_HOURS: int = 24

    # MFA settings
    MFA_ISSUER: str = "Finternet"
    MFA_CHALLENGE_MINUTES: int = 5
    MFA_VALID_WINDOW: int = 1

    # Password hashing cost
    BCRYPT_ROUNDS: int = 12

    # Service ports
    AUTH_SERVICE_PORT: int = 8000
    ASSET_SERVICE_PORT: int = 8001

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


settings = Settings()


def require_signing_key(config: Settings = settings) -> str:
    """Return the configured signing key or fail startup"""
    if not config.JWT_SECRET:
        raise ConfigurationError(
            "JWT_SECRET is not set; both services need the shared signing key to start"
        )
    return config.JWT_SECRET
