"""Application configuration via environment variables.

Uses pydantic-settings to load config from env vars with TASKBOARD_ prefix
(and an optional .env file in the working directory).

Learn: pydantic-settings auto-loads from environment, validates types,
provides defaults. Settings are passed into the app factory, so tests can
build an app with their own database URL and secrets.
"""

from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings

_DEV_ACCESS_SECRET = "access_secret"
_DEV_REFRESH_SECRET = "refresh_secret"


class Settings(BaseSettings):
    """All app configuration. Set via TASKBOARD_* env vars."""

    # Database
    database_url: str = "sqlite+aiosqlite:///./taskboard.db"

    # Redis (rate limiting only; optional)
    redis_url: str = "redis://localhost:6379/0"

    # Auth — access and refresh tokens are signed with different secrets
    access_token_secret: str = _DEV_ACCESS_SECRET
    refresh_token_secret: str = _DEV_REFRESH_SECRET
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24  # 1 day
    refresh_token_expire_days: int = 10
    bcrypt_rounds: int = 10

    # Cookies
    cookie_secure: bool = True
    cookie_samesite: str = "lax"

    # Server
    environment: str = "development"
    debug: bool = False
    port: int = 5000

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Rate limiting — fixed window per client address
    rate_limit_max_requests: int = 100
    rate_limit_window_seconds: int = 15 * 60

    model_config = {
        "env_prefix": "TASKBOARD_",
        "env_file": ".env",
        "extra": "ignore",
    }

    @model_validator(mode="after")
    def validate_production_settings(self):
        """Ensure sensitive defaults are changed in non-development environments."""
        if self.bcrypt_rounds < 10:
            raise ValueError("TASKBOARD_BCRYPT_ROUNDS must be at least 10")
        if self.environment == "development":
            return self
        if (
            self.access_token_secret == _DEV_ACCESS_SECRET
            or self.refresh_token_secret == _DEV_REFRESH_SECRET
        ):
            raise ValueError(
                "TASKBOARD_ACCESS_TOKEN_SECRET and TASKBOARD_REFRESH_TOKEN_SECRET "
                "must be set to secure values in non-development environments. "
                'Generate one with: python -c "import secrets; print(secrets.token_urlsafe(32))"'
            )
        if self.access_token_secret == self.refresh_token_secret:
            raise ValueError("Access and refresh token secrets must differ")
        return self


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings, loaded once on first use."""
    return Settings()
