"""
Application configuration

SECURITY: Credentials and endpoint URLs have no defaults (will fail if not set).
- Runtime validation catches insecure production configurations
- Settings are injected into the carrier core; the core never reads env vars
"""
import logging
from functools import lru_cache
from urllib.parse import urlparse

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

MIN_HTTP_TIMEOUT_MS = 100


class Settings(BaseSettings):
    # App - defaults are PRODUCTION safe
    APP_NAME: str = "Carrier Rates"
    ENVIRONMENT: str = "production"  # Explicit env marker
    LOG_LEVEL: str = "INFO"

    # UPS OAuth client credentials - NO DEFAULT
    UPS_CLIENT_ID: str
    UPS_CLIENT_SECRET: str
    UPS_ACCOUNT_NUMBER: str = ""  # Optional ShipperNumber for negotiated rates

    # UPS endpoints - NO DEFAULT
    UPS_OAUTH_TOKEN_URL: str
    UPS_RATING_URL: str

    # Outbound call bound (applies to token and rating calls)
    UPS_HTTP_TIMEOUT_MS: int = 5000
    # Refresh the token this many seconds before it actually expires
    UPS_TOKEN_SKEW_SECONDS: int = 30

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("UPS_CLIENT_ID", "UPS_CLIENT_SECRET")
    @classmethod
    def require_credentials(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("UPS client credentials must not be empty")
        return v.strip()

    @field_validator("UPS_OAUTH_TOKEN_URL", "UPS_RATING_URL")
    @classmethod
    def require_http_url(cls, v: str) -> str:
        parsed = urlparse(v or "")
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"Expected an absolute http(s) URL, got {v!r}")
        return v

    @field_validator("UPS_HTTP_TIMEOUT_MS")
    @classmethod
    def check_timeout(cls, v: int) -> int:
        if v < MIN_HTTP_TIMEOUT_MS:
            raise ValueError(f"UPS_HTTP_TIMEOUT_MS must be >= {MIN_HTTP_TIMEOUT_MS}")
        return v

    @field_validator("UPS_TOKEN_SKEW_SECONDS")
    @classmethod
    def check_skew(cls, v: int) -> int:
        if v < 0:
            raise ValueError("UPS_TOKEN_SKEW_SECONDS must be >= 0")
        return v

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        return str(v or "INFO").upper()

    @model_validator(mode="after")
    def validate_production_config(self):
        """Runtime validation to catch insecure production configurations."""
        if self.ENVIRONMENT == "production":
            errors = []

            for name in ("UPS_OAUTH_TOKEN_URL", "UPS_RATING_URL"):
                url = getattr(self, name)
                if urlparse(url).scheme != "https":
                    errors.append(f"{name} must use https in production")

            if errors:
                raise ValueError(
                    "PRODUCTION SECURITY VIOLATIONS:\n" + "\n".join(f"  - {e}" for e in errors)
                )

        return self

    @property
    def http_timeout_seconds(self) -> float:
        return self.UPS_HTTP_TIMEOUT_MS / 1000.0


@lru_cache()
def get_settings() -> Settings:
    """Load settings once per process."""
    settings = Settings()
    logger.debug(f"Settings loaded for environment={settings.ENVIRONMENT}")
    return settings
