# csrf_guard/core/config.py
import logging
from typing import FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings

from csrf_guard.core.exceptions import config_error

logger = logging.getLogger(__name__)

DEFAULT_IGNORED_METHODS = ("GET", "HEAD", "OPTIONS")
DEFAULT_SESSION_KEY = "CSRFSecret"
DIGEST_HMAC_SHA256 = "hmac-sha256"
DIGEST_MD5 = "md5"
SUPPORTED_DIGESTS = (DIGEST_HMAC_SHA256, DIGEST_MD5)


class Settings(BaseSettings):
    """Application settings"""
    APP_NAME: str = "CSRF Guard"
    DEBUG: bool = False

    # Session settings (the session backend itself is Starlette's)
    SESSION_SECRET_KEY: Optional[str] = Field(default=None)

    # CSRF settings
    CSRF_IGNORED_METHODS: List[str] = Field(default_factory=lambda: list(DEFAULT_IGNORED_METHODS))
    CSRF_SESSION_KEY: str = DEFAULT_SESSION_KEY
    CSRF_DIGEST: str = DIGEST_HMAC_SHA256
    CSRF_TOKEN_HEADER: str = "csrf-token"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore"
    }


# Settings singleton
settings = Settings()


def validate_required_settings(current: Optional[Settings] = None) -> bool:
    """Check that all required settings are present"""
    current = current or settings
    missing = []

    if not current.SESSION_SECRET_KEY:
        missing.append("SESSION_SECRET_KEY")

    if current.CSRF_DIGEST not in SUPPORTED_DIGESTS:
        missing.append(f"CSRF_DIGEST (one of {', '.join(SUPPORTED_DIGESTS)})")

    if missing:
        logger.warning(f"Missing or invalid environment variables: {', '.join(missing)}")
        logger.warning("Sessions will not survive a restart without SESSION_SECRET_KEY.")
        return False

    return True


class CSRFConfig(BaseModel):
    """
    Immutable configuration for one CSRF middleware instance.

    Shared read-only across concurrent requests.
    """
    model_config = ConfigDict(frozen=True)

    ignored_methods: FrozenSet[str] = frozenset(DEFAULT_IGNORED_METHODS)
    session_key: str = DEFAULT_SESSION_KEY
    digest: str = DIGEST_HMAC_SHA256

    @field_validator("ignored_methods", mode="before")
    @classmethod
    def _normalize_methods(cls, value):
        if isinstance(value, str):
            value = [value]
        methods = []
        for method in value:
            name = str(method).strip().upper()
            if not name:
                raise config_error("Ignored HTTP method names must not be empty", "ignored_methods")
            methods.append(name)
        return frozenset(methods)

    @field_validator("session_key")
    @classmethod
    def _check_session_key(cls, value: str) -> str:
        if not value:
            raise config_error("Session key must not be empty", "session_key")
        return value

    @field_validator("digest")
    @classmethod
    def _check_digest(cls, value: str) -> str:
        value = value.lower()
        if value not in SUPPORTED_DIGESTS:
            raise config_error(
                f"Unsupported CSRF digest '{value}'. Use one of: {', '.join(SUPPORTED_DIGESTS)}",
                "digest"
            )
        return value

    @classmethod
    def from_settings(cls, current: Optional[Settings] = None) -> "CSRFConfig":
        """Build the CSRF configuration from application settings"""
        current = current or settings
        return cls(
            ignored_methods=current.CSRF_IGNORED_METHODS,
            session_key=current.CSRF_SESSION_KEY,
            digest=current.CSRF_DIGEST,
        )
