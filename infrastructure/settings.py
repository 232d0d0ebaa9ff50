"""Runtime configuration loaded from the environment."""
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Mapping, Optional

ENV_PREFIX = "BOOKING_"


@dataclass(frozen=True)
class AppSettings:
    """Immutable snapshot of configuration values."""

    secret_key: str
    jwt_algorithm: str
    access_token_expire_minutes: int
    lock_timeout_seconds: float
    storage_retry_attempts: int
    storage_retry_backoff_seconds: float
    currency: str
    log_level: str


def load_settings(env: Optional[Mapping[str, str]] = None) -> AppSettings:
    """Load configuration from the environment and fall back to defaults."""
    if env is None:
        env = os.environ

    def get(name: str, default: str) -> str:
        return env.get(ENV_PREFIX + name, default)

    retry_attempts = int(get("STORAGE_RETRY_ATTEMPTS", "3"))
    if retry_attempts < 1:
        raise ValueError("BOOKING_STORAGE_RETRY_ATTEMPTS must be at least 1")

    return AppSettings(
        secret_key=get("SECRET_KEY", "change-me-in-production"),
        jwt_algorithm=get("JWT_ALGORITHM", "HS256"),
        access_token_expire_minutes=int(get("TOKEN_EXPIRE_MINUTES", "30")),
        lock_timeout_seconds=float(get("LOCK_TIMEOUT_SECONDS", "5.0")),
        storage_retry_attempts=retry_attempts,
        storage_retry_backoff_seconds=float(get("STORAGE_RETRY_BACKOFF_SECONDS", "0.05")),
        currency=get("CURRENCY", "USD"),
        log_level=get("LOG_LEVEL", "INFO").upper(),
    )


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return load_settings()
