import os

from settings import SETTINGS


def _env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    v = (os.getenv(name) or "").strip()
    if not v:
        return float(default)
    return float(v)


class Config:
    """Base configuration loaded from environment variables."""

    SECRET_KEY = os.getenv("SECRET_KEY", SETTINGS["SECRET_KEY"])

    # Feature flags
    ENABLE_API: bool = _env_bool("ENABLE_API", bool(SETTINGS["ENABLE_API"]))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", str(SETTINGS["LOG_LEVEL"])).upper()
    SLOW_REQUEST_MS: float = _env_float("SLOW_REQUEST_MS", SETTINGS["SLOW_REQUEST_MS"])

    # Service calls
    DEFAULT_TIMEOUT_S: float = _env_float(
        "DEFAULT_TIMEOUT_S", SETTINGS["DEFAULT_TIMEOUT_S"]
    )


def service_timeout_s(value) -> float | None:
    """Turn a configured timeout into a deadline length (``None`` when disabled)."""

    seconds = float(value or 0)
    return seconds if seconds > 0 else None
