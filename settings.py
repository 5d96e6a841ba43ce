"""App settings.

Defaults consumed by ``config.Config``; every key can be overridden by an
environment variable of the same name.

For now this file uses a simple dict-like structure.
"""

# Single source of truth for default configuration.
SETTINGS: dict[str, object] = {
    # Flask
    "SECRET_KEY": "dev-not-secret",
    # Feature flags
    "ENABLE_API": True,
    # Logging
    "LOG_LEVEL": "INFO",
    # Requests slower than this are logged as SLOW_REQUEST (0 disables).
    "SLOW_REQUEST_MS": 250,
    # Per-operation deadline for service calls, in seconds (0 disables).
    "DEFAULT_TIMEOUT_S": 0,
}

# Optional convenience exports (mirrors earlier style).
SECRET_KEY = SETTINGS["SECRET_KEY"]
ENABLE_API = SETTINGS["ENABLE_API"]
LOG_LEVEL = SETTINGS["LOG_LEVEL"]
