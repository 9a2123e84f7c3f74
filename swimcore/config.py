"""Application configuration with environment-specific profiles.

Supports dev, staging, production and test environments via APP_ENV.
All values can be overridden by environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache


@dataclass(frozen=True)
class Settings:
    """Immutable application settings resolved from environment."""

    app_env: str = "dev"
    log_level: str = "INFO"

    # HTTP surface
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    request_id_header_name: str = "X-Request-ID"
    rate_limit_enabled: bool = True
    rate_limit_storage_uri: str = "memory://"
    generate_rate_limit: str = "60/minute"
    reroll_rate_limit: str = "120/minute"

    # Workout bounds
    default_pool: str = "25m"
    min_workout_distance: int = 800
    max_workout_distance: int = 10000

    # Retry budgets
    workout_build_attempts: int = 8
    section_body_attempts: int = 5
    reroll_max_attempts: int = 10

    # Recent-workout store
    history_size: int = 10

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"


# -- Environment profiles --

_ENV_PROFILES: dict[str, dict] = {
    "dev": {
        "log_level": "DEBUG",
        "rate_limit_enabled": True,
    },
    "staging": {
        "log_level": "INFO",
        "rate_limit_enabled": True,
    },
    "production": {
        "log_level": "WARNING",
        "rate_limit_enabled": True,
        "generate_rate_limit": "30/minute",
    },
    "test": {
        "log_level": "WARNING",
        "rate_limit_enabled": False,
    },
}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_list(name: str, default: list[str]) -> list[str]:
    raw = os.getenv(name)
    if not raw:
        return list(default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build Settings by merging environment profile with env-var overrides."""
    app_env = os.getenv("APP_ENV", "dev")
    profile = _ENV_PROFILES.get(app_env, _ENV_PROFILES["dev"])

    return Settings(
        app_env=app_env,
        log_level=os.getenv("LOG_LEVEL", profile.get("log_level", "INFO")),
        cors_origins=_env_list("CORS_ORIGINS", ["*"]),
        request_id_header_name=os.getenv("REQUEST_ID_HEADER", "X-Request-ID"),
        rate_limit_enabled=_env_bool("RATE_LIMIT_ENABLED", profile.get("rate_limit_enabled", True)),
        rate_limit_storage_uri=os.getenv("RATE_LIMIT_STORAGE_URI", "memory://"),
        generate_rate_limit=os.getenv("GENERATE_RATE_LIMIT", profile.get("generate_rate_limit", "60/minute")),
        reroll_rate_limit=os.getenv("REROLL_RATE_LIMIT", "120/minute"),
        default_pool=os.getenv("DEFAULT_POOL", "25m"),
        min_workout_distance=int(os.getenv("MIN_WORKOUT_DISTANCE", "800")),
        max_workout_distance=int(os.getenv("MAX_WORKOUT_DISTANCE", "10000")),
        workout_build_attempts=int(os.getenv("WORKOUT_BUILD_ATTEMPTS", "8")),
        section_body_attempts=int(os.getenv("SECTION_BODY_ATTEMPTS", "5")),
        reroll_max_attempts=int(os.getenv("REROLL_MAX_ATTEMPTS", "10")),
        history_size=int(os.getenv("HISTORY_SIZE", "10")),
    )
