"""Configuration management."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

PACKAGE_DIR = Path(__file__).resolve().parent


@dataclass
class Settings:
    """Backend and cache configuration."""
    project_id: str = "ge6gluia"
    dataset: str = "production"
    api_version: str = "2023-05-03"
    use_cdn: bool = True
    timeout: float = 30.0  # seconds, per backend request
    cache_path: Path = PACKAGE_DIR / "data" / "cache.json"
    cache_ttl_hours: float = 24.0

    @property
    def cache_ttl(self) -> timedelta:
        return timedelta(hours=self.cache_ttl_hours)


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{key} must be a number, got {value!r}") from None


def load_settings(cache_path: Optional[str] = None) -> Settings:
    """
    Load settings from environment variables (and a .env file if present).

    Raises:
        ValueError: If a numeric setting cannot be parsed.
    """
    load_dotenv()

    defaults = Settings()
    env_cache = os.getenv("CLASSBOARD_CACHE_PATH")
    path = cache_path or env_cache

    settings = Settings(
        project_id=os.getenv("CLASSBOARD_PROJECT_ID", defaults.project_id),
        dataset=os.getenv("CLASSBOARD_DATASET", defaults.dataset),
        api_version=os.getenv("CLASSBOARD_API_VERSION", defaults.api_version),
        use_cdn=_env_bool("CLASSBOARD_USE_CDN", defaults.use_cdn),
        timeout=_env_float("CLASSBOARD_TIMEOUT", defaults.timeout),
        cache_path=Path(path) if path else defaults.cache_path,
        cache_ttl_hours=_env_float("CLASSBOARD_CACHE_TTL_HOURS", defaults.cache_ttl_hours),
    )

    if settings.timeout <= 0:
        raise ValueError("CLASSBOARD_TIMEOUT must be positive")
    if settings.cache_ttl_hours <= 0:
        raise ValueError("CLASSBOARD_CACHE_TTL_HOURS must be positive")

    return settings
