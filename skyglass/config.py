"""Environment driven configuration."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class ImproperlyConfigured(RuntimeError):
    """A required setting is missing or malformed."""


def env(name: str, default: Optional[str] = None) -> str:
    """Fetch environment variables while allowing explicit defaults."""

    value = os.environ.get(name, default)
    if value is None:
        raise ImproperlyConfigured(f"Environment variable {name} is required")
    return value


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ImproperlyConfigured(f"Environment variable {name} must be a number") from exc


@dataclass
class AppConfig:
    openweather_api_key: Optional[str] = None
    openweather_base_url: str = "https://api.openweathermap.org/data/2.5"
    groq_api_key: Optional[str] = None
    groq_model: str = "llama-3.3-70b-versatile"
    groq_url: str = "https://api.groq.com/openai/v1/chat/completions"
    api_url: str = "http://localhost:5000"
    data_dir: Path = Path.home() / ".config" / "skyglass"
    report_cache_ttl: float = 900.0
    fallback_city: str = "London"
    fetch_timeout: Optional[float] = None
    http_timeout: float = 10.0

    @classmethod
    def from_env(cls) -> "AppConfig":
        defaults = cls()
        return cls(
            openweather_api_key=os.environ.get("OPENWEATHER_API_KEY") or None,
            openweather_base_url=env("OPENWEATHER_BASE_URL", defaults.openweather_base_url),
            groq_api_key=os.environ.get("GROQ_API_KEY") or None,
            groq_model=env("GROQ_MODEL", defaults.groq_model),
            groq_url=env("GROQ_URL", defaults.groq_url),
            api_url=env("SKYGLASS_API_URL", defaults.api_url),
            data_dir=Path(env("SKYGLASS_DATA_DIR", str(defaults.data_dir))).expanduser(),
            report_cache_ttl=_env_float("REPORT_CACHE_TTL", defaults.report_cache_ttl),
            fallback_city=env("SKYGLASS_FALLBACK_CITY", defaults.fallback_city),
            fetch_timeout=_env_float("SKYGLASS_FETCH_TIMEOUT", None),
            http_timeout=_env_float("SKYGLASS_HTTP_TIMEOUT", defaults.http_timeout),
        )

    @property
    def state_file(self) -> Path:
        return self.data_dir / "state.json"

    def require_openweather_key(self) -> str:
        if not self.openweather_api_key:
            raise ImproperlyConfigured("Environment variable OPENWEATHER_API_KEY is required")
        return self.openweather_api_key


__all__ = ["AppConfig", "ImproperlyConfigured", "env"]
