"""Adapter configuration helpers."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import os

DEFAULT_CORS_ORIGINS = ("*",)


def _get_optional_env(name: str) -> str | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return raw.strip()


def _get_list_env(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None:
        return default
    items = tuple(item.strip() for item in raw.split(",") if item.strip())
    return items or default


@dataclass(frozen=True)
class GenerateUrls:
    """Resource URL decoration settings."""

    server_url: str


@dataclass(frozen=True)
class JsonderSettings:
    """Immutable startup configuration for the adapter."""

    generate_urls: GenerateUrls | None = None
    cors_origins: tuple[str, ...] = DEFAULT_CORS_ORIGINS

    @property
    def server_url(self) -> str | None:
        """Base URL used for resource decoration, or None when disabled."""
        if self.generate_urls is None:
            return None
        return self.generate_urls.server_url

    def safe_for_logging(self) -> dict[str, str | list[str] | None]:
        """Return adapter settings as a log-friendly mapping."""
        return {
            "server_url": self.server_url,
            "cors_origins": list(self.cors_origins),
        }


@lru_cache(maxsize=1)
def get_settings() -> JsonderSettings:
    """Load adapter settings from the environment."""
    server_url = _get_optional_env("JSONDER_SERVER_URL")
    return JsonderSettings(
        generate_urls=GenerateUrls(server_url=server_url) if server_url is not None else None,
        cors_origins=_get_list_env("JSONDER_CORS_ORIGINS", DEFAULT_CORS_ORIGINS),
    )
