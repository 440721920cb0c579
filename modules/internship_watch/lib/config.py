from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from . import extractors
from .fetch import DEFAULT_PROXY_TEMPLATE
from .utils import truthy

DEFAULT_PROVIDER = "wp_blocks"
DEFAULT_SQLITE_PATH = "/app/local/state/internship_watch.db"

# Page each provider opens when no URL was given and none is remembered
PROVIDER_DEFAULT_URLS: dict[str, str] = {
    "wp_blocks": "https://stattrak.amstat.org/2025/12/01/2026-internships/",
}


# -----------------------------
# Exceptions
# -----------------------------
class ConfigError(ValueError):
    """Raised when provided kwargs/env cannot form a valid Settings."""


# -----------------------------
# Models
# -----------------------------
@dataclass
class Settings:
    """
    Canonical configuration for one 'internship_watch' run.

    Markup comes from exactly one place:
      - html_path: a saved/pasted page on disk (manual path), or
      - url: fetched through the proxy; when empty, the engine uses the
        remembered last URL, then the provider's default page.
    """

    url: str | None = None
    html_path: str | None = None
    provider: str = DEFAULT_PROVIDER

    proxy_template: str = DEFAULT_PROXY_TEMPLATE
    sqlite_path: str = DEFAULT_SQLITE_PATH
    timeout: float = 15.0
    skip_network: bool = False

    @property
    def default_url(self) -> str | None:
        return PROVIDER_DEFAULT_URLS.get(self.provider)

    # ------------- constructors -------------
    @classmethod
    def from_env_and_kwargs(cls, kwargs: Mapping[str, Any] | None) -> Settings:
        """
        Build Settings from kwargs (with env fallbacks) and validate.

        Expected kwargs (all optional):

            url: str
            html_path: str
            provider: str = "wp_blocks"            # or "ai"
            proxy_template: str                    # env INTERNSHIP_WATCH_PROXY; "" = direct fetch
            sqlite_path: str                       # env INTERNSHIP_WATCH_DB
            timeout: float = 15.0
            skip_network: bool = false
        """
        kw = dict(kwargs or {})

        url = str(kw.get("url") or "").strip() or None
        html_path = str(kw.get("html_path") or "").strip() or None
        provider = str(kw.get("provider") or DEFAULT_PROVIDER).strip().lower()

        proxy_template = kw.get("proxy_template")
        if proxy_template is None:
            proxy_template = os.getenv("INTERNSHIP_WATCH_PROXY", DEFAULT_PROXY_TEMPLATE)
        proxy_template = str(proxy_template).strip()

        sqlite_path = str(kw.get("sqlite_path") or os.getenv("INTERNSHIP_WATCH_DB") or DEFAULT_SQLITE_PATH)

        raw_timeout = kw.get("timeout")
        try:
            timeout = 15.0 if raw_timeout in (None, "") else float(raw_timeout)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"'timeout' must be a number (got {raw_timeout!r}).") from e

        settings = cls(
            url=url,
            html_path=html_path,
            provider=provider,
            proxy_template=proxy_template,
            sqlite_path=sqlite_path,
            timeout=timeout,
            skip_network=truthy(kw.get("skip_network")),
        )
        _validate_settings(settings)
        return settings


# -----------------------------
# Helpers
# -----------------------------
def _validate_settings(s: Settings) -> None:
    if s.provider not in extractors.all_kinds():
        known = ", ".join(sorted(extractors.all_kinds()))
        raise ConfigError(f"Unknown provider {s.provider!r}; expected one of: {known}.")
    if s.timeout <= 0:
        raise ConfigError("'timeout' must be > 0.")
    if not s.sqlite_path.strip():
        raise ConfigError("'sqlite_path' cannot be empty.")
    if s.html_path and not os.path.isfile(s.html_path):
        raise ConfigError(f"HTML file not found: {s.html_path}")
    if s.proxy_template and "{url}" not in s.proxy_template:
        raise ConfigError("'proxy_template' must contain a '{url}' placeholder.")
