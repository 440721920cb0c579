from __future__ import annotations

from typing import Any

from .lib.config import Settings
from .lib.engine import run_once as _run_engine
from .lib.logging_bridge import activity as log_activity


def run(**kwargs: Any) -> tuple[str, dict] | None:
    """
    Entry point for the 'internship_watch' module.

    Accepts kwargs (from the CLI or a caller), including:
      url: Optional[str]            # page to fetch through the proxy
      html_path: Optional[str]      # saved/pasted page; wins over url
      provider: str = "wp_blocks"   # or "ai"
      proxy_template: Optional[str]
      sqlite_path: Optional[str]
      timeout: float = 15.0
      skip_network: bool = False

    Returns:
      - None (nothing stored: skipped, or manual input is needed), or
      - (html: str, meta: dict) describing the freshly stored list.
    """
    settings = Settings.from_env_and_kwargs(kwargs)

    log_activity({
        "component": "internship_watch.main",
        "op": "start",
        "provider": settings.provider,
        "url": settings.url,
        "html_path": settings.html_path,
        "skip_network": settings.skip_network,
    })

    return _run_engine(settings)
