from __future__ import annotations

import html
import re
from datetime import datetime, timezone
from typing import Any

_WS_RE = re.compile(r"\s+")


def esc(s: str | None) -> str:
    """
    Escape text for HTML contexts (titles, cells). Do NOT wrap or add tags.
    """
    if s is None:
        return ""
    return html.escape(str(s), quote=True)


def truthy(v: Any) -> bool:
    """
    Normalize common truthy inputs from env/kwargs.
    Accepts bools or strings like: '1', 'true', 'yes', 'on'.
    """
    if isinstance(v, bool):
        return v
    if v is None:
        return False
    if isinstance(v, (int, float)):
        return v != 0
    s = str(v).strip().lower()
    return s in {"1", "true", "yes", "on", "y", "t"}


def now_iso() -> str:
    """
    UTC ISO-8601 timestamp with 'Z' suffix.
    """
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def slugify_title(title: str) -> str:
    """Lower-case and collapse every whitespace run to a single hyphen."""
    return _WS_RE.sub("-", title).lower()
