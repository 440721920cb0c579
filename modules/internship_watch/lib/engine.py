"""
Engine for one sourcing cycle: get markup, extract postings, store, render.

Features:
  - Markup from a URL (through the proxy) or from a saved/pasted HTML file
  - Remembers the last fetched URL between runs
  - Wholesale replacement of the stored posting list
  - Fetch/extract failures end in a logged `needs_manual_input` outcome
  - Dependency injection for testability (`get_extractor`, `fetch_html`)
"""

from __future__ import annotations

import time
from collections.abc import Callable

from . import db, logging_bridge, render
from .config import Settings
from .extractors.base import BaseExtractor, ExtractorError
from .fetch import FetchError, fetch_page_html
from .models import STATUS_AVAILABLE, ExtractResult

LAST_URL_KEY = "last_fetch_url"

_COMPONENT = "internship_watch.engine"


# =============================================================================
# DEFAULT LOOKUPS (PRODUCTION)
# =============================================================================
def _default_get_extractor(kind: str) -> type[BaseExtractor]:
    from .extractors.registry import get as get_extractor_class

    return get_extractor_class(kind)


def _default_fetch(url: str, settings: Settings) -> str:
    return fetch_page_html(url, proxy_template=settings.proxy_template, timeout=settings.timeout)


# =============================================================================
# MAIN ORCHESTRATOR
# =============================================================================
def run_once(
    settings: Settings,
    get_extractor: Callable[[str], type[BaseExtractor]] | None = None,
    fetch_html: Callable[[str, Settings], str] | None = None,
) -> tuple[str, dict] | None:
    """
    Run one cycle of fetch/read, extraction, storage and rendering.

    Args:
        settings: source, provider and storage configuration.
        get_extractor: Optional override to inject extractor classes (for testing).
        fetch_html: Optional override for page retrieval (for testing).

    Returns:
        (html, meta_dict) when a posting list was stored, else None
        (skipped, or manual input is needed).
    """
    start_ns = time.perf_counter_ns()
    get_extractor_func = get_extractor or _default_get_extractor
    fetch_func = fetch_html or _default_fetch
    from_file = bool(settings.html_path)

    # -------------------------------------------------------------------------
    # MARKUP SOURCE
    # -------------------------------------------------------------------------
    if from_file:
        source = str(settings.html_path)
        with open(source, encoding="utf-8", errors="replace") as f:
            markup = f.read()
    else:
        source = settings.url or db.get_setting(settings.sqlite_path, LAST_URL_KEY) or settings.default_url or ""
        if not source:
            _needs_manual_input(settings, source, reason="no_url")
            return None

        if settings.skip_network:
            logging_bridge.activity({
                "component": _COMPONENT,
                "op": "skipped_fetch",
                "url": source,
                "reason": "skip_network",
            })
            return None

        db.set_setting(settings.sqlite_path, LAST_URL_KEY, source)
        t0 = time.perf_counter_ns()
        try:
            markup = fetch_func(source, settings)
        except FetchError as e:
            logging_bridge.error({
                "component": _COMPONENT,
                "op": "fetch",
                "url": source,
                "error": repr(e),
            })
            _needs_manual_input(settings, source, reason="fetch_failed")
            return None
        fetch_us = int((time.perf_counter_ns() - t0) // 1000)

    # -------------------------------------------------------------------------
    # EXTRACT
    # -------------------------------------------------------------------------
    t0 = time.perf_counter_ns()
    try:
        extractor = get_extractor_func(settings.provider)()
        result: ExtractResult = extractor.extract(markup, source=source)
    except ExtractorError as e:
        logging_bridge.error({
            "component": _COMPONENT,
            "op": "extract",
            "provider": settings.provider,
            "source": source,
            "error": repr(e),
        })
        _needs_manual_input(settings, source, reason="extract_failed")
        return None
    extract_us = int((time.perf_counter_ns() - t0) // 1000)

    # A fetched page with nothing on it usually means the proxy served a
    # block page; a pasted page is taken at face value.
    if not result.items and not from_file:
        _needs_manual_input(settings, source, reason="no_postings")
        return None

    # -------------------------------------------------------------------------
    # STORE (wholesale replacement)
    # -------------------------------------------------------------------------
    db.replace_postings(settings.sqlite_path, result.items)

    # -------------------------------------------------------------------------
    # RENDER + META
    # -------------------------------------------------------------------------
    by_status = render.status_counts(result.items)
    total = len(result.items)
    msg = f"{total} postings from {source} ({by_status.get(STATUS_AVAILABLE, 0)} available)"
    html = render.wrap_document(render.build_table(result.items), heading="Internship Watch", intro=msg)

    total_us = int((time.perf_counter_ns() - start_ns) // 1000)
    durations_us = {"extract": extract_us, "_total_us": total_us}
    if not from_file:
        durations_us["fetch"] = fetch_us

    meta = {
        "message": msg,
        "source": source,
        "provider": settings.provider,
        "from_file": from_file,
        "total": total,
        "by_status": by_status,
        "errors": list(result.errors),
        "durations_us": durations_us,
    }

    logging_bridge.activity({
        "component": _COMPONENT,
        "op": "stored",
        "source": source,
        "provider": settings.provider,
        "total": total,
        "by_status": by_status,
        "errors": list(result.errors),
        "durations_us": durations_us,
    })

    return (html, meta)


# =============================================================================
# HELPER: log the "paste the page source instead" outcome
# =============================================================================
def _needs_manual_input(settings: Settings, source: str, *, reason: str) -> None:
    logging_bridge.activity({
        "component": _COMPONENT,
        "op": "needs_manual_input",
        "provider": settings.provider,
        "source": source,
        "reason": reason,
    })
