# ruff: noqa: E501
"""
LLM-backed extractor for pages that do not follow the block-heading shape.

Disabled unless INTERNSHIP_WATCH_ENABLE_LLM is truthy; uses the OpenAI facade
in ``..llm`` so tests can swap the chat client.
"""

from __future__ import annotations

import json
import logging
import os
import time
from typing import Any

from ..llm import OpenAIChat
from ..models import NOT_AVAILABLE, NOT_SPECIFIED, STATUS_AVAILABLE, ExtractResult, JobPosting
from ..utils import truthy
from .base import BaseExtractor, ExtractorError
from .registry import register

log = logging.getLogger(__name__)

ENABLE_ENV = "INTERNSHIP_WATCH_ENABLE_LLM"

# Markup beyond this many characters is dropped before prompting
MAX_HTML_CHARS = 30_000

_SYSTEM = (
    "You extract job and internship postings from raw HTML. "
    "Answer with a single JSON object and nothing else."
)

_USER_TEMPLATE = (
    "Analyze the following HTML content and extract a list of job or internship postings.\n"
    "Return a JSON object of the form {{\"jobs\": [...]}} where each job has the string keys: "
    "title, location, positions (number of openings), studentType (e.g. PhD, Masters), "
    "deadline (as written on the page), description (short).\n"
    "Use \"N/A\" for unknown positions, studentType or deadline and \"Not specified\" for an unknown location.\n\n"
    "HTML:\n{html}"
)

# JSON key -> (JobPosting field, sentinel)
_FIELD_MAP: tuple[tuple[str, str, str], ...] = (
    ("location", "location", NOT_SPECIFIED),
    ("positions", "positions", NOT_AVAILABLE),
    ("studentType", "student_type", NOT_AVAILABLE),
    ("deadline", "deadline", NOT_AVAILABLE),
    ("description", "description", ""),
)


def _clean(value: Any, default: str) -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def parse_ai_jobs(raw: str, *, stamp_ms: int | None = None) -> list[JobPosting]:
    """
    Turn the model's JSON answer into postings.
    Accepts {"jobs": [...]} or a bare list; raises ExtractorError on anything else.
    """
    try:
        data = json.loads(raw)
    except ValueError as e:
        preview = raw[:200].replace("\n", " ")
        raise ExtractorError(f"AI response is not JSON; body starts: {preview!r}") from e

    if isinstance(data, dict):
        data = data.get("jobs")
    if not isinstance(data, list):
        raise ExtractorError("AI response does not contain a 'jobs' list.")

    stamp = stamp_ms if stamp_ms is not None else int(time.time() * 1000)
    jobs: list[JobPosting] = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            continue
        title = _clean(item.get("title"), "")
        if not title:
            continue
        fields = {name: _clean(item.get(key), default) for key, name, default in _FIELD_MAP}
        jobs.append(
            JobPosting(
                id=f"ai-job-{stamp}-{index}",
                title=title,
                status=STATUS_AVAILABLE,
                **fields,
            )
        )
    return jobs


@register
class AiExtractor(BaseExtractor):
    """
    Ask an LLM to list the postings on an arbitrary page.
    Every posting comes back as 'available'; no deadline classification is applied.
    """

    kind = "ai"

    def __init__(self, chat: OpenAIChat | None = None) -> None:
        self._chat = chat or OpenAIChat()

    def extract(self, html: str, *, source: str = "") -> ExtractResult:
        if not truthy(os.getenv(ENABLE_ENV)):
            raise ExtractorError(f"AI extraction is disabled (set {ENABLE_ENV}=1).")

        snippet = (html or "")[:MAX_HTML_CHARS]
        try:
            raw = self._chat.chat(_SYSTEM, _USER_TEMPLATE.format(html=snippet), json_mode=True)
        except Exception as e:
            raise ExtractorError(f"AI extraction failed: {e!r}") from e

        items = parse_ai_jobs(raw)
        log.info("ai: extracted %d postings from %d chars", len(items), len(snippet))
        errors = [] if len(html or "") <= MAX_HTML_CHARS else [f"markup truncated to {MAX_HTML_CHARS} chars"]
        return ExtractResult(source=source or self.kind, items=items, errors=errors)
