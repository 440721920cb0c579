# internship_watch/extractors/wp_blocks.py
"""
Block-heading extractor for WordPress-style listing pages.

Expected page shape (one posting per block):

    <h3 class="wp-block-heading">Data Science Intern</h3>
    <p><em>Remote, USA</em><br/>
       <strong>Positions</strong>: 3<br/>
       <strong>Type of student</strong>: Graduate<br/>
       <strong>Deadline</strong>: January 15, 2026</p>
    <p>First description paragraph.</p>
    <p>Second description paragraph.</p>
    <h3 class="wp-block-heading">Next posting</h3>

Anything that does not follow the shape degrades to sentinel values; this
module never raises on markup.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime

from bs4 import BeautifulSoup, NavigableString, Tag

from ..dates import is_past, parse_deadline
from ..models import (
    NOT_AVAILABLE,
    NOT_SPECIFIED,
    STATUS_AVAILABLE,
    STATUS_EXPIRED,
    ExtractResult,
    JobPosting,
)
from ..utils import slugify_title
from .base import BaseExtractor
from .registry import register

log = logging.getLogger(__name__)

HEADING_TAG = "h3"
HEADING_CLASS = "wp-block-heading"

# Ordered (label substring, JobPosting field) pairs. Every matching rule applies;
# a later <strong> with the same label overwrites an earlier one.
LABEL_RULES: tuple[tuple[str, str], ...] = (
    ("positions", "positions"),
    ("type of student", "student_type"),
    ("deadline", "deadline"),
)

# Keywords marking a non-date deadline as closed
EXPIRED_KEYWORDS: tuple[str, ...] = ("passed", "closed")

_MIN_TITLE_LEN = 3
_LEADING_COLON_RE = re.compile(r"^:\s*")


def extract_jobs_from_html(html: str | None, *, now: datetime | None = None) -> list[JobPosting]:
    """
    Parse a page of markup into postings, in document order.

    `now` pins the reference moment for deadline expiry (defaults to the
    current time).
    """
    soup = BeautifulSoup(html or "", "html.parser")
    jobs: list[JobPosting] = []

    for index, heading in enumerate(soup.select(f"{HEADING_TAG}.{HEADING_CLASS}")):
        title = heading.get_text().strip()
        if len(title) < _MIN_TITLE_LEN or "search" in title.lower():
            continue

        fields = {
            "location": NOT_SPECIFIED,
            "positions": NOT_AVAILABLE,
            "student_type": NOT_AVAILABLE,
            "deadline": NOT_AVAILABLE,
        }
        description = ""

        info = _next_element(heading)
        if _is_paragraph(info):
            fields.update(_read_metadata(info))
            description = _read_description(info)

        jobs.append(
            JobPosting(
                id=f"job-{index}-{slugify_title(title)}",
                title=title,
                description=description,
                status=classify_status(fields["deadline"], now=now),
                **fields,
            )
        )

    log.debug("wp_blocks: extracted %d postings", len(jobs))
    return jobs


def classify_status(deadline: str, *, now: datetime | None = None) -> str:
    """
    Two-tier expiry policy:
      1. a parseable date strictly in the past -> expired (future -> available)
      2. otherwise, "passed"/"closed" in the text -> expired, else available
    """
    if deadline == NOT_AVAILABLE:
        return STATUS_AVAILABLE

    when = parse_deadline(deadline)
    if when is not None:
        return STATUS_EXPIRED if is_past(when, now) else STATUS_AVAILABLE

    lowered = deadline.lower()
    if any(word in lowered for word in EXPIRED_KEYWORDS):
        return STATUS_EXPIRED
    return STATUS_AVAILABLE


def apply_label(fields: dict[str, str], label: str, content: str) -> None:
    """Route one `<strong>label</strong> content` pair through LABEL_RULES."""
    for needle, field_name in LABEL_RULES:
        if needle in label:
            fields[field_name] = content


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _next_element(node: Tag) -> Tag | None:
    """Next sibling that is an element (text and comment nodes are skipped)."""
    for sibling in node.next_siblings:
        if isinstance(sibling, Tag):
            return sibling
    return None


def _is_paragraph(node: object) -> bool:
    return isinstance(node, Tag) and node.name == "p"


def _has_heading_class(tag: Tag) -> bool:
    return HEADING_CLASS in (tag.get("class") or [])


def _node_text(node: object) -> str:
    if isinstance(node, Tag):
        return node.get_text()
    if isinstance(node, NavigableString):
        return str(node)
    return ""


def _read_metadata(info: Tag) -> dict[str, str]:
    out: dict[str, str] = {}

    em = info.find("em")
    if em is not None:
        location = em.get_text().strip()
        if location:
            out["location"] = location

    for strong in info.find_all("strong"):
        label = strong.get_text().lower()
        content = _LEADING_COLON_RE.sub("", _node_text(strong.next_sibling).strip())
        apply_label(out, label, content)

    return out


def _read_description(info: Tag) -> str:
    parts: list[str] = []
    current = _next_element(info)
    while _is_paragraph(current) and not _has_heading_class(current):
        parts.append(current.get_text().strip() + "\n\n")
        current = _next_element(current)
    return "".join(parts).strip()


@register
class WpBlocksExtractor(BaseExtractor):
    """
    Heuristic extractor for `h3.wp-block-heading` listing pages (the default provider).
    """

    kind = "wp_blocks"

    def extract(self, html: str, *, source: str = "") -> ExtractResult:
        return ExtractResult(source=source or self.kind, items=extract_jobs_from_html(html))
