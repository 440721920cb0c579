from __future__ import annotations

from collections.abc import Iterable

from . import utils
from .models import JobPosting

_HEADERS = ("Title", "Location", "Positions", "Student type", "Deadline", "Status")


def status_counts(postings: Iterable[JobPosting]) -> dict[str, int]:
    """Count postings per status, e.g. {"available": 4, "expired": 2}."""
    counts: dict[str, int] = {}
    for p in postings:
        counts[p.status] = counts.get(p.status, 0) + 1
    return counts


def build_table(postings: Iterable[JobPosting]) -> str:
    """
    Build one HTML table of postings in the order given.

    Every cell is escaped; the description (when present) goes on its own row
    under the posting.
    """
    head = "".join(f"<th>{h}</th>" for h in _HEADERS)
    rows: list[str] = []
    for p in postings:
        cells = (p.title or "(no title)", p.location, p.positions, p.student_type, p.deadline)
        cell_html = "".join(f"<td>{utils.esc(c)}</td>" for c in cells)
        status_html = f"<td class='status-{utils.esc(p.status)}'>{utils.esc(p.status)}</td>"
        rows.append(f"<tr id='{utils.esc(p.id)}'>{cell_html}{status_html}</tr>")
        if p.description:
            desc = utils.esc(p.description).replace("\n\n", "<br/><br/>")
            rows.append(f"<tr><td colspan='{len(_HEADERS)}'>{desc}</td></tr>")
    return (
        "<table border='1' cellspacing='0' cellpadding='6'>"
        f"<tr>{head}</tr>" + "".join(rows) + "</table>"
    )


def wrap_document(content_html: str, *, heading: str | None = None, intro: str | None = None) -> str:
    """
    Wrap the table in a minimal document structure with optional heading and summary line.
    """
    parts: list[str] = ["<div>"]
    if heading:
        parts.append(f"<h2>{utils.esc(heading)}</h2>")
    if intro:
        parts.append(f"<p>{utils.esc(intro)}</p>")
    parts.append(content_html)
    parts.append("</div>")
    return "\n".join(parts)
