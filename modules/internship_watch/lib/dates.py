from __future__ import annotations

from datetime import datetime, timezone

from dateutil import parser as _date_parser

# dateutil fills missing date parts from `default`; parsing against two
# defaults that differ in year, month and day exposes any part the text left out.
_FILL_DEFAULTS = (datetime(2001, 1, 1), datetime(2002, 2, 2))


def parse_deadline(text: str | None) -> datetime | None:
    """
    Interpret free text ("December 1, 2025", "2026-01-15") as a point in time.

    The text must name a full calendar date. Partial values such as "May",
    "2nd", "Monday" or "5 PM" return None, as does anything unrecognizable.
    Never raises.
    """
    if not text or not text.strip():
        return None
    try:
        first, second = (_date_parser.parse(text.strip(), default=d) for d in _FILL_DEFAULTS)
    except (ValueError, OverflowError, TypeError):
        return None
    if first.date() != second.date():
        return None
    return first


def is_past(when: datetime, now: datetime | None = None) -> bool:
    """True when `when` is strictly before `now` (defaults to the current moment)."""
    if when.tzinfo is not None:
        ref = now or datetime.now(timezone.utc)
        if ref.tzinfo is None:
            ref = ref.astimezone()
        return when < ref
    ref = now or datetime.now()
    if ref.tzinfo is not None:
        ref = ref.astimezone().replace(tzinfo=None)
    return when < ref
