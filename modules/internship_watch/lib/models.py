from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

# Sentinels used when a field cannot be located in the markup
NOT_SPECIFIED = "Not specified"
NOT_AVAILABLE = "N/A"

STATUS_AVAILABLE = "available"
STATUS_EXPIRED = "expired"
STATUS_APPLIED = "applied"
STATUS_SKIPPED = "skipped"

ALL_STATUSES = frozenset({STATUS_AVAILABLE, STATUS_EXPIRED, STATUS_APPLIED, STATUS_SKIPPED})

# Statuses only the user assigns (never produced by an extractor)
USER_STATUSES = frozenset({STATUS_APPLIED, STATUS_SKIPPED})


@dataclass(frozen=True)
class JobPosting:
    """
    A single job/internship posting as produced by an extractor.

    The id is unique within one extraction run only; every run replaces the
    stored list wholesale.
    """

    id: str
    title: str
    location: str = NOT_SPECIFIED
    positions: str = NOT_AVAILABLE
    student_type: str = NOT_AVAILABLE
    deadline: str = NOT_AVAILABLE
    description: str = ""
    status: str = STATUS_AVAILABLE

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ExtractResult:
    """
    Result bundle produced by a single extractor call.
    - items: postings in source document order.
    - errors: any non-fatal issues the extractor decided to surface.
    """

    source: str
    items: list[JobPosting] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
