from __future__ import annotations

from abc import ABC, abstractmethod

from ..models import ExtractResult


class ExtractorError(Exception):
    """Base exception for extractor failures."""


class BaseExtractor(ABC):
    """
    Abstract extractor interface.

    One instance turns one page of markup into postings.

    Contract:
      - extract(html, source=...) returns ONE ExtractResult with items in
        source document order.
      - Do NOT fetch, print, or touch the posting store.
      - Return *all* postings found; the caller replaces its stored list wholesale.
    """

    # Concrete subclasses MUST set this to a stable string, e.g. "wp_blocks", "ai"
    kind: str = ""

    @abstractmethod
    def extract(self, html: str, *, source: str = "") -> ExtractResult:
        """
        Extract postings from a full page of markup.

        Args:
            html: the page markup as text (fetched or pasted)
            source: label carried onto the result (usually the page URL)

        Returns:
            ExtractResult - possibly with zero items.
        """
        raise NotImplementedError
