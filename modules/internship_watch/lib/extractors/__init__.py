# internship_watch/extractors/__init__.py
from __future__ import annotations

# Importing the concrete extractors registers them.
from . import ai as _ai  # noqa: F401
from . import wp_blocks as _wp_blocks  # noqa: F401
from .base import BaseExtractor, ExtractorError
from .registry import all_kinds, get, register
from .wp_blocks import classify_status, extract_jobs_from_html

__all__ = [
    "BaseExtractor",
    "ExtractorError",
    "all_kinds",
    "classify_status",
    "extract_jobs_from_html",
    "get",
    "register",
]
