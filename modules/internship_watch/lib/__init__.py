# modules/internship_watch/lib/__init__.py
from __future__ import annotations

# Re-export commonly-used types for convenience
from .config import ConfigError, Settings
from .engine import run_once
from .extractors import ExtractorError, classify_status, extract_jobs_from_html
from .fetch import FetchError
from .models import ExtractResult, JobPosting

__all__ = [
    "ConfigError",
    "ExtractResult",
    "ExtractorError",
    "FetchError",
    "JobPosting",
    "Settings",
    "classify_status",
    "extract_jobs_from_html",
    "run_once",
]
