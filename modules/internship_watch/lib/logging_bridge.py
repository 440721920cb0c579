from __future__ import annotations

import copy
import logging
from typing import Any

from service import logging_utils as _writer

# Keys that should be redacted from structured logs
_REDACT_KEYS = {
    "password",
    "app_password",
    "token",
    "apikey",
    "api_key",
    "secret",
    "authorization",
    "auth",
    "bearer",
}


def _redact_record(record: dict[str, Any]) -> dict[str, Any]:
    """
    Shallow-copy record and redact obvious secret-like fields at top level.
    The JSONL writer applies a deep pass on top of this.
    """
    redacted = copy.copy(record)
    for k in list(redacted.keys()):
        lk = str(k).lower()
        if lk in _REDACT_KEYS or lk.startswith("smtp_") or lk.endswith("_secret"):
            redacted[k] = "***REDACTED***"
    return redacted


def activity(record: dict[str, Any]) -> None:
    """
    Write an activity record through service.logging_utils.
    Falls back to stdlib logging as structured info if the writer fails.
    """
    payload = _redact_record(record)
    try:
        _writer.write_activity_log(payload)
        return
    except (OSError, TypeError, ValueError):
        logging.getLogger("internship_watch.activity").debug("activity log write failed", exc_info=True)
    logging.getLogger("internship_watch.activity").info(payload)


def error(record: dict[str, Any]) -> None:
    """
    Write an error record through service.logging_utils.
    Falls back to stdlib logging as structured error if the writer fails.
    """
    payload = _redact_record(record)
    try:
        _writer.write_error_log(payload)
        return
    except (OSError, TypeError, ValueError):
        logging.getLogger("internship_watch.error").debug("error log write failed", exc_info=True)
    logging.getLogger("internship_watch.error").error(payload)
