from __future__ import annotations

import contextlib
import os
import sqlite3
from collections.abc import Iterable

from .logging_bridge import error as log_error
from .models import ALL_STATUSES, USER_STATUSES, JobPosting
from .utils import now_iso

_COLUMNS = ("id", "title", "location", "positions", "student_type", "deadline", "description", "status")

# ---- Public API -------------------------------------------------------------


def init_db(sqlite_path: str) -> None:
    """
    Ensure the SQLite database and schema exist.
    Safe to call multiple times.
    """
    _ensure_dir(sqlite_path)
    with contextlib.closing(_connect(sqlite_path)) as conn:
        _apply_pragmas(conn)
        _ensure_schema(conn)


def replace_postings(sqlite_path: str, postings: Iterable[JobPosting]) -> int:
    """
    Replace the stored posting list wholesale (no merge, no dedupe across runs).

    Source order is kept via the `position` column.
    Returns the number of rows written.
    """
    init_db(sqlite_path)
    ts = now_iso()
    written = 0

    try:
        with contextlib.closing(_connect(sqlite_path)) as conn:
            _apply_pragmas(conn)
            cur = conn.cursor()
            cur.execute("BEGIN IMMEDIATE")
            try:
                cur.execute("DELETE FROM postings")
                for position, p in enumerate(postings):
                    cur.execute(
                        """
                        INSERT INTO postings
                          (position, id, title, location, positions, student_type,
                           deadline, description, status, extracted_utc)
                        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                        """,
                        (
                            position,
                            p.id,
                            p.title,
                            p.location,
                            p.positions,
                            p.student_type,
                            p.deadline,
                            p.description,
                            p.status,
                            ts,
                        ),
                    )
                    written += 1
                conn.commit()
            except Exception:
                conn.rollback()
                raise
    except Exception as e:
        log_error({
            "component": "internship_watch.db",
            "op": "replace_postings",
            "sqlite_path": sqlite_path,
            "error": repr(e),
        })
        raise

    return written


def load_postings(sqlite_path: str, *, status: str | None = None) -> list[JobPosting]:
    """
    Return the stored postings in source order, optionally filtered by status.
    Raises ValueError for an unknown status.
    """
    if status is not None and status not in ALL_STATUSES:
        raise ValueError(f"Unknown status {status!r}; expected one of {sorted(ALL_STATUSES)}.")
    if not os.path.exists(sqlite_path):
        return []

    cols = ", ".join(_COLUMNS)
    with contextlib.closing(_connect(sqlite_path)) as conn:
        _apply_pragmas(conn)
        _ensure_schema(conn)
        if status is None:
            rows = conn.execute(f"SELECT {cols} FROM postings ORDER BY position").fetchall()
        else:
            rows = conn.execute(
                f"SELECT {cols} FROM postings WHERE status = ? ORDER BY position", (status,)
            ).fetchall()
    return [JobPosting(**dict(zip(_COLUMNS, row))) for row in rows]


def set_status(sqlite_path: str, job_id: str, status: str) -> None:
    """
    Record a user decision on one posting ('applied' or 'skipped').

    Raises:
        ValueError: status is not a user-assignable status
        KeyError: no stored posting has this id
    """
    if status not in USER_STATUSES:
        raise ValueError(f"Status {status!r} cannot be set by hand; use one of {sorted(USER_STATUSES)}.")
    init_db(sqlite_path)

    try:
        with contextlib.closing(_connect(sqlite_path)) as conn:
            _apply_pragmas(conn)
            cur = conn.execute("UPDATE postings SET status = ? WHERE id = ?", (status, job_id))
            updated = cur.rowcount
    except sqlite3.Error as e:
        log_error({
            "component": "internship_watch.db",
            "op": "set_status",
            "sqlite_path": sqlite_path,
            "job_id": job_id,
            "error": repr(e),
        })
        raise

    if updated == 0:
        raise KeyError(f"No stored posting with id {job_id!r}.")


def clear_postings(sqlite_path: str) -> int:
    """Drop every stored posting; returns how many were removed."""
    if not os.path.exists(sqlite_path):
        return 0
    with contextlib.closing(_connect(sqlite_path)) as conn:
        _apply_pragmas(conn)
        _ensure_schema(conn)
        cur = conn.execute("DELETE FROM postings")
        return int(cur.rowcount or 0)


def get_setting(sqlite_path: str, key: str, default: str | None = None) -> str | None:
    """Read one value from the key/value table (e.g. 'last_fetch_url')."""
    if not os.path.exists(sqlite_path):
        return default
    with contextlib.closing(_connect(sqlite_path)) as conn:
        _apply_pragmas(conn)
        _ensure_schema(conn)
        row = conn.execute("SELECT value FROM settings WHERE key = ?", (key,)).fetchone()
    return row[0] if row else default


def set_setting(sqlite_path: str, key: str, value: str) -> None:
    init_db(sqlite_path)
    with contextlib.closing(_connect(sqlite_path)) as conn:
        _apply_pragmas(conn)
        conn.execute(
            "INSERT INTO settings (key, value) VALUES (?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
            (key, value),
        )


# ---- Nice-to-have helpers for tests & diagnostics --------------------------


def count_rows(sqlite_path: str) -> int:
    """Return total rows in postings table; 0 if DB missing/empty."""
    if not os.path.exists(sqlite_path):
        return 0
    with contextlib.closing(_connect(sqlite_path)) as conn:
        _apply_pragmas(conn)
        _ensure_schema(conn)
        (n,) = conn.execute("SELECT COUNT(*) FROM postings").fetchone()
    return int(n or 0)


def reset_db(sqlite_path: str) -> None:
    """
    Remove the DB file entirely (for pytest fixtures).
    Safe if it doesn't exist.
    """
    for suffix in ("", "-wal", "-shm"):
        with contextlib.suppress(FileNotFoundError):
            os.remove(sqlite_path + suffix)


# ---- Internal utilities -----------------------------------------------------


def _ensure_dir(sqlite_path: str) -> None:
    d = os.path.dirname(os.path.abspath(sqlite_path)) or "."
    os.makedirs(d, exist_ok=True)


def _connect(sqlite_path: str) -> sqlite3.Connection:
    # isolation_level=None gives autocommit mode; transactions are managed explicitly.
    return sqlite3.connect(sqlite_path, timeout=30.0, isolation_level=None)


def _apply_pragmas(conn: sqlite3.Connection) -> None:
    conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute("PRAGMA synchronous=NORMAL;")
    conn.execute("PRAGMA temp_store=MEMORY;")


def _ensure_schema(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS postings (
          position     INTEGER NOT NULL,
          id           TEXT PRIMARY KEY,
          title        TEXT NOT NULL,
          location     TEXT NOT NULL,
          positions    TEXT NOT NULL,
          student_type TEXT NOT NULL,
          deadline     TEXT NOT NULL,
          description  TEXT NOT NULL,
          status       TEXT NOT NULL,
          extracted_utc TEXT NOT NULL
        );
        """
    )
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS settings (
          key   TEXT PRIMARY KEY,
          value TEXT NOT NULL
        );
        """
    )
