# service/cli.py
"""
User-facing command-line entrypoints.

Subcommands
-----------
fetch [--url URL | --html-file PATH] [--provider KIND] [--print-html] [--json]
    - Runs one sourcing cycle via modules.internship_watch.main.run(...)
    - Replaces the stored posting list on success
    - Tells the user to save the page source and pass --html-file when the
      fetch or extraction comes back empty

list [--status STATUS] [--json]
    - Prints the stored postings (optionally one status only)

mark JOB_ID {applied,skipped}
    - Records a user decision on one stored posting

clear
    - Drops every stored posting

providers
    - Prints the registered extractor kinds
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
import time
from collections.abc import Iterable, Sequence
from datetime import datetime

from modules.internship_watch import main as _module
from modules.internship_watch.lib import db as _db
from modules.internship_watch.lib import extractors as _extractors
from modules.internship_watch.lib.config import DEFAULT_SQLITE_PATH, ConfigError
from modules.internship_watch.lib.models import ALL_STATUSES, USER_STATUSES
from service import logging_utils as L

LOG = logging.getLogger("service.cli")


# ----------------------------- Logging setup ---------------------------------
def _ensure_logging() -> None:
    """Initialize a reasonable logging setup if none exists yet."""
    root = logging.getLogger()
    if not root.handlers:
        level = os.getenv("LOG_LEVEL", "INFO").upper()
        logging.basicConfig(
            level=getattr(logging, level, logging.INFO),
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        )


# -------------------------- Utility / glue code ------------------------------
def _now_iso() -> str:
    return datetime.now().astimezone().isoformat()


def _db_path(args: argparse.Namespace) -> str:
    return args.db or os.getenv("INTERNSHIP_WATCH_DB") or DEFAULT_SQLITE_PATH


def _print_table(rows: Iterable[Sequence[str]], headers: Sequence[str]) -> None:
    """Very simple fixed-width table printer."""
    rows = [tuple(r) for r in rows]
    widths = [len(h) for h in headers]
    for r in rows:
        widths = [max(w, len(c)) for w, c in zip(widths, r)]
    sep = "+-" + "-+-".join("-" * w for w in widths) + "-+"
    print(sep)
    print("| " + " | ".join(h.ljust(w) for h, w in zip(headers, widths)) + " |")
    print(sep)
    for r in rows:
        print("| " + " | ".join(c.ljust(w) for c, w in zip(r, widths)) + " |")
    print(sep)


# ------------------------------ Subcommands ----------------------------------
def cmd_fetch(args: argparse.Namespace) -> int:
    start_time = time.monotonic()
    kwargs = {
        "url": args.url,
        "html_path": args.html_file,
        "provider": args.provider,
        "sqlite_path": args.db,
        "skip_network": args.skip_network,
    }
    kwargs = {k: v for k, v in kwargs.items() if v not in (None, False)}

    try:
        result = _module.run(**kwargs)
        L.write_activity_log({
            "ts": _now_iso(),
            "event": "cli_fetch",
            "kwargs": kwargs,
            "stored": result is not None,
            "duration_ms": int((time.monotonic() - start_time) * 1000),
        })
    except KeyboardInterrupt:
        return 130
    except ConfigError as e:
        print(f"FAILURE: {e}", file=sys.stderr)
        return 2
    except Exception as e:
        print(f"FAILURE: {e}", file=sys.stderr)
        L.write_error_log({
            "ts": _now_iso(),
            "where": "cli.fetch",
            "kwargs": kwargs,
            "error": repr(e),
            "duration_ms": int((time.monotonic() - start_time) * 1000),
        })
        return 1

    if result is None:
        if args.skip_network:
            print("DONE: Network skipped; stored postings unchanged.")
        else:
            print(
                "NO POSTINGS: Could not fetch or extract postings. "
                "Save the page source and re-run with --html-file PATH."
            )
        return 0

    html, meta = result
    if args.json:
        postings = _db.load_postings(_db_path(args))
        print(json.dumps([p.to_dict() for p in postings], indent=2, ensure_ascii=False))
    else:
        print(f"SUCCESS: {meta['message']}")
        if args.print_html:
            print("\n----- HTML OUTPUT -----\n")
            print(html)
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    try:
        postings = _db.load_postings(_db_path(args), status=args.status)
    except ValueError as e:
        print(f"FAILURE: {e}", file=sys.stderr)
        return 2

    if args.json:
        print(json.dumps([p.to_dict() for p in postings], indent=2, ensure_ascii=False))
        return 0
    if not postings:
        print("No postings stored.")
        return 0
    _print_table(
        ((p.id, p.title, p.location, p.deadline, p.status) for p in postings),
        headers=("ID", "TITLE", "LOCATION", "DEADLINE", "STATUS"),
    )
    return 0


def cmd_mark(args: argparse.Namespace) -> int:
    try:
        _db.set_status(_db_path(args), args.job_id, args.status)
    except KeyError as e:
        print(f"FAILURE: {e.args[0] if e.args else e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"FAILURE: {e}", file=sys.stderr)
        return 2
    L.write_activity_log({"ts": _now_iso(), "event": "cli_mark", "job_id": args.job_id, "status": args.status})
    print(f"OK: {args.job_id} marked {args.status}.")
    return 0


def cmd_clear(args: argparse.Namespace) -> int:
    removed = _db.clear_postings(_db_path(args))
    L.write_activity_log({"ts": _now_iso(), "event": "cli_clear", "removed": removed})
    print(f"OK: removed {removed} postings.")
    return 0


def cmd_providers(args: argparse.Namespace) -> int:
    for kind, cls in sorted(_extractors.all_kinds().items()):
        doc = (cls.__doc__ or "").strip().splitlines()
        print(f"{kind}\t{doc[0] if doc else ''}")
    return 0


# ------------------------------- Argparse ------------------------------------
def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="internship-watch",
        description="Extract, store and triage job postings from listing pages.",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    def _add_db(sp: argparse.ArgumentParser) -> None:
        sp.add_argument("--db", help="SQLite path (fallbacks to INTERNSHIP_WATCH_DB env or module default).")

    # fetch
    sp = sub.add_parser("fetch", help="Fetch/read a page, extract postings and store them.")
    src = sp.add_mutually_exclusive_group()
    src.add_argument("--url", help="Page to fetch (defaults to the last fetched URL).")
    src.add_argument("--html-file", help="Saved page source to extract from instead of fetching.")
    sp.add_argument("--provider", help="Extractor kind (see 'providers'); default wp_blocks.")
    sp.add_argument("--skip-network", action="store_true", help="Do everything except the HTTP fetch.")
    sp.add_argument("--print-html", action="store_true", help="Print the rendered HTML table.")
    sp.add_argument("--json", action="store_true", help="Print the stored postings as JSON.")
    _add_db(sp)
    sp.set_defaults(func=cmd_fetch)

    # list
    sp = sub.add_parser("list", help="Print stored postings.")
    sp.add_argument("--status", choices=sorted(ALL_STATUSES), help="Only postings with this status.")
    sp.add_argument("--json", action="store_true", help="Print as JSON.")
    _add_db(sp)
    sp.set_defaults(func=cmd_list)

    # mark
    sp = sub.add_parser("mark", help="Mark a stored posting applied or skipped.")
    sp.add_argument("job_id")
    sp.add_argument("status", choices=sorted(USER_STATUSES))
    _add_db(sp)
    sp.set_defaults(func=cmd_mark)

    # clear
    sp = sub.add_parser("clear", help="Remove all stored postings.")
    _add_db(sp)
    sp.set_defaults(func=cmd_clear)

    # providers
    sp = sub.add_parser("providers", help="List registered extractor kinds.")
    sp.set_defaults(func=cmd_providers)

    return p


# --------------------------------- Main --------------------------------------
def main(argv: Iterable[str] | None = None) -> int:
    _ensure_logging()
    parser = _build_parser()
    args = parser.parse_args(args=list(argv) if argv is not None else None)
    return args.func(args)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
