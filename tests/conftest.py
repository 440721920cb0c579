# tests/conftest.py
import os
import pathlib
import tempfile

import pytest

from modules.internship_watch.lib import config as iw_config
from modules.internship_watch.lib import models
from modules.internship_watch.lib.extractors.base import BaseExtractor

SAMPLE_HTML = """
<html><body>
<nav><h3 class="wp-block-heading">Search</h3></nav>
<h3 class="wp-block-heading">Data Science Intern</h3>
<p><em>Remote, USA</em><br/>
  <strong>Positions</strong>: 3<br/>
  <strong>Type of student</strong>: Graduate<br/>
  <strong>Deadline</strong>: January 1, 2020</p>
<p>Work on forecasting models.</p>
<p>Mentorship included.</p>
<h3 class="wp-block-heading">Biostatistics Intern</h3>
<p><em>Boston, MA</em><br/>
  <strong>Positions:</strong> 1<br/>
  <strong>Deadline</strong>: Rolling</p>
<p>Clinical trial support.</p>
<div class="ad">Sponsored</div>
<p>Not part of the posting.</p>
<h3 class="wp-block-heading">Survey Methods Intern</h3>
<p><strong>Deadline</strong>: Applications Closed</p>
</body></html>
"""


# ---------------------------------------------------------------------
# Live tests are opt-in: use --live or RUN_LIVE_TESTS=1
# ---------------------------------------------------------------------
def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--live",
        action="store_true",
        default=False,
        help="Run tests marked as 'live' (network calls or external services).",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "live: marks tests that perform live network calls or hit external services (skipped by default).",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    run_live = config.getoption("--live") or os.getenv("RUN_LIVE_TESTS") == "1"
    if run_live:
        return
    skip_live = pytest.mark.skip(reason="live tests disabled (use --live or RUN_LIVE_TESTS=1)")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


# ---------------------------------------------------------------------
# Test-wide env defaults (autouse, function-scoped)
# ---------------------------------------------------------------------
@pytest.fixture(autouse=True)
def _env_defaults(monkeypatch):
    # Write logs to a throwaway dir so real logs stay clean (per test)
    monkeypatch.setenv("LOG_DIR", tempfile.mkdtemp(prefix="iw-pytest-logs-"))
    monkeypatch.setenv("ACTIVITY_LOG_PREFIX", "activity-test")
    monkeypatch.setenv("ERROR_LOG_PREFIX", "error-test")
    monkeypatch.delenv("INTERNSHIP_WATCH_DB", raising=False)
    monkeypatch.delenv("INTERNSHIP_WATCH_PROXY", raising=False)
    yield


@pytest.fixture(autouse=True)
def _llm_default_off_for_unit_tests(monkeypatch, request):
    """Force LLM off unless explicitly running live tests."""
    if not request.config.getoption("--live"):
        monkeypatch.setenv("INTERNSHIP_WATCH_ENABLE_LLM", "0")
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)


@pytest.fixture
def sample_html() -> str:
    return SAMPLE_HTML


@pytest.fixture
def sample_html_file(tmp_path: pathlib.Path) -> pathlib.Path:
    path = tmp_path / "listing.html"
    path.write_text(SAMPLE_HTML, encoding="utf-8")
    return path


@pytest.fixture
def db_path(tmp_path: pathlib.Path) -> str:
    return str(tmp_path / "internship_watch.db")


@pytest.fixture
def fresh_settings(db_path):
    """A brand-new URL-sourced Settings instance per test, backed by a temp DB."""
    return iw_config.Settings.from_env_and_kwargs({
        "url": "https://example.com/internships/",
        "sqlite_path": db_path,
    })


@pytest.fixture
def stub_extractor():
    """Extractor returning two fixed postings regardless of markup."""

    class Stub(BaseExtractor):
        kind = "stub"

        def extract(self, html, *, source=""):
            return models.ExtractResult(
                source=source,
                items=[
                    models.JobPosting(id="job-0-alpha", title="Alpha"),
                    models.JobPosting(id="job-1-beta", title="Beta", status=models.STATUS_EXPIRED),
                ],
            )

    return Stub


@pytest.fixture
def empty_extractor():
    class Empty(BaseExtractor):
        kind = "empty"

        def extract(self, html, *, source=""):
            return models.ExtractResult(source=source)

    return Empty
