# tests/test_internship_watch.py
import json
import os

import pytest

from modules.internship_watch import main as iw_main
from modules.internship_watch.lib import config as iw_config
from modules.internship_watch.lib import db, engine, models, render
from modules.internship_watch.lib.fetch import FetchError


def _never_fetch(url, settings):
    raise AssertionError(f"fetch should not be called (url={url!r})")


def _read_activity(op):
    log_dir = os.environ["LOG_DIR"]
    records = []
    for name in os.listdir(log_dir):
        if name.startswith("activity-test"):
            with open(os.path.join(log_dir, name), encoding="utf-8") as f:
                records.extend(json.loads(line) for line in f if line.strip())
    return [r for r in records if r.get("op") == op]


# ----------------------------------------------------------------------
# 1. Fetched page with postings → stored wholesale, HTML + meta returned
# ----------------------------------------------------------------------
def test_fetched_page_is_extracted_and_stored(fresh_settings, sample_html):
    seen = []

    def fake_fetch(url, settings):
        seen.append(url)
        return sample_html

    html, meta = engine.run_once(fresh_settings, fetch_html=fake_fetch)

    assert seen == ["https://example.com/internships/"]
    assert meta["total"] == 3
    assert meta["by_status"] == {"expired": 2, "available": 1}
    assert "Data Science Intern" in html
    titles = [p.title for p in db.load_postings(fresh_settings.sqlite_path)]
    assert titles == ["Data Science Intern", "Biostatistics Intern", "Survey Methods Intern"]
    assert db.get_setting(fresh_settings.sqlite_path, engine.LAST_URL_KEY) == "https://example.com/internships/"


# ----------------------------------------------------------------------
# 2. Previous list (including user decisions) is replaced, not merged
# ----------------------------------------------------------------------
def test_rerun_replaces_previous_list(fresh_settings, stub_extractor, sample_html):
    db.replace_postings(fresh_settings.sqlite_path, [models.JobPosting(id="old", title="Old Posting")])
    db.set_status(fresh_settings.sqlite_path, "old", models.STATUS_APPLIED)

    engine.run_once(fresh_settings, get_extractor=lambda kind: stub_extractor, fetch_html=lambda u, s: sample_html)

    stored = db.load_postings(fresh_settings.sqlite_path)
    assert [p.id for p in stored] == ["job-0-alpha", "job-1-beta"]


# ----------------------------------------------------------------------
# 3. Fetch failure → manual input needed, stored list untouched
# ----------------------------------------------------------------------
def test_fetch_failure_needs_manual_input(fresh_settings):
    db.replace_postings(fresh_settings.sqlite_path, [models.JobPosting(id="keep", title="Keep Me")])

    def failing_fetch(url, settings):
        raise FetchError("proxy down")

    assert engine.run_once(fresh_settings, fetch_html=failing_fetch) is None
    assert [p.id for p in db.load_postings(fresh_settings.sqlite_path)] == ["keep"]
    assert _read_activity("needs_manual_input")[-1]["reason"] == "fetch_failed"


# ----------------------------------------------------------------------
# 4. Fetched page with zero postings → manual input needed
# ----------------------------------------------------------------------
def test_empty_fetch_result_needs_manual_input(fresh_settings, empty_extractor):
    db.replace_postings(fresh_settings.sqlite_path, [models.JobPosting(id="keep", title="Keep Me")])

    result = engine.run_once(
        fresh_settings,
        get_extractor=lambda kind: empty_extractor,
        fetch_html=lambda u, s: "<html></html>",
    )

    assert result is None
    assert db.count_rows(fresh_settings.sqlite_path) == 1
    assert _read_activity("needs_manual_input")[-1]["reason"] == "no_postings"


# ----------------------------------------------------------------------
# 5. Manual (file) source: no fetch, empty result still replaces the list
# ----------------------------------------------------------------------
def test_html_file_source_skips_fetch(db_path, sample_html_file):
    settings = iw_config.Settings.from_env_and_kwargs({"html_path": str(sample_html_file), "sqlite_path": db_path})

    html, meta = engine.run_once(settings, fetch_html=_never_fetch)

    assert meta["from_file"] is True
    assert meta["source"] == str(sample_html_file)
    assert "fetch" not in meta["durations_us"]
    assert db.count_rows(db_path) == 3


def test_html_file_with_no_postings_clears_list(db_path, tmp_path, empty_extractor):
    page = tmp_path / "empty.html"
    page.write_text("<p>nothing here</p>", encoding="utf-8")
    db.replace_postings(db_path, [models.JobPosting(id="old", title="Old Posting")])
    settings = iw_config.Settings.from_env_and_kwargs({"html_path": str(page), "sqlite_path": db_path})

    html, meta = engine.run_once(settings, get_extractor=lambda kind: empty_extractor)

    assert meta["total"] == 0
    assert db.count_rows(db_path) == 0


# ----------------------------------------------------------------------
# 6. URL resolution: explicit → remembered → provider default
# ----------------------------------------------------------------------
def test_remembered_url_then_provider_default(db_path, sample_html):
    seen = []

    def fake_fetch(url, settings):
        seen.append(url)
        return sample_html

    settings = iw_config.Settings.from_env_and_kwargs({"sqlite_path": db_path})
    engine.run_once(settings, fetch_html=fake_fetch)
    assert seen == [iw_config.PROVIDER_DEFAULT_URLS["wp_blocks"]]

    db.set_setting(db_path, engine.LAST_URL_KEY, "https://remembered.example/")
    engine.run_once(settings, fetch_html=fake_fetch)
    assert seen[-1] == "https://remembered.example/"


def test_no_url_for_ai_provider_needs_manual_input(db_path):
    settings = iw_config.Settings.from_env_and_kwargs({"sqlite_path": db_path, "provider": "ai"})
    assert engine.run_once(settings, fetch_html=_never_fetch) is None
    assert _read_activity("needs_manual_input")[-1]["reason"] == "no_url"


# ----------------------------------------------------------------------
# 7. skip_network=True → no fetch, no DB writes
# ----------------------------------------------------------------------
def test_skip_network_skips_fetch(db_path):
    settings = iw_config.Settings.from_env_and_kwargs({
        "url": "https://example.com/",
        "sqlite_path": db_path,
        "skip_network": True,
    })
    assert engine.run_once(settings, fetch_html=_never_fetch) is None
    assert not os.path.exists(db_path)


# ----------------------------------------------------------------------
# 8. Extractor failure (AI disabled) → manual input needed
# ----------------------------------------------------------------------
def test_disabled_ai_provider_needs_manual_input(db_path, sample_html):
    settings = iw_config.Settings.from_env_and_kwargs({
        "url": "https://example.com/",
        "sqlite_path": db_path,
        "provider": "ai",
    })
    assert engine.run_once(settings, fetch_html=lambda u, s: sample_html) is None
    assert _read_activity("needs_manual_input")[-1]["reason"] == "extract_failed"
    assert db.count_rows(db_path) == 0


# ----------------------------------------------------------------------
# 9. Module entry point builds settings from kwargs
# ----------------------------------------------------------------------
def test_module_run_with_html_file(db_path, sample_html_file):
    html, meta = iw_main.run(html_path=str(sample_html_file), sqlite_path=db_path)
    assert meta["provider"] == "wp_blocks"
    assert meta["total"] == 3
    assert _read_activity("start")


def test_module_run_rejects_bad_provider(db_path):
    with pytest.raises(iw_config.ConfigError):
        iw_main.run(provider="linkedin", sqlite_path=db_path)


# ----------------------------------------------------------------------
# 10. Render helper is safe (XSS)
# ----------------------------------------------------------------------
def test_render_build_table_escapes_html():
    postings = [
        models.JobPosting(
            id="job-0-x",
            title="Senior <script>alert(1)</script>",
            location="R&D",
            description="line one\n\nline <b>two</b>",
        )
    ]
    html = render.build_table(postings)
    assert "Senior &lt;script&gt;alert(1)&lt;/script&gt;" in html
    assert "R&amp;D" in html
    assert "line one<br/><br/>line &lt;b&gt;two&lt;/b&gt;" in html
    assert "<script>" not in html


def test_render_wrap_document_and_counts():
    postings = [
        models.JobPosting(id="a", title="A"),
        models.JobPosting(id="b", title="B", status=models.STATUS_EXPIRED),
        models.JobPosting(id="c", title="C"),
    ]
    assert render.status_counts(postings) == {"available": 2, "expired": 1}
    doc = render.wrap_document("<table></table>", heading="H & co", intro="3 postings")
    assert doc.startswith("<div>")
    assert "<h2>H &amp; co</h2>" in doc
    assert "<p>3 postings</p>" in doc
