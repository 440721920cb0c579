from __future__ import annotations

import logging
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

log = logging.getLogger(__name__)

DEFAULT_PROXY_TEMPLATE = "https://api.allorigins.win/get?url={url}"
USER_AGENT = "Mozilla/5.0 (X11; Linux x86_64) internship-watch/0.1"


class FetchError(RuntimeError):
    """Raised when a page cannot be retrieved; callers fall back to manual input."""


def build_session() -> requests.Session:
    """Session that retries idempotent GETs on throttling and gateway errors."""
    session = requests.Session()
    session.headers["User-Agent"] = USER_AGENT
    retry = Retry(
        total=3,
        backoff_factor=0.5,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=frozenset(["GET"]),
        raise_on_status=False,
    )
    session.mount("https://", HTTPAdapter(max_retries=retry))
    session.mount("http://", HTTPAdapter(max_retries=retry))
    return session


def proxied_url(url: str, proxy_template: str) -> str:
    """Fill the proxy template with the percent-encoded target URL."""
    return proxy_template.format(url=quote(url, safe=""))


def fetch_page_html(
    url: str,
    *,
    proxy_template: str = DEFAULT_PROXY_TEMPLATE,
    session: requests.Session | None = None,
    timeout: float = 15.0,
) -> str:
    """
    Retrieve the markup of `url`.

    With a proxy template the proxy is expected to answer with JSON carrying
    the page in a `contents` field (allorigins `/get` style). An empty template
    fetches the page directly.
    """
    own_session = session is None
    http = session or build_session()
    target = proxied_url(url, proxy_template) if proxy_template else url
    try:
        log.debug("fetch: GET %s", target)
        resp = http.get(target, timeout=timeout)
        resp.raise_for_status()
        if not proxy_template:
            return resp.text

        payload = resp.json()
        contents = payload.get("contents") if isinstance(payload, dict) else None
        if not isinstance(contents, str):
            raise FetchError(f"Proxy response for {url!r} has no 'contents' field.")
        return contents
    except (requests.RequestException, ValueError) as e:
        raise FetchError(f"Failed to fetch {url!r}: {e!r}") from e
    finally:
        if own_session:
            http.close()
