"""HTTP transport and HTML parsing for wiki pages."""

from __future__ import annotations

import logging
from typing import Optional

import requests
from bs4 import BeautifulSoup
from requests.adapters import HTTPAdapter

from .config import CrawlConfig
from .models import Page

logger = logging.getLogger("wikigallery.fetcher")


class FetchError(RuntimeError):
    """Raised when a page cannot be retrieved."""


def is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


class HttpFetcher:
    """Shared HTTP client with a fixed user agent and timeouts.

    One instance is built per run and closed on shutdown, which releases
    the pooled connections. Requests are never retried.
    """

    def __init__(self, config: CrawlConfig, session: Optional[requests.Session] = None) -> None:
        self.config = config
        self.timeout = (config.connect_timeout, config.read_timeout)
        if session is None:
            session = requests.Session()
            adapter = HTTPAdapter(pool_connections=16, pool_maxsize=64, max_retries=0)
            session.mount("https://", adapter)
            session.mount("http://", adapter)
        session.headers.update({"User-Agent": config.user_agent})
        self.session = session

    def __enter__(self) -> "HttpFetcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    def fetch_page(self, url: str) -> Page:
        """GET ``url`` and parse the body into a :class:`Page`."""
        logger.debug("Fetching %s", url)
        resp = self.session.get(url, timeout=self.timeout)
        if not is_success(resp.status_code):
            raise FetchError(f"Failed to fetch page: {resp.status_code}")
        html = resp.text
        if not html:
            raise FetchError("Empty response body")
        return Page(url=url, soup=BeautifulSoup(html, "html.parser"))

    def stream(self, url: str) -> requests.Response:
        """Open a streamed GET; the caller closes the response."""
        return self.session.get(url, timeout=self.timeout, stream=True)
