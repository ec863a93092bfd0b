"""Shared fakes for exercising the crawler without a network."""

from __future__ import annotations

import threading
from typing import Dict, List, Union

import pytest

from wikigallery.config import CrawlConfig
from wikigallery.fetcher import HttpFetcher

BASE_URL = "https://arknights.wiki.gg"
PNG_HEADER = b"\x89PNG\r\n\x1a\n"


class FakeResponse:
    def __init__(self, status_code: int = 200, body: Union[str, bytes] = b"", fail_midway: bool = False):
        self.status_code = status_code
        self.content = body.encode("utf-8") if isinstance(body, str) else body
        self.fail_midway = fail_midway
        self.closed = False

    @property
    def text(self) -> str:
        return self.content.decode("utf-8")

    def iter_content(self, chunk_size: int = 1):
        for start in range(0, len(self.content), chunk_size):
            if self.fail_midway and start:
                raise ConnectionResetError("connection dropped")
            yield self.content[start:start + chunk_size]

    def close(self) -> None:
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


class FakeSession:
    """Serves canned responses keyed by URL and records every request."""

    def __init__(self, routes: Dict[str, Union[FakeResponse, Exception]] = None):
        self.routes = dict(routes or {})
        self.headers: Dict[str, str] = {}
        self.calls: List[str] = []
        self.kwargs: List[dict] = []
        self.closed = False
        self._lock = threading.Lock()

    def get(self, url, **kwargs):
        with self._lock:
            self.calls.append(url)
            self.kwargs.append(kwargs)
        route = self.routes.get(url)
        if route is None:
            return FakeResponse(404, b"")
        if isinstance(route, Exception):
            raise route
        return route

    def close(self) -> None:
        self.closed = True


def image_bytes(size: int = 4096) -> bytes:
    return PNG_HEADER + b"\0" * (size - len(PNG_HEADER))


@pytest.fixture
def config(tmp_path):
    return CrawlConfig(
        base_url=BASE_URL,
        start_url=f"{BASE_URL}/wiki/Category:X",
        download_dir=tmp_path / "img",
        page_delay=1.0,
    )


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def fetcher(config, session):
    return HttpFetcher(config, session=session)
