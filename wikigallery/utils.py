"""Utility helpers for URL rewriting and filename handling."""

from __future__ import annotations

import re
from typing import Callable
from urllib.parse import urljoin, urlparse

UNSAFE_FILENAME_PATTERN = re.compile(r"[^a-zA-Z0-9._-]")
THUMBNAIL_SUFFIX_PATTERN = re.compile(r"/\d+px-[^/]*$")
FALLBACK_FILENAME = "image"


def sanitize_filename(name: str) -> str:
    """Replace every character outside ``[a-zA-Z0-9._-]`` with ``_``."""
    sanitized = UNSAFE_FILENAME_PATTERN.sub("_", name)
    if sanitized in ("", ".", ".."):
        return FALLBACK_FILENAME
    return sanitized


def filename_from_url(url: str) -> str:
    """Derive the local filename for an image URL from its last path segment."""
    path = urlparse(url).path
    return sanitize_filename(path.rsplit("/", 1)[-1])


def full_size_url(thumbnail_url: str) -> str:
    """Turn a MediaWiki thumbnail URL back into the original image URL.

    ``/images/thumb/a/ab/Foo.png/250px-Foo.png`` becomes ``/images/a/ab/Foo.png``.
    URLs that do not follow the thumbnail convention pass through unchanged.
    """
    return THUMBNAIL_SUFFIX_PATTERN.sub("", thumbnail_url.replace("/thumb/", "/"))


def absolutize(href: str, base_url: str) -> str:
    if href.startswith("http"):
        return href
    return urljoin(base_url, href)


def accept_all(url: str) -> bool:
    return True


def resolution_filter(size: str) -> Callable[[str], bool]:
    """Build a predicate keeping URLs that mention the given ``WxH`` resolution.

    A URL matches when it contains ``size`` verbatim, or contains both the
    width and the height as separate substrings.
    """
    width, _, height = size.lower().partition("x")
    if not width or not height:
        raise ValueError(f"Resolution must look like WIDTHxHEIGHT, got {size!r}")

    def matches(url: str) -> bool:
        return size in url or (width in url and height in url)

    return matches
