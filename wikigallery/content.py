"""Image reference extraction and pagination lookup on wiki pages."""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

import requests
from bs4 import Tag

from .fetcher import FetchError, HttpFetcher
from .models import Page
from .utils import absolutize, accept_all, full_size_url

logger = logging.getLogger("wikigallery.content")

GALLERY_IMAGE_SELECTOR = ".gallerybox .thumb img, .gallery .gallerybox img"
FILE_LINK_SELECTOR = 'a[href*="/wiki/File:"]'
FULL_IMAGE_SELECTOR = ".fullImageLink a, .fullMedia a"
PAGINATION_SELECTOR = ".mw-category-pagination a"

NEXT_TOKENS = ("next", "Next", "次")
NEXT_LINK_CLASS = "mw-nextlink"
PREV_LINK_CLASS = "mw-prevlink"


def _thumbnail_urls(page: Page) -> List[str]:
    urls: List[str] = []
    for img in page.soup.select(GALLERY_IMAGE_SELECTOR):
        src = img.get("src")
        if src:
            urls.append(full_size_url(src))
    return urls


def extract_full_image_url(description_page: Page) -> Optional[str]:
    """Return the original-file link on a ``File:`` description page."""
    link = description_page.soup.select_one(FULL_IMAGE_SELECTOR)
    if link is None:
        return None
    return link.get("href") or None


def _file_page_urls(page: Page, fetcher: HttpFetcher, base_url: str) -> List[str]:
    urls: List[str] = []
    for link in page.soup.select(FILE_LINK_SELECTOR):
        href = link.get("href")
        if not href:
            continue
        try:
            description_page = fetcher.fetch_page(absolutize(href, base_url))
        except (FetchError, requests.RequestException, ValueError) as exc:
            logger.warning("Error processing file link %s: %s", href, exc)
            continue
        image_url = extract_full_image_url(description_page)
        if image_url:
            urls.append(image_url)
    return urls


def extract_image_urls(
    page: Page,
    fetcher: HttpFetcher,
    base_url: str,
    image_filter: Callable[[str], bool] = accept_all,
) -> List[str]:
    """Collect full-resolution image URLs referenced by a category page.

    Gallery thumbnails are rewritten to their original-size URLs, and each
    ``File:`` link is followed to read the full image link from its
    description page. The result keeps first-seen order without duplicates.
    """
    candidates = _thumbnail_urls(page) + _file_page_urls(page, fetcher, base_url)
    accepted: List[str] = []
    for url in candidates:
        if not image_filter(url):
            continue
        try:
            accepted.append(absolutize(url, base_url))
        except ValueError as exc:
            logger.warning("Skipping malformed image URL %s: %s", url, exc)
    return list(dict.fromkeys(accepted))


def _classes(link: Tag) -> List[str]:
    return link.get("class") or []


def _is_next_link(link: Tag) -> bool:
    classes = _classes(link)
    if PREV_LINK_CLASS in classes:
        return False
    text = link.get_text()
    return NEXT_LINK_CLASS in classes or any(token in text for token in NEXT_TOKENS)


def next_page_url(page: Page, base_url: str) -> str:
    """Return the absolute URL of the next listing page, or ``""`` at the end."""
    for link in page.soup.find_all("a"):
        href = link.get("href")
        if href and _is_next_link(link):
            return absolutize(href, base_url)

    for link in page.soup.select(PAGINATION_SELECTOR):
        text = link.get_text().strip().lower()
        href = link.get("href")
        if href and any(token.lower() in text for token in NEXT_TOKENS):
            return absolutize(href, base_url)

    return ""
