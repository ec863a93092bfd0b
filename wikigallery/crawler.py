"""Page-by-page orchestration of the category crawl."""

from __future__ import annotations

import asyncio
import logging

import requests

from .config import CrawlConfig
from .content import extract_image_urls, next_page_url
from .fetcher import FetchError, HttpFetcher
from .images import Downloader, download_batch
from .models import CrawlResult, CrawlState

logger = logging.getLogger("wikigallery")


def _abort(result: CrawlResult, exc: Exception) -> CrawlResult:
    result.state = CrawlState.ABORTED
    result.error = str(exc) or exc.__class__.__name__
    return result


async def run_crawler(
    config: CrawlConfig,
    fetcher: HttpFetcher,
    downloader: Downloader,
) -> CrawlResult:
    """Walk the category listing from ``config.start_url`` until it runs out.

    Each page is fully processed, its downloads included, before the next
    page is requested. A failed page fetch stops the whole crawl.
    """
    result = CrawlResult(start_url=config.start_url)
    current_url = config.start_url
    page_number = 1

    while current_url:
        logger.info("Processing page %d: %s", page_number, current_url)
        try:
            page = await asyncio.to_thread(fetcher.fetch_page, current_url)
            image_urls = await asyncio.to_thread(
                extract_image_urls,
                page,
                fetcher,
                config.base_url,
                config.image_filter,
            )
            if image_urls:
                logger.info("Found %d images on page %d", len(image_urls), page_number)
                result.images_found += len(image_urls)
                outcomes = await download_batch(downloader, image_urls, config.max_workers)
                result.record(outcomes)
            else:
                logger.info("No images found on page %d", page_number)
            next_url = next_page_url(page, config.base_url)
        except (FetchError, requests.RequestException) as exc:
            logger.error("Error processing page %s: %s", current_url, exc)
            return _abort(result, exc)
        except Exception as exc:  # pylint: disable=broad-except
            logger.exception("Unexpected error processing page %s", current_url)
            return _abort(result, exc)

        result.pages_processed += 1
        if next_url:
            logger.info("Next page found: %s", next_url)
            await asyncio.sleep(config.page_delay)
        else:
            logger.info("No more pages found. Download completed.")
        current_url = next_url
        page_number += 1

    result.state = CrawlState.DONE
    return result
