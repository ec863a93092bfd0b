"""Image downloading and on-disk bookkeeping."""

from __future__ import annotations

import asyncio
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional, Sequence, Set

from filetype import guess

from .fetcher import HttpFetcher, is_success
from .models import DownloadOutcome, DownloadTarget
from .utils import absolutize, filename_from_url

logger = logging.getLogger("wikigallery.images")

MIN_IMAGE_BYTES = 1024
CHUNK_SIZE = 64 * 1024
PARTIAL_SUFFIX = ".part"


def detect_image_format(path: Path) -> Optional[str]:
    """Detect image type using filetype; returns lowercase extension."""
    kind = guess(str(path))
    if kind and kind.mime.startswith("image/"):
        ext = kind.extension.lower()
        if ext == "jpeg":
            return "jpg"
        return ext
    return None


def looks_complete(path: Path) -> bool:
    # Byte-length heuristic only; the pixels are never inspected.
    return path.stat().st_size > MIN_IMAGE_BYTES


class Downloader:
    """Write images into ``download_dir``, never overwriting existing files."""

    def __init__(self, fetcher: HttpFetcher, download_dir: Path, base_url: str) -> None:
        self.fetcher = fetcher
        self.download_dir = Path(download_dir)
        self.base_url = base_url
        self.download_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._in_flight: Set[str] = set()

    def target_for(self, image_url: str) -> DownloadTarget:
        url = absolutize(image_url, self.base_url)
        filename = filename_from_url(url)
        return DownloadTarget(url=url, filename=filename, path=self.download_dir / filename)

    def _claim(self, target: DownloadTarget) -> bool:
        with self._lock:
            if target.filename in self._in_flight or target.path.exists():
                return False
            self._in_flight.add(target.filename)
            return True

    def _release(self, target: DownloadTarget) -> None:
        with self._lock:
            self._in_flight.discard(target.filename)

    def download(self, image_url: str) -> DownloadOutcome:
        """Fetch one image; failures are logged and reported, never raised."""
        try:
            target = self.target_for(image_url)
        except ValueError as exc:
            logger.error("Error downloading %s: %s", image_url, exc)
            return DownloadOutcome.FAILED

        if not self._claim(target):
            logger.info("Skipping %s (already exists)", target.filename)
            return DownloadOutcome.SKIPPED
        try:
            return self._fetch_to_disk(target)
        except Exception as exc:  # pylint: disable=broad-except
            logger.error("Error downloading %s: %s", target.url, exc)
            return DownloadOutcome.FAILED
        finally:
            self._release(target)

    def _fetch_to_disk(self, target: DownloadTarget) -> DownloadOutcome:
        logger.info("Downloading: %s", target.filename)
        partial = target.path.with_name(target.filename + PARTIAL_SUFFIX)
        with self.fetcher.stream(target.url) as resp:
            if not is_success(resp.status_code):
                logger.warning("Failed to download %s: %s", target.filename, resp.status_code)
                return DownloadOutcome.FAILED
            try:
                with partial.open("wb") as handle:
                    for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                        if chunk:
                            handle.write(chunk)
                partial.replace(target.path)
            finally:
                if partial.exists():
                    partial.unlink()

        if looks_complete(target.path):
            kind = detect_image_format(target.path) or "unknown type"
            logger.info("Successfully downloaded: %s (%s)", target.filename, kind)
        else:
            logger.warning(
                "Downloaded %s but it is only %d bytes",
                target.filename,
                target.path.stat().st_size,
            )
        return DownloadOutcome.SUCCESS


async def download_batch(
    downloader: Downloader,
    image_urls: Sequence[str],
    max_workers: Optional[int] = None,
) -> List[DownloadOutcome]:
    """Download every URL concurrently and wait until all have finished."""
    if not image_urls:
        return []
    loop = asyncio.get_running_loop()
    workers = max_workers or len(image_urls)
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="download") as pool:
        tasks = [loop.run_in_executor(pool, downloader.download, url) for url in image_urls]
        outcomes = await asyncio.gather(*tasks)
    return list(outcomes)
