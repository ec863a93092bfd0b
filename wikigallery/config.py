"""Configuration objects and constants for the crawler."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from .utils import accept_all

DEFAULT_BASE_URL = "https://arknights.wiki.gg"
DEFAULT_START_URL = f"{DEFAULT_BASE_URL}/wiki/Category:Background_images"
DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
DEFAULT_TARGET_SIZE = "1024x576"
DEFAULT_DOWNLOAD_DIR = Path("img")


@dataclass
class CrawlConfig:
    """Top-level settings that control crawling and downloading behaviour."""

    base_url: str = DEFAULT_BASE_URL
    start_url: str = DEFAULT_START_URL
    download_dir: Path = DEFAULT_DOWNLOAD_DIR
    user_agent: str = DEFAULT_USER_AGENT
    connect_timeout: float = 30.0
    read_timeout: float = 30.0
    page_delay: float = 1.0
    # None means one worker per image on the page.
    max_workers: Optional[int] = None
    image_filter: Callable[[str], bool] = field(default=accept_all)
