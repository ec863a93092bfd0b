"""Data models used throughout the crawler pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional

from bs4 import BeautifulSoup


@dataclass
class Page:
    """A fetched and parsed document."""

    url: str
    soup: BeautifulSoup


@dataclass
class DownloadTarget:
    """Image URL paired with the local file it is written to."""

    url: str
    filename: str
    path: Path


class DownloadOutcome(Enum):
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


class CrawlState(Enum):
    RUNNING = "running"
    DONE = "done"
    ABORTED = "aborted"


@dataclass
class CrawlResult:
    """Summary of a crawl run."""

    start_url: str
    state: CrawlState = CrawlState.RUNNING
    pages_processed: int = 0
    images_found: int = 0
    succeeded: int = 0
    skipped: int = 0
    failed: int = 0
    error: Optional[str] = None

    def record(self, outcomes: Iterable[DownloadOutcome]) -> None:
        for outcome in outcomes:
            if outcome is DownloadOutcome.SUCCESS:
                self.succeeded += 1
            elif outcome is DownloadOutcome.SKIPPED:
                self.skipped += 1
            else:
                self.failed += 1


class RenameState(Enum):
    RENAMED = "renamed"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass
class RenameResult:
    """Outcome of a sequential rename pass."""

    state: RenameState
    renamed: int = 0
    error: Optional[str] = None
    names: List[str] = field(default_factory=list)
