"""Rename every file in a download directory to a zero-padded sequence."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable, List, Sequence, Tuple

from .models import RenameResult, RenameState

logger = logging.getLogger("wikigallery.rename")

AFFIRMATIVE_ANSWERS = {"y", "yes"}


def list_files(directory: Path) -> List[Path]:
    """Snapshot the regular files directly inside ``directory``, sorted by name."""
    files = [path for path in Path(directory).iterdir() if path.is_file()]
    return sorted(files, key=lambda path: path.name.lower())


def sequential_name(index: int, source: Path) -> str:
    """Return ``{index:03d}.{ext}``, or just the number when there is no extension."""
    _, dot, ext = source.name.rpartition(".")
    if dot and ext:
        return f"{index:03d}.{ext}"
    return f"{index:03d}"


def plan_renames(files: Sequence[Path]) -> List[Tuple[Path, Path]]:
    return [
        (source, source.with_name(sequential_name(index, source)))
        for index, source in enumerate(files, start=1)
    ]


def format_preview(plan: Sequence[Tuple[Path, Path]]) -> List[str]:
    return [f"{source.name} -> {target.name}" for source, target in plan]


def is_affirmative(answer: str) -> bool:
    return answer.lower() in AFFIRMATIVE_ANSWERS


def _temporary_path(directory: Path, index: int) -> Path:
    return directory / f".rename-{time.time_ns()}-{index}.tmp"


def _discard_temporaries(pending: Sequence[Tuple[Path, Path, Path]]) -> None:
    """Best-effort cleanup: put each temp file back, or delete it if its name is taken."""
    for temp, _, original in pending:
        try:
            if original.exists():
                temp.unlink()
            else:
                temp.rename(original)
        except OSError as exc:
            logger.warning("Could not clean up temporary file %s: %s", temp, exc)


def rename_sequentially(
    directory: Path,
    confirm: Callable[[List[Tuple[Path, Path]]], bool],
) -> RenameResult:
    """Rename the files in ``directory`` to ``001.ext``, ``002.ext``, ...

    ``confirm`` receives the planned renames and must return ``True`` before
    anything is touched. Targets that are still occupied are moved through a
    temporary name and settled in a second pass. Renames completed before a
    failure are kept.
    """
    directory = Path(directory)
    plan = plan_renames(list_files(directory))
    if not plan:
        logger.info("No files to rename in %s", directory)
        return RenameResult(state=RenameState.RENAMED)
    if not confirm(plan):
        logger.info("Rename cancelled; no files were changed")
        return RenameResult(state=RenameState.CANCELLED)

    pending: List[Tuple[Path, Path, Path]] = []
    renamed = 0
    try:
        for index, (source, target) in enumerate(plan, start=1):
            if target.exists() and not target.samefile(source):
                temp = _temporary_path(directory, index)
                source.rename(temp)
                pending.append((temp, target, source))
            elif target != source:
                source.rename(target)
                renamed += 1
        while pending:
            temp, target, _ = pending[0]
            temp.rename(target)
            pending.pop(0)
            renamed += 1
    except Exception as exc:  # pylint: disable=broad-except
        logger.error("Rename failed after %d files: %s", renamed, exc)
        _discard_temporaries(pending)
        return RenameResult(state=RenameState.FAILED, renamed=renamed, error=str(exc))

    logger.info("Renamed %d of %d files in %s", renamed, len(plan), directory)
    return RenameResult(
        state=RenameState.RENAMED,
        renamed=renamed,
        names=[target.name for _, target in plan],
    )
