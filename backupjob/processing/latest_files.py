"""Pick the newest copy of every backup file across weekday-rotated folders."""
from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterator, Optional

LOGGER = logging.getLogger(__name__)


class BackupFolderMissing(FileNotFoundError):
    """Raised when a company's backup root does not exist."""


@dataclass(frozen=True, slots=True)
class BackupFileCandidate:
    name: str
    path: Path
    last_modified: datetime


@dataclass(frozen=True, slots=True)
class SelectionResult:
    count: int
    latest: Optional[datetime]


LatestFileSet = Dict[str, BackupFileCandidate]


def iter_candidates(root: Path) -> Iterator[BackupFileCandidate]:
    """Yield every file found directly inside the subfolders of ``root``.

    Subfolders and files are visited in lexical order so that callers get a
    stable enumeration regardless of the filesystem.
    """
    if not root.is_dir():
        raise BackupFolderMissing(f"Backup folder not found: {root}")
    for folder in sorted(p for p in root.iterdir() if p.is_dir()):
        for file in sorted(p for p in folder.iterdir() if p.is_file()):
            stat = file.stat()
            yield BackupFileCandidate(
                name=file.name,
                path=file,
                last_modified=datetime.fromtimestamp(stat.st_mtime),
            )


def select_latest_files(root: Path) -> LatestFileSet:
    """Return one candidate per file name: the most recently modified one.

    On equal timestamps the first candidate in lexical path order is kept.
    """
    selection: LatestFileSet = {}
    for candidate in iter_candidates(root):
        current = selection.get(candidate.name)
        if current is None or candidate.last_modified > current.last_modified:
            selection[candidate.name] = candidate
    LOGGER.debug("Selected %d latest file(s) under %s", len(selection), root)
    return selection


def copy_latest_files(selection: LatestFileSet, destination: Path) -> SelectionResult:
    destination.mkdir(parents=True, exist_ok=True)
    latest: Optional[datetime] = None
    for name, candidate in selection.items():
        shutil.copy2(candidate.path, destination / name)
        if latest is None or candidate.last_modified > latest:
            latest = candidate.last_modified
    return SelectionResult(count=len(selection), latest=latest)


def collect_latest_backups(root: Path, destination: Path) -> SelectionResult:
    """Select the newest file per name under ``root`` and copy them to ``destination``."""
    return copy_latest_files(select_latest_files(root), destination)
