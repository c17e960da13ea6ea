"""Filesystem primitives for copying company data and building archives."""
from __future__ import annotations

import logging
import shutil
import zipfile
from datetime import datetime
from pathlib import Path
from typing import Iterable, List

LOGGER = logging.getLogger(__name__)

ARCHIVE_TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"


def archive_name(code: str, friendly_name: str, timestamp: datetime) -> str:
    return f"{code}_{friendly_name}_{timestamp.strftime(ARCHIVE_TIMESTAMP_FORMAT)}.zip"


def copy_data_tree(source: Path, target: Path) -> int:
    """Recursively copy ``source`` into ``target`` and return the number of files copied."""
    if not source.is_dir():
        raise FileNotFoundError(f"Data folder not found: {source}")
    shutil.copytree(source, target, dirs_exist_ok=True)
    return sum(1 for item in target.rglob("*") if item.is_file())


def remove_stale_archives(destination_dir: Path, code: str) -> List[Path]:
    """Delete archives left by earlier runs for ``code`` and return their paths."""
    removed: List[Path] = []
    for archive in sorted(destination_dir.glob(f"{code}_*.zip")):
        if archive.is_file():
            archive.unlink()
            removed.append(archive)
    return removed


def create_archive(sources: Iterable[Path], archive_path: Path) -> Path:
    """Zip each source folder as a top-level entry of ``archive_path``.

    Folders are written even when empty so the archive layout stays fixed.
    Files dated before 1980 are stored with the earliest ZIP timestamp.
    """
    archive_path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(
        archive_path, "w", compression=zipfile.ZIP_DEFLATED, strict_timestamps=False
    ) as zf:
        for source in sources:
            source = source.resolve()
            if source.is_dir():
                zf.write(source, arcname=f"{source.name}/")
                for item in sorted(source.rglob("*")):
                    arcname = item.relative_to(source.parent).as_posix()
                    if item.is_dir():
                        zf.write(item, arcname=f"{arcname}/")
                    elif item.is_file():
                        zf.write(item, arcname=arcname)
            elif source.is_file():
                zf.write(source, arcname=source.name)
    LOGGER.debug("Archive written: %s", archive_path)
    return archive_path
