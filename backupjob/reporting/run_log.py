"""Per-run text log and the bounded log store that keeps the last runs."""
from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

LOGGER = logging.getLogger("backupjob.run")

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
RUN_STARTED_PREFIX = "========== Backup Run Started:"
RUN_COMPLETED_PREFIX = "========== Backup Run Completed:"
BANNER_SUFFIX = " =========="
DEFAULT_KEEP_RUNS = 3


def start_banner(timestamp: datetime) -> str:
    return f"{RUN_STARTED_PREFIX} {timestamp.strftime(TIMESTAMP_FORMAT)}{BANNER_SUFFIX}"


def end_banner(timestamp: datetime) -> str:
    return f"{RUN_COMPLETED_PREFIX} {timestamp.strftime(TIMESTAMP_FORMAT)}{BANNER_SUFFIX}"


class RunLog:
    """Lines of one run, mirrored to :mod:`logging` as they are added."""

    def __init__(self, clock: Callable[[], datetime] = datetime.now) -> None:
        self._clock = clock
        self.lines: List[str] = []

    def start(self) -> None:
        self.lines.append(start_banner(self._clock()))

    def finish(self) -> None:
        self.lines.append(end_banner(self._clock()))

    def add(self, message: str, level: int = logging.INFO) -> None:
        self.lines.append(f"[{self._clock().strftime(TIMESTAMP_FORMAT)}] {message}")
        LOGGER.log(level, message)

    def extend(self, lines: List[str]) -> None:
        """Append pre-rendered lines (tables, totals) without a timestamp."""
        self.lines.extend(lines)

    def text(self) -> str:
        return "\n".join(self.lines)


def split_runs(text: str) -> List[str]:
    """Split a log store into run chunks, each starting with the start banner.

    Text before the first banner is not part of any run and is dropped.
    """
    chunks: List[str] = []
    start = text.find(RUN_STARTED_PREFIX)
    while start != -1:
        following = text.find(RUN_STARTED_PREFIX, start + len(RUN_STARTED_PREFIX))
        chunk = text[start:following if following != -1 else len(text)].strip()
        if chunk:
            chunks.append(chunk)
        start = following
    return chunks


def _write_store(log_path: Path, text: str) -> None:
    with log_path.open("w", encoding="utf-8", newline="\r\n") as handle:
        handle.write(text)
        if not text.endswith("\n"):
            handle.write("\n")


def read_runs(log_path: Path) -> List[str]:
    if not log_path.exists():
        return []
    return split_runs(log_path.read_text(encoding="utf-8"))


def rotate_log(log_path: Path, run_text: str, keep_runs: Optional[int] = None) -> Path:
    """Prepend ``run_text`` to the store, keeping at most ``keep_runs`` runs."""
    keep_runs = DEFAULT_KEEP_RUNS if keep_runs is None else keep_runs
    if keep_runs < 1:
        raise ValueError("keep_runs must be at least 1")
    log_path.parent.mkdir(parents=True, exist_ok=True)
    run_text = run_text.strip()

    existing = log_path.read_text(encoding="utf-8") if log_path.exists() else ""
    if not existing.strip():
        _write_store(log_path, run_text)
        return log_path

    retained = split_runs(existing)[: keep_runs - 1]
    _write_store(log_path, "\n\n".join([run_text, *retained]))
    return log_path
