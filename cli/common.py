from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterable, Optional

from rich.console import Console
from rich.table import Table

from backupjob.processing.status import CompanyRunStatus, StepOutcome, StepStatus
from backupjob.reporting.summary import COLUMNS

from . import APP_ROOT

_CONSOLE = Console()
LOG_DIR = APP_ROOT / "logs" / "cli"

_STATUS_STYLES = {
    StepStatus.SUCCESS: "green",
    StepStatus.FAILED: "red",
    StepStatus.SKIPPED: "yellow",
}


def console() -> Console:
    return _CONSOLE


def configure_logging(name: str, log_dir: Optional[Path] = None, level: int = logging.INFO) -> Path:
    """Configure a rotating file logger plus console echo and return the log path."""
    target_dir = log_dir or LOG_DIR
    target_dir.mkdir(parents=True, exist_ok=True)
    log_path = target_dir / f"{name}.log"
    handler = RotatingFileHandler(log_path, maxBytes=1_000_000, backupCount=3, encoding="utf-8")
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[handler, logging.StreamHandler()],
        force=True,
    )
    return log_path


def _styled(outcome: StepOutcome) -> str:
    return f"[{_STATUS_STYLES[outcome.status]}]{outcome.label}[/]"


def summary_table(statuses: Iterable[CompanyRunStatus], title: str) -> Table:
    table = Table(title=title)
    for column in COLUMNS:
        table.add_column(column, no_wrap=column != "Remarks")
    for status in statuses:
        table.add_row(
            status.label,
            _styled(status.data_copy),
            _styled(status.backup),
            status.latest_file_date,
            _styled(status.zip),
            status.remarks_text,
        )
    return table
