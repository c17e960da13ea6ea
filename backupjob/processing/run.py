"""Run the backup job over every company folder in the source directory."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

from backupjob.config.settings import Settings
from backupjob.infrastructure.audit_trail import AuditTrail
from backupjob.processing.company import process_company
from backupjob.processing.context import RunContext
from backupjob.processing.status import CompanyRunStatus, RunTotals
from backupjob.reporting.run_log import rotate_log
from backupjob.reporting.summary import render_summary_table, render_totals

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunReport:
    statuses: List[CompanyRunStatus]
    totals: RunTotals
    text: str
    log_path: Path


def _company_codes(source_dir: Path, context: RunContext) -> List[str]:
    try:
        entries = sorted(source_dir.iterdir())
    except OSError as exc:
        context.log.add(f"Source folder unavailable: {exc}", logging.ERROR)
        return []
    codes = []
    for entry in entries:
        if entry.is_dir():
            codes.append(entry.name)
        else:
            LOGGER.debug("Ignoring non-directory entry %s", entry)
    return codes


def prepare_directories(settings: Settings) -> None:
    settings.paths.destination_dir.mkdir(parents=True, exist_ok=True)
    settings.paths.log_dir.mkdir(parents=True, exist_ok=True)
    if settings.paths.work_dir is not None:
        settings.paths.work_dir.mkdir(parents=True, exist_ok=True)


def run_backup(
    settings: Settings,
    clock: Callable[[], datetime] = datetime.now,
    audit: Optional[AuditTrail] = None,
) -> RunReport:
    """Process all companies, write the rotated run log and return the report."""
    prepare_directories(settings)
    context = RunContext(clock=clock, audit=audit)
    context.log.start()
    context.log.add(f"Source folder: {settings.paths.source_dir}")
    context.log.add(f"Destination folder: {settings.paths.destination_dir}")

    for code in _company_codes(settings.paths.source_dir, context):
        process_company(code, settings, context)

    context.log.extend(render_summary_table(context.statuses))
    context.log.extend(render_totals(context.totals))
    context.log.finish()

    text = context.log.text()
    log_path = rotate_log(settings.log_path, text, keep_runs=settings.log.keep_runs)
    LOGGER.info("Run log written to %s", log_path)
    return RunReport(statuses=list(context.statuses), totals=context.totals, text=text, log_path=log_path)
