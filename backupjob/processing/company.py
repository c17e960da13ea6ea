"""Back up a single company: data copy, latest backup collection, archive."""
from __future__ import annotations

import logging
import tempfile
import zipfile
from pathlib import Path
from typing import List, Optional, Tuple

from backupjob.config.settings import CompanyRecord, Settings
from backupjob.infrastructure.backup import (
    archive_name,
    copy_data_tree,
    create_archive,
    remove_stale_archives,
)
from backupjob.processing.context import RunContext
from backupjob.processing.latest_files import collect_latest_backups
from backupjob.processing.status import NOT_AVAILABLE, CompanyRunStatus, StepOutcome
from backupjob.reporting.run_log import TIMESTAMP_FORMAT

LATEST_BACKUP_DIR = "Latest Backup"


def data_dir_name(code: str) -> str:
    return f"DATA_{code}"


def _copy_data(
    record: CompanyRecord, settings: Settings, scratch: Path, context: RunContext
) -> StepOutcome:
    source = settings.paths.source_dir / record.code
    try:
        copied = copy_data_tree(source, scratch / data_dir_name(record.code))
    except OSError as exc:
        context.log.add(f"{record.code}: data copy failed: {exc}", logging.ERROR)
        return StepOutcome.failed(f"data copy failed: {exc}")
    context.log.add(f"{record.code}: copied {copied} data file(s) from {source}")
    return StepOutcome.success()


def _collect_backups(
    record: CompanyRecord, settings: Settings, scratch: Path, context: RunContext
) -> Tuple[StepOutcome, str]:
    root = settings.paths.backup_root / record.friendly_name
    target = scratch / LATEST_BACKUP_DIR
    if not root.is_dir():
        context.log.add(f"{record.code}: backup folder missing: {root}", logging.WARNING)
        return StepOutcome.failed("backup folder missing"), NOT_AVAILABLE
    try:
        result = collect_latest_backups(root, target)
    except (OSError, ValueError, OverflowError) as exc:
        # out-of-range modification times surface as ValueError/OverflowError
        context.log.add(f"{record.code}: backup read failed: {exc}", logging.ERROR)
        return StepOutcome.failed(f"backup read failed: {exc}"), NOT_AVAILABLE
    latest = result.latest.strftime(TIMESTAMP_FORMAT) if result.latest else NOT_AVAILABLE
    context.log.add(f"{record.code}: collected {result.count} latest backup file(s), newest {latest}")
    return StepOutcome.success(f"{result.count} files"), latest


def _discard_partial_archive(archive_path: Path, context: RunContext) -> None:
    try:
        archive_path.unlink(missing_ok=True)
    except OSError as exc:
        context.log.add(f"could not remove partial archive {archive_path.name}: {exc}", logging.ERROR)


def _build_archive(
    record: CompanyRecord, settings: Settings, scratch: Path, context: RunContext
) -> Tuple[StepOutcome, Optional[Path]]:
    destination = settings.paths.destination_dir
    archive_path = destination / archive_name(record.code, record.friendly_name, context.clock())
    sources = [scratch / data_dir_name(record.code), scratch / LATEST_BACKUP_DIR]
    writing = False
    try:
        for source in sources:
            source.mkdir(parents=True, exist_ok=True)
        for stale in remove_stale_archives(destination, record.code):
            if stale == archive_path:
                context.log.add(f"{record.code}: overwriting archive {stale.name}", logging.WARNING)
            else:
                context.log.add(f"{record.code}: removed previous archive {stale.name}")
        writing = True
        create_archive(sources, archive_path)
    except (OSError, ValueError, zipfile.LargeZipFile) as exc:
        context.log.add(f"{record.code}: zip creation failed: {exc}", logging.ERROR)
        if writing:
            _discard_partial_archive(archive_path, context)
        return StepOutcome.failed(f"zip creation failed: {exc}"), None
    context.log.add(f"{record.code}: archive created {archive_path}")
    return StepOutcome.success(), archive_path


def process_company(code: str, settings: Settings, context: RunContext) -> CompanyRunStatus:
    """Run the three backup steps for ``code`` and record the outcome in ``context``.

    Each step is isolated: a failed step is recorded and the next one still
    runs. Unmapped codes are skipped entirely.
    """
    record = settings.companies.lookup(code)
    if record is None:
        context.log.add(f"{code}: no mapping found, skipping")
        status = CompanyRunStatus(company=code, label=code)
        context.record(status)
        return status

    label = f"{record.code} - {record.friendly_name}"
    context.log.add(f"Processing {label}")
    remarks: List[str] = []

    with tempfile.TemporaryDirectory(prefix=f"{record.code}_", dir=settings.paths.work_dir) as tmp:
        scratch = Path(tmp)
        data_copy = _copy_data(record, settings, scratch, context)
        backup, latest_date = _collect_backups(record, settings, scratch, context)
        zip_outcome, archive = _build_archive(record, settings, scratch, context)

    for outcome in (data_copy, backup, zip_outcome):
        if outcome.reason:
            remarks.append(outcome.reason)

    status = CompanyRunStatus(
        company=record.code,
        label=label,
        data_copy=data_copy,
        backup=backup,
        latest_file_date=latest_date,
        zip=zip_outcome,
        remarks=tuple(remarks),
        archive=archive,
    )
    context.record(status)
    return status
