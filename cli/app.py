from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.table import Table

from backupjob.config.settings import ConfigurationError, Settings, load_settings
from backupjob.infrastructure.audit_trail import AuditTrail
from backupjob.processing.latest_files import BackupFolderMissing, collect_latest_backups
from backupjob.processing.run import run_backup
from backupjob.reporting.run_log import TIMESTAMP_FORMAT, read_runs
from backupjob.reporting.summary import export_summary_csv

from .common import configure_logging, console, summary_table

load_dotenv()

app = typer.Typer(help="Company backup job: copy data, collect latest backups, archive")

_settings_cache: Optional[Settings] = None
_config_override: Optional[Path] = None


def get_settings() -> Settings:
    global _settings_cache
    if _settings_cache is not None:
        return _settings_cache
    try:
        _settings_cache = load_settings(_config_override)
    except ConfigurationError as exc:
        console().print(f"[red]Configuration unavailable: {exc}. Pass --config or set BACKUPJOB_CONFIG.[/]")
        raise typer.Exit(code=1)
    return _settings_cache


@app.callback()
def main(
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        exists=True,
        file_okay=True,
        dir_okay=False,
        help="Path to the YAML/JSON configuration file.",
    ),
) -> None:
    global _config_override, _settings_cache
    configure_logging("backupjob")
    _config_override = config
    _settings_cache = None


@app.command("run")
def run(
    summary_csv: Optional[Path] = typer.Option(None, help="Also export the summary table as CSV."),
) -> None:
    """Back up every company folder and rotate the run log."""
    settings = get_settings()
    console().print("Backup run started")
    audit = AuditTrail(settings.audit_path)
    try:
        report = run_backup(settings, audit=audit)
    finally:
        audit.close()

    console().print(summary_table(report.statuses, "Backup Summary"))
    totals = report.totals
    console().print(
        f"Data copy {totals.data_copy.success}/{totals.data_copy.failed}  "
        f"Backup {totals.backup.success}/{totals.backup.failed}  "
        f"Zip {totals.zip.success}/{totals.zip.failed} (success/failed)"
    )
    if summary_csv is not None:
        export_summary_csv(report.statuses, summary_csv)
        console().print(f"Summary exported to {summary_csv}")
    console().print(f"Backup run finished: {totals.companies} companies processed")
    console().print(f"Run log written to {report.log_path}")


@app.command("companies")
def companies() -> None:
    """List the company code to friendly name mapping."""
    settings = get_settings()
    if not len(settings.companies):
        console().print("No companies configured")
        return
    table = Table(title="Configured companies")
    table.add_column("Code", style="cyan", no_wrap=True)
    table.add_column("Friendly name", style="green")
    for record in settings.companies:
        table.add_row(record.code, record.friendly_name)
    console().print(table)


@app.command("latest")
def latest(
    root: Path = typer.Argument(..., help="Folder holding the weekday backup subfolders."),
    dest: Path = typer.Argument(..., help="Folder receiving the newest file per name."),
) -> None:
    """Copy the newest version of every backup file under ROOT into DEST."""
    try:
        result = collect_latest_backups(root, dest)
    except BackupFolderMissing:
        console().print(f"[red]Backup folder not found: {root}[/]")
        raise typer.Exit(code=2)
    newest = result.latest.strftime(TIMESTAMP_FORMAT) if result.latest else "N/A"
    console().print(f"Copied {result.count} file(s) to {dest}; newest {newest}")


@app.command("log")
def show_log() -> None:
    """Print the stored run reports, most recent first."""
    settings = get_settings()
    runs = read_runs(settings.log_path)
    if not runs:
        console().print(f"No runs recorded yet in {settings.log_path}")
        return
    for chunk in runs:
        console().print(chunk, markup=False, highlight=False)
        console().print()


if __name__ == "__main__":
    app()
