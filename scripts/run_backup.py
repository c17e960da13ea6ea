"""Run the company backup job once; meant for a nightly scheduled task."""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from backupjob.config.settings import load_settings
from backupjob.infrastructure.audit_trail import AuditTrail
from backupjob.processing.run import run_backup


def main(argv: Optional[list[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    config_path = Path(args[0]) if args else None
    settings = load_settings(config_path)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    audit = AuditTrail(settings.audit_path)
    try:
        report = run_backup(settings, audit=audit)
    finally:
        audit.close()
    print(f"Backup finished for {report.totals.companies} companies, log: {report.log_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
