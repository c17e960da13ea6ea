"""State threaded through one backup run."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional

from backupjob.infrastructure.audit_trail import AuditTrail
from backupjob.processing.status import CompanyRunStatus, RunTotals
from backupjob.reporting.run_log import RunLog


@dataclass
class RunContext:
    clock: Callable[[], datetime] = datetime.now
    log: RunLog = field(init=False)
    statuses: List[CompanyRunStatus] = field(default_factory=list)
    totals: RunTotals = field(default_factory=RunTotals)
    audit: Optional[AuditTrail] = None

    def __post_init__(self) -> None:
        self.log = RunLog(self.clock)

    def record(self, status: CompanyRunStatus) -> None:
        self.statuses.append(status)
        self.totals.add(status)
        if self.audit is not None:
            self.audit.record(
                "company_processed",
                {
                    "company": status.company,
                    "data_copy": status.data_copy.label,
                    "backup": status.backup.label,
                    "latest_file_date": status.latest_file_date,
                    "zip": status.zip.label,
                    "remarks": list(status.remarks),
                    "archive": str(status.archive) if status.archive else None,
                },
            )
