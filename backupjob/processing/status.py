"""Result values produced while processing companies."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Tuple

NOT_AVAILABLE = "N/A"


class StepStatus(str, Enum):
    SKIPPED = "Skipped"
    SUCCESS = "Success"
    FAILED = "Failed"


@dataclass(frozen=True, slots=True)
class StepOutcome:
    status: StepStatus
    detail: Optional[str] = None
    reason: Optional[str] = None

    @classmethod
    def skipped(cls) -> "StepOutcome":
        return cls(StepStatus.SKIPPED)

    @classmethod
    def success(cls, detail: Optional[str] = None) -> "StepOutcome":
        return cls(StepStatus.SUCCESS, detail=detail)

    @classmethod
    def failed(cls, reason: str) -> "StepOutcome":
        return cls(StepStatus.FAILED, reason=reason)

    @property
    def ok(self) -> bool:
        return self.status is StepStatus.SUCCESS

    @property
    def label(self) -> str:
        if self.status is StepStatus.SUCCESS and self.detail:
            return f"{self.status.value} ({self.detail})"
        return self.status.value


@dataclass(frozen=True, slots=True)
class CompanyRunStatus:
    company: str
    label: str
    data_copy: StepOutcome = field(default_factory=StepOutcome.skipped)
    backup: StepOutcome = field(default_factory=StepOutcome.skipped)
    latest_file_date: str = NOT_AVAILABLE
    zip: StepOutcome = field(default_factory=StepOutcome.skipped)
    remarks: Tuple[str, ...] = ()
    archive: Optional[Path] = None

    @property
    def remarks_text(self) -> str:
        return "; ".join(self.remarks)

    def as_row(self) -> Dict[str, str]:
        return {
            "Company": self.label,
            "Data Copy": self.data_copy.label,
            "Backup": self.backup.label,
            "Latest File Date": self.latest_file_date,
            "Zip": self.zip.label,
            "Remarks": self.remarks_text,
        }


@dataclass(slots=True)
class StepCounter:
    success: int = 0
    failed: int = 0

    def count(self, outcome: StepOutcome) -> None:
        if outcome.status is StepStatus.SUCCESS:
            self.success += 1
        elif outcome.status is StepStatus.FAILED:
            self.failed += 1


@dataclass(slots=True)
class RunTotals:
    companies: int = 0
    data_copy: StepCounter = field(default_factory=StepCounter)
    backup: StepCounter = field(default_factory=StepCounter)
    zip: StepCounter = field(default_factory=StepCounter)

    def add(self, status: CompanyRunStatus) -> None:
        self.companies += 1
        self.data_copy.count(status.data_copy)
        self.backup.count(status.backup)
        self.zip.count(status.zip)
