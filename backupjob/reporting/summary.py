"""Run summary rendering: fixed-width table, totals block and CSV export."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Sequence

import pandas as pd

from backupjob.processing.status import CompanyRunStatus, RunTotals, StepCounter

COLUMNS = ("Company", "Data Copy", "Backup", "Latest File Date", "Zip", "Remarks")
MIN_WIDTHS: Dict[str, int] = {
    "Company": 25,
    "Data Copy": 12,
    "Backup": 20,
    "Latest File Date": 20,
    "Zip": 12,
    "Remarks": 30,
}
SEPARATOR = " | "


def column_widths(rows: Sequence[Dict[str, str]]) -> Dict[str, int]:
    widths = {}
    for column in COLUMNS:
        observed = max((len(row[column]) for row in rows), default=0)
        widths[column] = max(MIN_WIDTHS[column], len(column), observed)
    return widths


def _format_row(values: Dict[str, str], widths: Dict[str, int]) -> str:
    cells = [values[column].ljust(widths[column]) for column in COLUMNS[:-1]]
    # the last column is never padded; an empty one is left out with its separator
    if values[COLUMNS[-1]]:
        cells.append(values[COLUMNS[-1]])
    return SEPARATOR.join(cells).rstrip()


def render_summary_table(statuses: Iterable[CompanyRunStatus]) -> List[str]:
    rows = [status.as_row() for status in statuses]
    widths = column_widths(rows)
    header = _format_row({column: column for column in COLUMNS}, widths)
    rule = "-+-".join("-" * widths[column] for column in COLUMNS)
    lines = ["", "Backup Summary", header, rule]
    lines.extend(_format_row(row, widths) for row in rows)
    return lines


def _counter_line(name: str, counter: StepCounter) -> str:
    return f"{name:<12} Success: {counter.success:<5} Failed: {counter.failed}"


def render_totals(totals: RunTotals) -> List[str]:
    return [
        "",
        f"Total companies: {totals.companies}",
        _counter_line("Data Copy", totals.data_copy),
        _counter_line("Backup", totals.backup),
        _counter_line("Zip", totals.zip),
    ]


def summary_frame(statuses: Iterable[CompanyRunStatus]) -> pd.DataFrame:
    rows = [status.as_row() for status in statuses]
    return pd.DataFrame(rows, columns=list(COLUMNS))


def export_summary_csv(statuses: Iterable[CompanyRunStatus], path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    summary_frame(statuses).to_csv(path, index=False)
    return path
