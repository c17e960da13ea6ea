"""Shared helper utilities for the backup job test-suite."""

from .data import build_company_source, build_weekday_backups
from .fs import FrozenClock, write_file

__all__ = [
    "build_company_source",
    "build_weekday_backups",
    "FrozenClock",
    "write_file",
]
