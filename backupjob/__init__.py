"""Automated company backups: data copy, latest backup collection, archive and run log."""

__all__ = [
    "config",
    "processing",
    "reporting",
    "infrastructure",
]
