"""Structured audit trail: one JSON line per processed company."""
from __future__ import annotations

import json
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict


class AuditTrail:
    """Append JSON events to a size-rotated ``audit.log``."""

    def __init__(self, log_path: Path, max_bytes: int = 2_000_000, backup_count: int = 5) -> None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        self.path = log_path
        self._logger = logging.getLogger(f"backupjob.audit.{log_path.resolve()}")
        self._logger.setLevel(logging.INFO)
        self._logger.propagate = False
        if not self._logger.handlers:
            handler = RotatingFileHandler(
                log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
            )
            handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
            self._logger.addHandler(handler)

    def record(self, event: str, payload: Dict[str, Any]) -> None:
        entry = {"event": event, "payload": payload}
        self._logger.info(json.dumps(entry, ensure_ascii=False, default=str))

    def close(self) -> None:
        for handler in list(self._logger.handlers):
            handler.close()
            self._logger.removeHandler(handler)
