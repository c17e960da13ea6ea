"""Shared pytest configuration and fixtures for the backup job."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Iterable, Mapping, Optional

import pytest

from backupjob.config.settings import Settings, build_settings
from tests.helpers import FrozenClock

LOGS_ROOT = Path(__file__).resolve().parents[1] / "logs" / "tests"
SESSION_LOG = LOGS_ROOT / "pytest.session.log"
_MODULE_HANDLERS: Dict[str, logging.Handler] = {}


def _initialise_logging() -> None:
    LOGS_ROOT.mkdir(parents=True, exist_ok=True)
    (LOGS_ROOT / ".gitkeep").touch(exist_ok=True)

    handler = logging.FileHandler(SESSION_LOG, mode="w", encoding="utf-8")
    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(logging.INFO)
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)


def get_test_logger(module_name: str) -> logging.Logger:
    """Return a logger writing into ``logs/tests/<module>.log``."""
    normalised = module_name.replace("tests.", "")
    logger = logging.getLogger(f"tests.{normalised}")
    logger.setLevel(logging.INFO)
    if normalised not in _MODULE_HANDLERS:
        LOGS_ROOT.mkdir(parents=True, exist_ok=True)
        log_path = LOGS_ROOT / f"{normalised}.log"
        handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
        logger.addHandler(handler)
        _MODULE_HANDLERS[normalised] = handler
    return logger


@pytest.hookimpl(tryfirst=True)
def pytest_configure(config: pytest.Config) -> None:  # noqa: D401 - pytest hook
    _initialise_logging()


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item: pytest.Item, call: pytest.CallInfo[None]) -> Iterable[pytest.TestReport]:
    outcome = yield
    report = outcome.get_result()
    if report.outcome != "failed":
        return
    module = getattr(item, "module", None)
    module_name = getattr(module, "__name__", "tests")
    target = LOGS_ROOT / f"{module_name.split('.')[-1]}.log"
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("a", encoding="utf-8") as handle:
        handle.write("\n=== TEST FAILURE ===\n")
        handle.write(f"nodeid: {item.nodeid}\n")
        handle.write(f"phase: {report.when}\n")
        handle.write(str(report.longrepr))
        handle.write("\n")


@dataclass
class BackupLayout:
    source: Path
    backups: Path
    destination: Path
    logs: Path

    def raw_config(self, companies: Mapping[str, str], **log: object) -> Dict[str, object]:
        raw: Dict[str, object] = {
            "paths": {
                "source_dir": str(self.source),
                "backup_root": str(self.backups),
                "destination_dir": str(self.destination),
                "log_dir": str(self.logs),
            },
            "companies": dict(companies),
        }
        if log:
            raw["log"] = dict(log)
        return raw


@pytest.fixture(scope="session")
def project_root() -> Path:
    return Path(__file__).resolve().parents[1]


@pytest.fixture
def backup_layout(tmp_path: Path) -> BackupLayout:
    layout = BackupLayout(
        source=tmp_path / "data",
        backups=tmp_path / "backups",
        destination=tmp_path / "archives",
        logs=tmp_path / "logs",
    )
    layout.source.mkdir()
    layout.backups.mkdir()
    return layout


@pytest.fixture
def make_settings(backup_layout: BackupLayout, tmp_path: Path) -> Callable[..., Settings]:
    def _factory(companies: Optional[Mapping[str, str]] = None, **log: object) -> Settings:
        raw = backup_layout.raw_config(companies or {"COMP0001": "Company A"}, **log)
        return build_settings(raw, tmp_path)

    return _factory


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2024, 3, 5, 22, 30, 15))


__all__ = [
    "BackupLayout",
    "get_test_logger",
]
