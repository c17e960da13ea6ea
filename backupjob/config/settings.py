"""Central configuration for the company backup job."""
from __future__ import annotations

from dataclasses import dataclass, field
import json
import os
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

import yaml


class ConfigurationError(RuntimeError):
    """Raised when the configuration file is missing or invalid."""


@dataclass(frozen=True, slots=True)
class CompanyRecord:
    code: str
    friendly_name: str


class CompanyDirectory:
    """Read-only lookup from company code to :class:`CompanyRecord`."""

    def __init__(self, records: Iterable[CompanyRecord]) -> None:
        table: Dict[str, CompanyRecord] = {}
        for record in records:
            if not record.code or not record.code.strip():
                raise ConfigurationError("Company codes must be non-empty")
            if not record.friendly_name or not record.friendly_name.strip():
                raise ConfigurationError(f"Company `{record.code}` has no friendly name")
            if record.code in table:
                raise ConfigurationError(f"Duplicate company code `{record.code}`")
            table[record.code] = record
        self._table: Mapping[str, CompanyRecord] = MappingProxyType(table)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, object]) -> "CompanyDirectory":
        return cls(CompanyRecord(str(code), str(name)) for code, name in mapping.items())

    def lookup(self, code: str) -> Optional[CompanyRecord]:
        return self._table.get(code)

    def __contains__(self, code: object) -> bool:
        return code in self._table

    def __iter__(self) -> Iterator[CompanyRecord]:
        return iter(self._table.values())

    def __len__(self) -> int:
        return len(self._table)


@dataclass(slots=True)
class PathsConfig:
    source_dir: Path
    backup_root: Path
    destination_dir: Path
    log_dir: Path
    work_dir: Optional[Path] = None


@dataclass(slots=True)
class LogConfig:
    file_name: str = "BackupLog.txt"
    keep_runs: int = 3
    audit_file: str = "audit.log"


@dataclass(slots=True)
class Settings:
    paths: PathsConfig
    companies: CompanyDirectory
    log: LogConfig = field(default_factory=LogConfig)

    @property
    def log_path(self) -> Path:
        return self.paths.log_dir / self.log.file_name

    @property
    def audit_path(self) -> Path:
        return self.paths.log_dir / self.log.audit_file


class _UniqueKeyLoader(yaml.SafeLoader):
    """SafeLoader that refuses repeated keys inside one mapping."""

    def construct_mapping(self, node, deep=False):  # type: ignore[override]
        seen = set()
        for key_node, _ in node.value:
            key = self.construct_object(key_node, deep=deep)
            if key in seen:
                raise ConfigurationError(f"Duplicate key `{key}` in configuration")
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


def _reject_duplicate_pairs(pairs: List[Tuple[str, object]]) -> Dict[str, object]:
    result: Dict[str, object] = {}
    for key, value in pairs:
        if key in result:
            raise ConfigurationError(f"Duplicate key `{key}` in configuration")
        result[key] = value
    return result


def _load_file(path: Path) -> Dict[str, object]:
    if not path.exists():
        raise ConfigurationError(f"Configuration file {path} does not exist")
    text = path.read_text(encoding="utf-8")
    try:
        suffix = path.suffix.lower()
        if suffix in {".yaml", ".yml"}:
            return yaml.load(text, Loader=_UniqueKeyLoader) or {}
        if suffix == ".json":
            return json.loads(text, object_pairs_hook=_reject_duplicate_pairs)
    except ConfigurationError:
        raise
    except (yaml.YAMLError, ValueError) as exc:
        raise ConfigurationError(f"Invalid configuration format: {exc}") from exc
    raise ConfigurationError("Unsupported configuration format; use YAML or JSON")


def _looks_like_windows_absolute(path: str) -> bool:
    return (
        len(path) > 1 and path[1] == ":"
        or path.startswith("\\\\")
        or path.startswith("//")
    )


def _coerce_config_path(value: Path | str, base_dir: Path) -> Path:
    raw_str = str(value)
    candidate = Path(value).expanduser()
    if candidate.is_absolute() or _looks_like_windows_absolute(raw_str):
        return candidate
    return (base_dir / candidate).resolve()


def _parse_paths(raw: Mapping[str, object], base_dir: Path) -> PathsConfig:
    required = ("source_dir", "backup_root", "destination_dir", "log_dir")
    missing = [key for key in required if not raw.get(key)]
    if missing:
        raise ConfigurationError(f"Missing configuration key(s): paths.{', paths.'.join(missing)}")
    resolved = {key: _coerce_config_path(raw[key], base_dir) for key in required}
    work_dir = raw.get("work_dir")
    return PathsConfig(
        **resolved,
        work_dir=_coerce_config_path(work_dir, base_dir) if work_dir else None,
    )


def build_settings(raw: Mapping[str, object], base_dir: Path) -> Settings:
    """Validate a raw configuration mapping and return :class:`Settings`."""
    paths_raw = raw.get("paths")
    if not isinstance(paths_raw, dict):
        raise ConfigurationError("`paths` section is required")
    companies_raw = raw.get("companies") or {}
    if not isinstance(companies_raw, dict):
        raise ConfigurationError("`companies` must map company codes to friendly names")
    try:
        log = LogConfig(**(raw.get("log") or {}))
    except TypeError as exc:
        raise ConfigurationError(f"Invalid `log` section: {exc}") from exc
    if log.keep_runs < 1:
        raise ConfigurationError("`log.keep_runs` must be at least 1")

    return Settings(
        paths=_parse_paths(paths_raw, base_dir),
        companies=CompanyDirectory.from_mapping(companies_raw),
        log=log,
    )


def load_settings(path: Optional[Path | str] = None) -> Settings:
    candidate_paths: List[Path] = []
    if path:
        candidate_paths.append(Path(path))
    env_path = os.getenv("BACKUPJOB_CONFIG")
    if env_path:
        candidate_paths.append(Path(env_path))
    candidate_paths.append(Path("config/settings.yaml"))

    for candidate in candidate_paths:
        if candidate.exists():
            raw = _load_file(candidate)
            config_path = candidate
            break
    else:
        raise ConfigurationError("No configuration file found")

    if not isinstance(raw, dict):
        raise ConfigurationError(f"Configuration file {config_path} must contain a mapping")
    return build_settings(raw, config_path.parent.resolve())
