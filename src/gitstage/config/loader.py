"""Load and merge configuration from .gitstage.toml and env vars."""

from __future__ import annotations

import dataclasses
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from gitstage.config.schema import (
    LOG_LEVELS,
    OUTPUT_FORMATS,
    GitConfig,
    GitStageConfig,
    LogConfig,
    OutputConfig,
)

CONFIG_FILENAME = ".gitstage.toml"


class ConfigError(Exception):
    """Raised when config is malformed or unreadable."""


def find_config_file(repo_root: Path, override: Optional[str] = None) -> Optional[Path]:
    """Locate the config file. *override* takes precedence."""
    if override:
        p = Path(override)
        if not p.is_file():
            raise ConfigError(f"Config file not found: {override}")
        return p
    candidate = repo_root / CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def _parse_toml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc


def _non_negative_int(value: str) -> Optional[int]:
    try:
        number = int(value)
    except ValueError:
        return None
    return number if number >= 0 else None


def _merge_env_overrides(cfg: GitStageConfig) -> None:
    """Apply GITSTAGE_* environment variable overrides."""
    if val := os.environ.get("GITSTAGE_FORMAT"):
        if val in OUTPUT_FORMATS:
            cfg.output.format = val  # type: ignore[assignment]
    if val := os.environ.get("GITSTAGE_LOG_LEVEL"):
        if val.upper() in LOG_LEVELS:
            cfg.log.level = val.upper()
    if val := os.environ.get("GITSTAGE_GIT_TIMEOUT"):
        if (timeout := _non_negative_int(val)) is not None and timeout > 0:
            cfg.git.timeout = timeout
    if val := os.environ.get("GITSTAGE_CONTEXT_LINES"):
        if (lines := _non_negative_int(val)) is not None:
            cfg.git.context_lines = lines


def _build_section(data: Dict[str, Any], cls: type, section: str):
    """Build a dataclass from a TOML section dict, ignoring unknown keys."""
    valid_fields = {f.name for f in dataclasses.fields(cls)}
    raw = data.get(section, {})
    if not isinstance(raw, dict):
        raise ConfigError(f"[{section}] must be a table")
    filtered = {k: v for k, v in raw.items() if k in valid_fields}
    return cls(**filtered)


def load_config(
    repo_root: Path,
    config_override: Optional[str] = None,
) -> GitStageConfig:
    """Load, validate, and return a GitStageConfig."""
    config_path = find_config_file(repo_root, config_override)

    if config_path is None:
        cfg = GitStageConfig()
    else:
        raw = _parse_toml(config_path)
        cfg = GitStageConfig(
            version=raw.get("version", "1.0"),
            git=_build_section(raw, GitConfig, "git"),
            output=_build_section(raw, OutputConfig, "output"),
            log=_build_section(raw, LogConfig, "log"),
        )

    if cfg.output.format not in OUTPUT_FORMATS:
        raise ConfigError(f"Unknown output format: {cfg.output.format!r}")
    cfg.log.level = str(cfg.log.level).upper()
    if cfg.log.level not in LOG_LEVELS:
        raise ConfigError(f"Unknown log level: {cfg.log.level!r}")

    _merge_env_overrides(cfg)
    return cfg
