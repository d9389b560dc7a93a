"""Configuration schema — dataclasses for every config section."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

OutputFormat = Literal["terminal", "json", "yaml"]
LogFormat = Literal["console", "json"]

OUTPUT_FORMATS = ("terminal", "json", "yaml")
LOG_FORMATS = ("console", "json")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class GitConfig:
    timeout: int = 30  # seconds per git invocation
    context_lines: int = 3  # passed to git diff --unified


@dataclass
class OutputConfig:
    format: OutputFormat = "terminal"
    show_line_numbers: bool = True


@dataclass
class LogConfig:
    level: str = "WARNING"
    format: LogFormat = "console"


@dataclass
class GitStageConfig:
    version: str = "1.0"
    git: GitConfig = field(default_factory=GitConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    log: LogConfig = field(default_factory=LogConfig)
