"""Configuration loading, schema, and defaults."""

from gitstage.config.loader import ConfigError, load_config
from gitstage.config.schema import GitStageConfig

__all__ = [
    "ConfigError",
    "GitStageConfig",
    "load_config",
]
