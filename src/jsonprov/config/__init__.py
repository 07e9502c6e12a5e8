"""
Configuration module for jsonprov.

Option models for the merge/diff operations and pydantic-settings based
Settings for the command-line interface.
"""

from jsonprov.config.settings import Settings
from jsonprov.config.sources import ConfigFileError
from jsonprov.config.types import (
    DiffOptions,
    InvalidConfigurationError,
    LoggingConfig,
    MergeOptions,
    resolve_diff_options,
    resolve_merge_options,
)

__all__ = [
    "ConfigFileError",
    "DiffOptions",
    "InvalidConfigurationError",
    "LoggingConfig",
    "MergeOptions",
    "Settings",
    "resolve_diff_options",
    "resolve_merge_options",
]
