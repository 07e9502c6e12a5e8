"""
Shared constants for jsonprov.

This module provides a single source of truth for default values
that are used across multiple modules.
"""

# Merge/diff defaults
DEFAULT_MERGE_ARRAY_STRATEGY = "replace"
"""Default array strategy for merges: the later array replaces the earlier one."""

DEFAULT_DIFF_ARRAY_STRATEGY = "replace"
"""Default array strategy for diffs: a differing array is recorded wholesale."""

# Paths
PATH_SEPARATOR = "."
"""Separator used to build dotted paths. Literal dots inside keys are not escaped."""

# Annotation map
WIDGET_KEY = "widget"
"""Key of the widget descriptor inside an annotation map entry."""

SOURCE_ID_KEY = "id"
"""Key holding the source identifier on identified objects passed to the enricher."""

SCHEMA_SOURCE_ID_KEY = "x-source-id"
"""Schema keyword written by generate_schema to record a default's source."""

# Config locations
ENV_PREFIX = "JSONPROV_"
"""Environment variable prefix for Settings."""

PROJECT_CONFIG_DIR = ".jsonprov"
"""Project-level config directory (holds config.yaml)."""
