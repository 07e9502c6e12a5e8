"""Option and configuration types for jsonprov.

This module defines the Pydantic models that describe how merges and diffs
combine values, plus the config sections nested inside Settings.

- MergeOptions: array_strategy for merge / merge_all / merge_all_with_metadata
- DiffOptions: array_strategy for diff / diff_all
- LoggingConfig: log level used by the CLI

Design decision: option models use `extra="forbid"`. A misspelled option or
an unknown strategy is a caller mistake and is rejected eagerly with
InvalidConfigurationError instead of silently falling back to a default.
"""

import collections.abc as _abc
import typing as _typing

import pydantic as _pydantic

import jsonprov.constants as constants

ArrayMergeStrategy: _typing.TypeAlias = _typing.Literal["replace", "concat"]
ArrayDiffStrategy: _typing.TypeAlias = _typing.Literal["replace", "elements"]


class InvalidConfigurationError(ValueError):
    """Raised when merge or diff options are invalid."""

    pass


# =============================================================================
# Base class
# =============================================================================


class OptionsBase(_pydantic.BaseModel):
    """
    Base class for option and config section types.

    Options are immutable once validated so a single instance can be shared
    across calls.
    """

    model_config = _pydantic.ConfigDict(extra="forbid", frozen=True)


# =============================================================================
# Merge / Diff options
# =============================================================================


class MergeOptions(OptionsBase):
    """
    Options for deep merging.

    YAML section: merge.*
    """

    array_strategy: ArrayMergeStrategy = _pydantic.Field(
        default=constants.DEFAULT_MERGE_ARRAY_STRATEGY,
        validation_alias=_pydantic.AliasChoices("array_strategy", "arrayStrategy"),
    )
    """How two arrays at the same position combine: replace or concat."""


class DiffOptions(OptionsBase):
    """
    Options for structural diffs.

    YAML section: diff.*
    """

    array_strategy: ArrayDiffStrategy = _pydantic.Field(
        default=constants.DEFAULT_DIFF_ARRAY_STRATEGY,
        validation_alias=_pydantic.AliasChoices("array_strategy", "arrayStrategy"),
    )
    """How two differing arrays are recorded. "elements" currently behaves like "replace"."""


# =============================================================================
# Logging Settings
# =============================================================================


class LoggingConfig(OptionsBase):
    """
    Logging settings.

    YAML section: logging.*
    """

    level: _typing.Literal["debug", "info", "warning", "error"] = "warning"
    """Root log level for the CLI."""


_OptionsT = _typing.TypeVar("_OptionsT", bound=OptionsBase)


def _resolve(
    model_cls: type[_OptionsT],
    options: _OptionsT | _abc.Mapping[str, _typing.Any] | None,
) -> _OptionsT:
    """
    Normalize caller-supplied options into a validated model.

    Args:
        model_cls: The options model to produce.
        options: None (defaults), a model instance, or a plain mapping.

    Returns:
        A validated options instance.

    Raises:
        InvalidConfigurationError: If options has an unsupported type, an
            unknown key, or an invalid value.
    """
    if options is None:
        return model_cls()
    if isinstance(options, model_cls):
        return options
    if not isinstance(options, _abc.Mapping):
        raise InvalidConfigurationError(
            f"{model_cls.__name__} must be a mapping or {model_cls.__name__}, "
            f"got {type(options).__name__}"
        )
    try:
        return model_cls.model_validate(dict(options))
    except _pydantic.ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()
        )
        raise InvalidConfigurationError(f"Invalid {model_cls.__name__}: {details}") from e


def resolve_merge_options(
    options: MergeOptions | _abc.Mapping[str, _typing.Any] | None,
) -> MergeOptions:
    """Validate options for the merge operations."""
    return _resolve(MergeOptions, options)


def resolve_diff_options(
    options: DiffOptions | _abc.Mapping[str, _typing.Any] | None,
) -> DiffOptions:
    """Validate options for the diff operations."""
    return _resolve(DiffOptions, options)
