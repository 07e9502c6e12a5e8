"""
Stateless deep merge and structural diff of JSON values.

merge() folds one value onto a clone of another; diff() produces the
smallest mapping that merge() can apply to get from one value to another,
using ABSENT to mark removed keys.

Example:
    >>> merge({"a": 1, "b": {"c": 2}}, {"b": {"d": 3}})
    {'a': 1, 'b': {'c': 2, 'd': 3}}
    >>> diff({"a": 1, "b": 2}, {"a": 1, "c": 3})
    {'b': <ABSENT>, 'c': 3}
"""

from __future__ import annotations

import collections.abc as _abc
import logging as _logging
import typing as _typing

import jsonprov.config.types as config_types
import jsonprov.utils.json_values as json_values

_logger = _logging.getLogger(__name__)

# Returned by _diff_values when both sides are equal (None is a valid diff value)
_UNCHANGED = object()

MergeOptionsLike: _typing.TypeAlias = (
    "config_types.MergeOptions | _abc.Mapping[str, _typing.Any] | None"
)
DiffOptionsLike: _typing.TypeAlias = (
    "config_types.DiffOptions | _abc.Mapping[str, _typing.Any] | None"
)


# =============================================================================
# Merge
# =============================================================================


def merge_arrays(
    base: _abc.Sequence[_typing.Any],
    override: _abc.Sequence[_typing.Any],
    strategy: config_types.ArrayMergeStrategy,
) -> list[_typing.Any]:
    """
    Combine two arrays.

    Args:
        base: The earlier array.
        override: The later array.
        strategy: "replace" returns a clone of override; "concat" returns
            clones of base's items followed by override's.

    Returns:
        New list (never aliases either input).
    """
    if strategy == "concat":
        return json_values.deep_clone(base) + json_values.deep_clone(override)
    return json_values.deep_clone(override)


def _merge_values(
    base: _typing.Any,
    override: _typing.Any,
    options: config_types.MergeOptions,
) -> _typing.Any:
    if json_values.is_sequence(base) and json_values.is_sequence(override):
        return merge_arrays(base, override, options.array_strategy)
    if json_values.is_mapping(override):
        # A mapping replacing a non-mapping still drops its ABSENT keys
        return _merge_objects(base if json_values.is_mapping(base) else {}, override, options)
    # Scalar or type mismatch: override wins
    return json_values.deep_clone(override)


def _merge_objects(
    base: _abc.Mapping[str, _typing.Any],
    override: _abc.Mapping[str, _typing.Any],
    options: config_types.MergeOptions,
) -> dict[str, _typing.Any]:
    result = json_values.deep_clone(base)
    for key, value in override.items():
        if value is json_values.ABSENT:
            result.pop(key, None)
            continue
        result[key] = _merge_values(result.get(key), value, options)
    return result


def merge(
    base: _typing.Any,
    override: _typing.Any,
    options: MergeOptionsLike = None,
) -> _typing.Any:
    """
    Deep-merge ``override`` onto a clone of ``base``.

    - Both arrays: combined per options.array_strategy.
    - Both mappings: merged key by key; keys present on one side only are
      cloned. A key whose override value is ABSENT is removed.
    - Anything else (type mismatch, scalars, None): override wins, cloned.

    Neither input is modified.

    Raises:
        InvalidConfigurationError: If options are invalid.
    """
    resolved = config_types.resolve_merge_options(options)
    return _merge_values(json_values.deep_clone(base), override, resolved)


def merge_all(
    values: _abc.Iterable[_typing.Any],
    options: MergeOptionsLike = None,
) -> _typing.Any:
    """
    Left-to-right fold of merge(), starting from an empty mapping.

    An empty input yields {}; a single value yields a deep clone of it.

    Raises:
        InvalidConfigurationError: If options are invalid.
    """
    resolved = config_types.resolve_merge_options(options)
    result: _typing.Any = {}
    count = 0
    for value in values:
        result = _merge_values(result, value, resolved)
        count += 1
    _logger.debug("merge_all folded %d values (array_strategy=%s)", count, resolved.array_strategy)
    return result


# =============================================================================
# Diff
# =============================================================================


def _diff_arrays(
    old: _abc.Sequence[_typing.Any],
    new: _abc.Sequence[_typing.Any],
    options: config_types.DiffOptions,
) -> _typing.Any:
    # "elements" is accepted but records the array wholesale, like "replace"
    del options
    if json_values.deep_equal(old, new):
        return _UNCHANGED
    return json_values.deep_clone(new)


def _diff_objects(
    old: _abc.Mapping[str, _typing.Any],
    new: _abc.Mapping[str, _typing.Any],
    options: config_types.DiffOptions,
) -> dict[str, _typing.Any]:
    result: dict[str, _typing.Any] = {}
    keys = list(old) + [key for key in new if key not in old]

    for key in keys:
        if key not in old:
            result[key] = json_values.deep_clone(new[key])
            continue
        if key not in new:
            result[key] = json_values.ABSENT
            continue

        old_value, new_value = old[key], new[key]
        if json_values.deep_equal(old_value, new_value):
            continue
        value_diff = _diff_values(old_value, new_value, options)
        if value_diff is _UNCHANGED or (json_values.is_mapping(value_diff) and not value_diff):
            # Guard against nested diffs that underreport a real difference
            result[key] = json_values.deep_clone(new_value)
        else:
            result[key] = value_diff
    return result


def _diff_values(
    old: _typing.Any,
    new: _typing.Any,
    options: config_types.DiffOptions,
) -> _typing.Any:
    """Return the diff from old to new, or _UNCHANGED when they are equal."""
    if json_values.deep_equal(old, new):
        return _UNCHANGED
    if json_values.is_sequence(old) and json_values.is_sequence(new):
        return _diff_arrays(old, new, options)
    if json_values.is_mapping(old) and json_values.is_mapping(new):
        object_diff = _diff_objects(old, new, options)
        return object_diff or _UNCHANGED
    return json_values.deep_clone(new)


def diff(
    old: _typing.Any,
    new: _typing.Any,
    options: DiffOptionsLike = None,
) -> _typing.Any:
    """
    Compute the change from ``old`` to ``new``.

    For mappings, the result holds only the keys that differ: added and
    changed keys carry the new value (nested mappings are diffed
    recursively), removed keys carry ABSENT. For flat mappings,
    ``merge(old, diff(old, new)) == new``.

    Equal inputs yield {}. Differing non-mapping inputs yield a clone of new.

    Raises:
        InvalidConfigurationError: If options are invalid.
    """
    resolved = config_types.resolve_diff_options(options)
    result = _diff_values(old, new, resolved)
    return {} if result is _UNCHANGED else result


def diff_all(
    values: _abc.Sequence[_typing.Any],
    options: DiffOptionsLike = None,
) -> _typing.Any:
    """
    Diff the first value against the last.

    Intermediate values do not affect the result; this is not a chained
    diff. Fewer than two values yield {}.

    Raises:
        InvalidConfigurationError: If options are invalid.
    """
    resolved = config_types.resolve_diff_options(options)
    if len(values) < 2:
        return {}
    return diff(values[0], values[-1], resolved)
