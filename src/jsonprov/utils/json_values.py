"""
Helpers for the JSON value model.

A JSON value is recursively one of: None, bool, int, float, str, a list of
JSON values, or a dict mapping str keys to JSON values. Tuples are accepted
wherever a sequence is expected.

ABSENT is the "no value here" sentinel. Inside a source mapping it requests
deletion of the key; inside a diff it marks a removed key; during data-bound
schema traversal it is the data value of a property the data does not have.
"""

from __future__ import annotations

import collections.abc as _abc
import copy as _copy
import typing as _typing


# Helper function to reconstruct the ABSENT singleton during unpickle/deepcopy
def _get_absent_singleton() -> _AbsentType:
    """Return the ABSENT singleton. Called by pickle and copy to reconstruct."""
    return ABSENT


class _AbsentType:
    """Sentinel type marking a missing or deleted value."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "<ABSENT>"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> tuple[_typing.Callable[[], _AbsentType], tuple[()]]:
        """Pickle/deepcopy support: ensure singleton is preserved."""
        return (_get_absent_singleton, ())


ABSENT = _AbsentType()


def is_mapping(value: object) -> bool:
    """True for JSON objects (any Mapping)."""
    return isinstance(value, _abc.Mapping)


def is_sequence(value: object) -> bool:
    """True for JSON arrays (list or tuple, never str/bytes)."""
    return isinstance(value, (list, tuple))


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def deep_clone(value: _typing.Any) -> _typing.Any:
    """
    Deep-copy a JSON value.

    Mappings come back as plain dicts and sequences as lists, so a clone never
    shares a container with its input. ABSENT is returned as itself.
    """
    if is_mapping(value):
        return {key: deep_clone(item) for key, item in value.items()}
    if is_sequence(value):
        return [deep_clone(item) for item in value]
    if isinstance(value, (str, int, float, bool)) or value is None or value is ABSENT:
        return value
    return _copy.deepcopy(value)


def deep_equal(left: _typing.Any, right: _typing.Any) -> bool:
    """
    Structural equality over JSON values.

    - Mappings are equal when they have the same key set and equal values.
    - Sequences are equal when they have the same length and equal items.
    - bool never equals a number; int and float compare by value.
    """
    if left is right:
        return True

    if is_mapping(left) or is_mapping(right):
        if not (is_mapping(left) and is_mapping(right)):
            return False
        if len(left) != len(right):
            return False
        for key, value in left.items():
            if key not in right:
                return False
            if not deep_equal(value, right[key]):
                return False
        return True

    if is_sequence(left) or is_sequence(right):
        if not (is_sequence(left) and is_sequence(right)):
            return False
        if len(left) != len(right):
            return False
        return all(deep_equal(a, b) for a, b in zip(left, right))

    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right

    if _is_number(left) and _is_number(right):
        return bool(left == right)

    if type(left) is not type(right):
        return False
    return bool(left == right)


def to_jsonable(value: _typing.Any) -> _typing.Any:
    """
    Convert a value for json.dumps.

    ABSENT has no JSON spelling and is rendered as None.
    """
    if value is ABSENT:
        return None
    if is_mapping(value):
        return {key: to_jsonable(item) for key, item in value.items()}
    if is_sequence(value):
        return [to_jsonable(item) for item in value]
    return value
