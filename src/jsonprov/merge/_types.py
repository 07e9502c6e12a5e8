"""
Types for the merge engines.

This module provides:
- Path: Tuple of strings representing a nested key path
- SourceRecord: An identified JSON document contributing to a merge
- ProvenanceRecord: Which source last determined the value at a path
"""

from __future__ import annotations

import collections.abc as _abc
import dataclasses as _dataclasses
import typing as _typing

import jsonprov.constants as constants

# Path alias for nested key paths
# Example: ("config", "model", "name") represents config.model.name
Path: _typing.TypeAlias = tuple[str, ...]

# Source identifiers are user-supplied and need not be unique
SourceId: _typing.TypeAlias = _typing.Union[str, int]


def join_path(path: Path) -> str:
    """Join path segments into the dotted form used as provenance map keys."""
    return constants.PATH_SEPARATOR.join(path)


@_dataclasses.dataclass(frozen=True, slots=True)
class SourceRecord:
    """An identified JSON document. Later records win for every path they touch."""

    id: SourceId
    data: _typing.Any

    @classmethod
    def coerce(cls, value: SourceRecord | _abc.Mapping[str, _typing.Any]) -> SourceRecord:
        """
        Build a SourceRecord from a record or an ``{"id": ..., "data": ...}`` mapping.

        Raises:
            TypeError: If value is neither a SourceRecord nor a mapping with
                both "id" and "data" keys.
        """
        if isinstance(value, SourceRecord):
            return value
        if isinstance(value, _abc.Mapping) and "id" in value and "data" in value:
            return cls(id=value["id"], data=value["data"])
        raise TypeError(
            "Source must be a SourceRecord or a mapping with 'id' and 'data' keys, "
            f"got {type(value).__name__}"
        )


@_dataclasses.dataclass(frozen=True, slots=True)
class ProvenanceRecord:
    """
    The value at ``path`` was most recently set by ``source_id``.

    ``value`` is a deep snapshot taken when the record was written, so later
    changes to the merged tree do not leak into it.
    """

    source_id: SourceId
    path: str
    value: _typing.Any

    @property
    def segments(self) -> Path:
        """Path segments. Ambiguous when a key itself contains a dot."""
        if not self.path:
            return ()
        return tuple(self.path.split(constants.PATH_SEPARATOR))
