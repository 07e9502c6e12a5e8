"""
LocalProvenance: the read-only face of a node's local store.

ProvenanceIndex.accessor() hands these out. The view wraps the store itself,
not a copy, so it always reflects what the store currently holds.
"""

from __future__ import annotations

import collections.abc as _abc
import typing as _typing

if _typing.TYPE_CHECKING:
    import jsonprov.merge._types as _types


class LocalProvenance(_abc.Mapping[str, "_types.ProvenanceRecord"]):
    """
    Child key -> ProvenanceRecord for one merged mapping node.

    Example:
        >>> local = result.accessor()
        >>> local["name"].source_id
        'team'
        >>> local.source_ids()
        {'base', 'team'}
    """

    __slots__ = ("_store",)

    def __init__(self, store: dict[str, _types.ProvenanceRecord]) -> None:
        self._store = store

    def __getitem__(self, key: str) -> _types.ProvenanceRecord:
        return self._store[key]

    def __iter__(self) -> _typing.Iterator[str]:
        return iter(self._store)

    def __len__(self) -> int:
        return len(self._store)

    def source_ids(self) -> set[_types.SourceId]:
        """Every source that wrote at least one child of this node."""
        return {record.source_id for record in self._store.values()}

    def keys_from(self, source_id: _types.SourceId) -> list[str]:
        """Child keys whose current value came from ``source_id``."""
        return [key for key, record in self._store.items() if record.source_id == source_id]

    def __repr__(self) -> str:
        return f"LocalProvenance({sorted(self._store)!r})"

    __hash__ = None  # type: ignore[assignment]
