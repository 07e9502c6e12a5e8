"""
ProvenanceIndex: the out-of-band provenance accessor for merged trees.

Every mapping node of a merged tree owns a local provenance store mapping
each immediate child key to the ProvenanceRecord of the source that last
wrote it. Stores are kept in this identity-keyed sidecar rather than on the
node itself, so merged values stay plain dicts with no hidden keys.
"""

from __future__ import annotations

import collections.abc as _abc
import typing as _typing

import jsonprov.merge._local as _local
import jsonprov.merge._types as _types

LocalStore: _typing.TypeAlias = dict[str, _types.ProvenanceRecord]


class ProvenanceIndex:
    """
    Identity-keyed map from merged mapping nodes to their local stores.

    Entries hold a reference to their node so an id() is never reused by a
    different object while the entry is alive.

    Thread safety: NOT thread-safe. One index belongs to one merge.
    """

    def __init__(self) -> None:
        self._entries: dict[int, tuple[_abc.Mapping[str, _typing.Any], LocalStore]] = {}

    def attach(self, node: _abc.Mapping[str, _typing.Any], store: LocalStore) -> None:
        """Make ``store`` the local provenance store of ``node``."""
        self._entries[id(node)] = (node, store)

    def store_for(self, node: object) -> LocalStore | None:
        """Return the mutable local store of ``node``, or None if untracked."""
        entry = self._entries.get(id(node))
        if entry is None or entry[0] is not node:
            return None
        return entry[1]

    def accessor(self, node: object) -> _local.LocalProvenance | None:
        """
        Return a read-only view of ``node``'s local store.

        Returns:
            Mapping of immediate child key to ProvenanceRecord, or None when
            ``node`` is not a tracked mapping (scalars, arrays, foreign dicts).
        """
        store = self.store_for(node)
        if store is None:
            return None
        return _local.LocalProvenance(store)

    def lookup(self, node: object, key: str) -> _types.ProvenanceRecord | None:
        """Return the provenance record for ``node[key]``, if any."""
        store = self.store_for(node)
        if store is None:
            return None
        return store.get(key)

    def retain(self, nodes: _abc.Iterable[object]) -> int:
        """
        Drop entries for every node not in ``nodes``.

        Args:
            nodes: The nodes that are still reachable from the merged value.

        Returns:
            Number of entries dropped.
        """
        keep = {id(node) for node in nodes}
        stale = [key for key in self._entries if key not in keep]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def copy(self) -> ProvenanceIndex:
        """
        Return an index with the same entries.

        Stores are shared, not copied: a merge pass only ever attaches new
        stores, so a store is never written after the pass that built it.
        """
        duplicate = ProvenanceIndex()
        duplicate._entries = dict(self._entries)
        return duplicate

    def __contains__(self, node: object) -> bool:
        return self.store_for(node) is not None

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"ProvenanceIndex({len(self._entries)} nodes)"
