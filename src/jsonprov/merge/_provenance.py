"""
Provenance-tracking merge of identified JSON documents.

Sources are folded one at a time onto a running merged value. While merging,
every mapping node of the result gets a local provenance store (kept in a
ProvenanceIndex) recording which source last wrote each immediate child.
After each source, the stores are flattened into a global map keyed by
dotted path.

Example:
    >>> result = merge_all_with_metadata([
    ...     SourceRecord("s1", {"a": {"b": 1}}),
    ...     SourceRecord("s2", {"a": {"c": 2}}),
    ... ])
    >>> result.merged
    {'a': {'b': 1, 'c': 2}}
    >>> result.provenance["a.b"].source_id, result.provenance["a"].source_id
    ('s1', 's2')
"""

from __future__ import annotations

import collections.abc as _abc
import dataclasses as _dataclasses
import logging as _logging
import typing as _typing

import jsonprov.config.types as config_types
import jsonprov.merge._baseline as _baseline
import jsonprov.merge._index as _index
import jsonprov.merge._types as _types
import jsonprov.utils.json_values as json_values

_logger = _logging.getLogger(__name__)

ProvenanceMap: _typing.TypeAlias = dict[str, _types.ProvenanceRecord]


@_dataclasses.dataclass(frozen=True)
class MergeResult:
    """
    Outcome of merge_all_with_metadata().

    Attributes:
        merged: The merged JSON value.
        provenance: Dotted path -> ProvenanceRecord for every path present
            in ``merged`` (the root itself has no entry).
        index: Per-node accessor. ``index.accessor(node)`` gives the local
            provenance of any mapping node inside ``merged``.

    Unpacks as ``merged, provenance = result``.
    """

    merged: _typing.Any
    provenance: ProvenanceMap
    index: _index.ProvenanceIndex

    def __iter__(self) -> _typing.Iterator[_typing.Any]:
        yield self.merged
        yield self.provenance

    def accessor(self, node: object | None = None) -> _abc.Mapping[str, _types.ProvenanceRecord] | None:
        """Local provenance of ``node`` (default: the merged root)."""
        return self.index.accessor(self.merged if node is None else node)


class ProvenanceMerger:
    """
    Folds SourceRecords onto a running merged value, tracking provenance.

    A merger can be fed incrementally with add(); each call is one merge
    pass. merge_all_with_metadata() is the one-shot wrapper.

    Ownership: the merger never modifies caller data. Source values are
    cloned on the way in; the merged tree is built from fresh dicts and
    lists. Subtrees a pass does not touch are carried over from the
    previous pass together with their local stores.

    Thread safety: NOT thread-safe.
    """

    def __init__(self, options: _baseline.MergeOptionsLike = None) -> None:
        """
        Args:
            options: Merge options (array_strategy applies to arrays).

        Raises:
            InvalidConfigurationError: If options are invalid.
        """
        self._options = config_types.resolve_merge_options(options)
        self._index = _index.ProvenanceIndex()
        self._merged: _typing.Any = {}
        self._provenance: ProvenanceMap = {}
        self._passes = 0

    @property
    def merged(self) -> _typing.Any:
        """The current merged value."""
        return self._merged

    @property
    def provenance(self) -> ProvenanceMap:
        """The current global provenance map."""
        return self._provenance

    @property
    def index(self) -> _index.ProvenanceIndex:
        return self._index

    def add(self, source: _types.SourceRecord | _abc.Mapping[str, _typing.Any]) -> None:
        """
        Merge one source onto the running value, then refresh the global map.

        Args:
            source: A SourceRecord or ``{"id": ..., "data": ...}`` mapping.
        """
        record = _types.SourceRecord.coerce(source)
        self._merged = self._merge_step(self._merged, record.data, record.id, (), None)
        self._passes += 1
        self._read_back()

    def result(self) -> MergeResult:
        """Snapshot of the current state as a MergeResult."""
        return MergeResult(self._merged, dict(self._provenance), self._index.copy())

    # =========================================================================
    # Merge step
    # =========================================================================

    def _merge_step(
        self,
        target: _typing.Any,
        source: _typing.Any,
        source_id: _types.SourceId,
        path: _types.Path,
        parent_store: _index.LocalStore | None,
    ) -> _typing.Any:
        """
        Merge ``source`` onto ``target`` at ``path``.

        Writes the provenance of the value at ``path`` into ``parent_store``
        under the path's final segment. The root has no parent store.

        Args:
            target: Current value at path (None when missing).
            source: Incoming value at path.
            source_id: Identifier of the source being merged.
            path: Segments from the root to this value.
            parent_store: Local store of the mapping that contains path.

        Returns:
            The merged value for path.
        """
        if source is json_values.ABSENT:
            # The containing mapping already removed the key
            if parent_store is not None and path:
                parent_store.pop(path[-1], None)
            return target

        if json_values.is_sequence(source):
            merged_array = (
                _baseline.merge_arrays(target, source, self._options.array_strategy)
                if json_values.is_sequence(target)
                else json_values.deep_clone(source)
            )
            self._record(parent_store, source_id, path, merged_array)
            return merged_array

        if json_values.is_mapping(source):
            result = self._merge_mapping(target, source, source_id, path)
            self._record(parent_store, source_id, path, result)
            return result

        value = json_values.deep_clone(source)
        self._record(parent_store, source_id, path, value)
        return value

    def _merge_mapping(
        self,
        target: _typing.Any,
        source: _abc.Mapping[str, _typing.Any],
        source_id: _types.SourceId,
        path: _types.Path,
    ) -> dict[str, _typing.Any]:
        """Merge a mapping source, building a new node with its own local store."""
        store: _index.LocalStore = {}
        if json_values.is_mapping(target):
            result = dict(target)
            # Attributes this source does not touch keep their history
            previous = self._index.store_for(target)
            if previous:
                store.update((key, previous[key]) for key in result if key in previous)
        else:
            result = {}
        self._index.attach(result, store)

        for raw_key, value in source.items():
            key = str(raw_key)
            if value is json_values.ABSENT:
                result.pop(key, None)
                store.pop(key, None)
                continue
            result[key] = self._merge_step(result.get(key), value, source_id, path + (key,), store)
        return result

    def _record(
        self,
        store: _index.LocalStore | None,
        source_id: _types.SourceId,
        path: _types.Path,
        value: _typing.Any,
    ) -> None:
        if store is None or not path:
            return
        store[path[-1]] = _types.ProvenanceRecord(
            source_id=source_id,
            path=_types.join_path(path),
            value=json_values.deep_clone(value),
        )

    # =========================================================================
    # Read-back
    # =========================================================================

    def _read_back(self) -> None:
        """
        Flatten every reachable node's local store into the global map.

        Entries for paths that no longer exist (deleted keys, replaced
        subtrees) are purged, and index entries for unreachable nodes are
        dropped.
        """
        seen: set[str] = set()
        reachable: list[object] = []
        stack: list[_typing.Any] = [self._merged]

        while stack:
            node = stack.pop()
            if json_values.is_mapping(node):
                reachable.append(node)
                store = self._index.store_for(node)
                for key, value in node.items():
                    record = store.get(key) if store is not None else None
                    if record is not None:
                        self._provenance[record.path] = record
                        seen.add(record.path)
                    stack.append(value)
            elif json_values.is_sequence(node):
                stack.extend(node)

        stale = [path for path in self._provenance if path not in seen]
        for path in stale:
            del self._provenance[path]
        dropped = self._index.retain(reachable)

        _logger.debug(
            "merge pass %d: %d paths tracked, %d purged, %d index entries dropped",
            self._passes,
            len(self._provenance),
            len(stale),
            dropped,
        )


def merge_all_with_metadata(
    sources: _abc.Iterable[_types.SourceRecord | _abc.Mapping[str, _typing.Any]],
    options: _baseline.MergeOptionsLike = None,
) -> MergeResult:
    """
    Merge identified documents in order, recording per-path provenance.

    Later sources win for every path they touch. Touching any attribute
    inside an object counts as rewriting that object, so the object's own
    provenance moves to the later source while untouched attributes keep
    theirs. An ABSENT value removes the key and its provenance.

    Arrays are atomic for provenance: element-level history is not tracked.
    If the final value is not a mapping, the provenance map is empty.

    Mapping keys become strings (``{1: "x"}`` merges as ``{"1": "x"}``) so
    that every key has a dotted path. merge() and merge_all() keep keys as
    given, so for non-string keys their result differs from ``merged`` here.

    Args:
        sources: SourceRecords or ``{"id": ..., "data": ...}`` mappings.
        options: Merge options.

    Returns:
        MergeResult with the merged value, the global provenance map, and
        the per-node accessor index.

    Raises:
        InvalidConfigurationError: If options are invalid.
        TypeError: If a source is not a SourceRecord or id/data mapping.
    """
    merger = ProvenanceMerger(options)
    for source in sources:
        merger.add(source)
    return merger.result()
