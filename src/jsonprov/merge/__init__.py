"""
Deep merge, diff, and provenance-tracking merge of JSON values.

Example:
    >>> from jsonprov.merge import SourceRecord, merge_all_with_metadata
    >>> merged, provenance = merge_all_with_metadata([
    ...     SourceRecord("1", {"name": "Alice", "age": 25}),
    ...     SourceRecord("2", {"name": "Bob"}),
    ... ])
    >>> merged
    {'name': 'Bob', 'age': 25}
    >>> provenance["name"].source_id
    '2'
"""

from jsonprov.merge._baseline import diff, diff_all, merge, merge_all, merge_arrays
from jsonprov.merge._index import ProvenanceIndex
from jsonprov.merge._local import LocalProvenance
from jsonprov.merge._provenance import MergeResult, ProvenanceMerger, merge_all_with_metadata
from jsonprov.merge._types import Path, ProvenanceRecord, SourceRecord, join_path

__all__ = [
    "LocalProvenance",
    "MergeResult",
    "Path",
    "ProvenanceIndex",
    "ProvenanceMerger",
    "ProvenanceRecord",
    "SourceRecord",
    "diff",
    "diff_all",
    "join_path",
    "merge",
    "merge_all",
    "merge_all_with_metadata",
    "merge_arrays",
]
