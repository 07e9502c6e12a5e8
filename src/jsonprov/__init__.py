"""
jsonprov - provenance-tracking merge of JSON documents.

Merges ordered, identified JSON documents, records which document last set
every path, and projects that provenance onto JSON Schema UI annotations.
"""

import importlib.metadata as _metadata

# Version is defined in pyproject.toml - read it and parse into tuple (primary representation)
_raw_version = _metadata.version("jsonprov")
__version_info__: tuple[int, int, int] = tuple(int(x) for x in _raw_version.split(".")[:3])  # type: ignore[assignment]
__version__: str = ".".join(str(x) for x in __version_info__)

from jsonprov.enricher import (  # noqa: E402
    EnrichmentResult,
    MissingSourceIdError,
    SchemaEnricher,
    enrich_schema,
    generate_schema,
)
from jsonprov.merge import (  # noqa: E402
    MergeResult,
    ProvenanceRecord,
    SourceRecord,
    diff,
    diff_all,
    merge_all,
    merge_all_with_metadata,
)
from jsonprov.schema import SchemaTraverser, traverse_data, traverse_schema  # noqa: E402
from jsonprov.utils.json_values import ABSENT  # noqa: E402

__all__ = [
    "ABSENT",
    "EnrichmentResult",
    "MergeResult",
    "MissingSourceIdError",
    "ProvenanceRecord",
    "SchemaEnricher",
    "SourceRecord",
    "SchemaTraverser",
    "__version__",
    "__version_info__",
    "diff",
    "diff_all",
    "enrich_schema",
    "generate_schema",
    "merge_all",
    "merge_all_with_metadata",
    "traverse_data",
    "traverse_schema",
]
