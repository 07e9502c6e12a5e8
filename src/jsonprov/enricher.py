"""
Project merge provenance onto schema UI annotations.

SchemaEnricher merges a list of identified documents, walks the schema
against the merged value, and for every visited path with a provenance
record writes a widget descriptor into the caller's annotation map:

    {"widget": {"sourceIds": ["2"], "inheritedValue": "Bob"}}

generate_schema() is the companion that writes merged values back into a
copy of the schema as ``default`` (and ``x-source-id``) keywords.
"""

from __future__ import annotations

import collections.abc as _abc
import copy as _copy
import dataclasses as _dataclasses
import logging as _logging
import typing as _typing

import jsonprov.constants as constants
import jsonprov.merge._baseline as _baseline
import jsonprov.merge._provenance as _provenance
import jsonprov.merge._types as _types
import jsonprov.schema._context as _context
import jsonprov.schema._traverser as _traverser
import jsonprov.utils.json_values as json_values

_logger = _logging.getLogger(__name__)

IdentifiedObject: _typing.TypeAlias = _typing.Union[_types.SourceRecord, _abc.Mapping[str, _typing.Any]]

# Schema types whose nodes get a default even without provenance
_CONTAINER_TYPES = frozenset({"object", "array"})


class MissingSourceIdError(ValueError):
    """An identified object has no id."""

    def __init__(self, position: int) -> None:
        self.position = position
        super().__init__(f"Object at position {position} has no {constants.SOURCE_ID_KEY!r} key")


@_dataclasses.dataclass(frozen=True)
class EnrichmentResult:
    """
    Outcome of SchemaEnricher.enrich_schema().

    Unpacks as ``schema, schema_ui, merged = result``. ``provenance`` is the
    global provenance map the annotations were built from.
    """

    schema: _typing.Any
    schema_ui: _abc.MutableMapping[str, _typing.Any]
    merged: _typing.Any
    provenance: _provenance.ProvenanceMap

    def __iter__(self) -> _typing.Iterator[_typing.Any]:
        yield self.schema
        yield self.schema_ui
        yield self.merged


def _to_source_record(position: int, obj: IdentifiedObject) -> _types.SourceRecord:
    """
    A SourceRecord passes through. A mapping is merged whole (its id
    included) under its own id.
    """
    if isinstance(obj, _types.SourceRecord):
        return obj
    if not isinstance(obj, _abc.Mapping):
        raise TypeError(
            f"Object at position {position} must be a SourceRecord or a mapping, "
            f"got {type(obj).__name__}"
        )
    if constants.SOURCE_ID_KEY not in obj:
        raise MissingSourceIdError(position)
    return _types.SourceRecord(id=obj[constants.SOURCE_ID_KEY], data=obj)


def _source_ids(source_id: _typing.Any) -> list[_typing.Any]:
    if isinstance(source_id, (list, tuple)):
        return list(source_id)
    return [source_id]


def build_widget(record: _types.ProvenanceRecord) -> dict[str, _typing.Any]:
    """Widget descriptor for one provenance record."""
    return {
        "sourceIds": _source_ids(record.source_id),
        "inheritedValue": json_values.deep_clone(record.value),
    }


class SchemaEnricher:
    """
    Writes provenance widgets into schema UI annotation maps.

    Example:
        >>> enricher = SchemaEnricher()
        >>> schema = {"type": "object", "properties": {"name": {"type": "string"}}}
        >>> ui = {}
        >>> _, ui, merged = enricher.enrich_schema(schema, ui, [
        ...     {"id": "1", "name": "Alice"},
        ...     {"id": "2", "name": "Bob"},
        ... ])
        >>> ui["name"]
        {'widget': {'sourceIds': ['2'], 'inheritedValue': 'Bob'}}
    """

    def __init__(self, traverser: _traverser.SchemaTraverser | None = None) -> None:
        self._traverser = traverser or _traverser.SchemaTraverser()

    def enrich_schema(
        self,
        schema: _typing.Any,
        schema_ui: _abc.MutableMapping[str, _typing.Any] | None,
        identified_objects: _abc.Iterable[IdentifiedObject],
        options: _baseline.MergeOptionsLike = None,
    ) -> EnrichmentResult:
        """
        Merge ``identified_objects`` and annotate ``schema_ui`` with provenance.

        Args:
            schema: JSON-Schema-shaped mapping. Returned unmodified.
            schema_ui: Annotation map keyed by dotted path, mutated in place.
                An existing entry keeps its other keys; its ``widget`` is
                replaced. None starts a new map.
            identified_objects: SourceRecords, or mappings carrying an "id"
                key (the whole mapping, id included, is merged).
            options: Merge options.

        Returns:
            EnrichmentResult with the schema, the annotation map, and the
            merged value.

        Raises:
            MissingSourceIdError: If a mapping has no "id" key.
            InvalidConfigurationError: If options are invalid.
        """
        if schema_ui is None:
            schema_ui = {}

        sources = [_to_source_record(i, obj) for i, obj in enumerate(identified_objects)]
        merge_result = _provenance.merge_all_with_metadata(sources, options)
        provenance = merge_result.provenance
        annotated: set[str] = set()

        def visit(context: _context.DataTraversalContext) -> None:
            path = context.dotted_path
            record = provenance.get(path)
            if record is None:
                return
            widget = build_widget(record)
            entry = schema_ui.get(path)
            if isinstance(entry, _abc.MutableMapping):
                entry[constants.WIDGET_KEY] = widget
            else:
                schema_ui[path] = {constants.WIDGET_KEY: widget}
            annotated.add(path)

        self._traverser.traverse_data(schema, merge_result.merged, visit)
        _logger.debug(
            "Annotated %d paths from %d sources",
            len(annotated),
            len(sources),
        )
        return EnrichmentResult(schema, schema_ui, merge_result.merged, provenance)


def enrich_schema(
    schema: _typing.Any,
    schema_ui: _abc.MutableMapping[str, _typing.Any] | None,
    identified_objects: _abc.Iterable[IdentifiedObject],
    options: _baseline.MergeOptionsLike = None,
) -> EnrichmentResult:
    """SchemaEnricher().enrich_schema() with the default traverser."""
    return SchemaEnricher().enrich_schema(schema, schema_ui, identified_objects, options)


# =============================================================================
# Schema defaults
# =============================================================================


def _declared_type(node: _abc.Mapping[str, _typing.Any]) -> _typing.Any:
    declared = node.get("type")
    if json_values.is_sequence(declared):
        return declared[0] if declared else None
    return declared


def _apply_defaults(
    node: _typing.Any,
    data: _typing.Any,
    path: _types.Path,
    provenance: _abc.Mapping[str, _types.ProvenanceRecord],
) -> None:
    if not isinstance(node, _abc.MutableMapping):
        return

    node.pop("default", None)
    node.pop(constants.SCHEMA_SOURCE_ID_KEY, None)

    record = provenance.get(_types.join_path(path)) if path else None
    if record is not None:
        node["default"] = json_values.deep_clone(data)
        node[constants.SCHEMA_SOURCE_ID_KEY] = record.source_id
    else:
        declared = _declared_type(node)
        if declared is not None and declared not in _CONTAINER_TYPES:
            node["default"] = json_values.deep_clone(data)

    properties = node.get("properties")
    if json_values.is_mapping(properties) and json_values.is_mapping(data):
        for key, sub_schema in properties.items():
            if key in data:
                _apply_defaults(sub_schema, data[key], path + (str(key),), provenance)

    # Tuple items are left alone
    items = node.get("items")
    if json_values.is_mapping(items) and json_values.is_sequence(data):
        for index, item in enumerate(data):
            _apply_defaults(items, item, path + (str(index),), provenance)


def generate_schema(
    schema: _typing.Any,
    merged: _typing.Any,
    provenance: _abc.Mapping[str, _types.ProvenanceRecord],
) -> _typing.Any:
    """
    Return a copy of ``schema`` with merged values written in as defaults.

    Nodes reached through ``properties`` (only where the data has the key)
    and through single-schema ``items`` (once per element, so the last
    element wins) get ``default`` set to the data at that position. If
    ``provenance`` has a record for the position, ``x-source-id`` is set to
    its source id; otherwise ``default`` is only written for scalar types.
    Existing ``default`` and ``x-source-id`` keys on visited nodes are
    removed first.

    Args:
        schema: JSON-Schema-shaped mapping. Not modified.
        merged: The merged value (e.g. MergeResult.merged).
        provenance: The global provenance map (e.g. MergeResult.provenance).

    Returns:
        The new schema.
    """
    generated = _copy.deepcopy(schema)
    _apply_defaults(generated, merged, (), provenance)
    return generated
