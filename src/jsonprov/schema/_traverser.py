"""
Depth-first, pre-order traversal of JSON-Schema-shaped trees.

Two modes:
- Schema-only: traverse_schema() visits every schema node reachable through
  the recognized keywords.
- Data-bound: traverse_data() walks the schema in lock-step with a data
  value. A keyword that needs a particular data shape (properties and
  dependentSchemas need an object, items needs an array) is skipped when
  the data does not have that shape.

Per-keyword behavior lives in dispatch tables mapping a keyword to a handler.
Handlers receive the owning node, the current path, the visitor, the parent
node to report to children, and the function to recurse with. Keywords are
expanded in table order; unknown keywords are ignored.

Neither mode raises on shape mismatches, and neither modifies the schema or
the data. A None node is not visited; any other non-mapping node is visited
but not expanded.

Example:
    >>> schema = {"type": "object", "properties": {"name": {"type": "string"}}}
    >>> traverse_data(schema, {"name": "Ada"}, lambda ctx: print(ctx.path, ctx.data_value))
    () {'name': 'Ada'}
    ('name',) Ada
"""

from __future__ import annotations

import collections.abc as _abc
import logging as _logging
import typing as _typing

import jsonprov.schema._context as _context
import jsonprov.utils.json_values as json_values

_logger = _logging.getLogger(__name__)

Path: _typing.TypeAlias = tuple[str, ...]

# recurse(node, path, visitor, property_name, parent, keyword)
SchemaRecurse: _typing.TypeAlias = _typing.Callable[
    [_context.SchemaNode, Path, _context.SchemaVisitor, "str | None", _context.SchemaNode, str],
    None,
]
# recurse(node, data, path, visitor, property_name, parent, keyword)
DataRecurse: _typing.TypeAlias = _typing.Callable[
    [_context.SchemaNode, _typing.Any, Path, _context.DataVisitor, "str | None", _context.SchemaNode, str],
    None,
]
SchemaKeywordHandler: _typing.TypeAlias = _typing.Callable[
    [_abc.Mapping[str, _typing.Any], Path, _context.SchemaVisitor, _context.SchemaNode, SchemaRecurse],
    None,
]
DataKeywordHandler: _typing.TypeAlias = _typing.Callable[
    [
        _abc.Mapping[str, _typing.Any],
        _typing.Any,
        Path,
        _context.DataVisitor,
        _context.SchemaNode,
        DataRecurse,
    ],
    None,
]


# =============================================================================
# Schema-only keyword handlers
# =============================================================================


def _schema_properties(
    node: _abc.Mapping[str, _typing.Any],
    path: Path,
    visitor: _context.SchemaVisitor,
    parent: _context.SchemaNode,
    recurse: SchemaRecurse,
) -> None:
    properties = node.get("properties")
    if not json_values.is_mapping(properties):
        return
    for key, sub_schema in properties.items():
        name = str(key)
        recurse(sub_schema, path + (name,), visitor, name, parent, "properties")


def _schema_items(
    node: _abc.Mapping[str, _typing.Any],
    path: Path,
    visitor: _context.SchemaVisitor,
    parent: _context.SchemaNode,
    recurse: SchemaRecurse,
) -> None:
    items = node.get("items")
    if items is None:
        return
    if json_values.is_sequence(items):
        # Tuple: one schema per position
        for index, item_schema in enumerate(items):
            recurse(item_schema, path, visitor, str(index), parent, "items")
    else:
        recurse(items, path, visitor, None, parent, "items")


def _schema_combiner(keyword: str) -> SchemaKeywordHandler:
    """Handler for allOf / anyOf / oneOf: every sub-schema, same path."""

    def handler(
        node: _abc.Mapping[str, _typing.Any],
        path: Path,
        visitor: _context.SchemaVisitor,
        parent: _context.SchemaNode,
        recurse: SchemaRecurse,
    ) -> None:
        sub_schemas = node.get(keyword)
        if not json_values.is_sequence(sub_schemas):
            return
        for sub_schema in sub_schemas:
            recurse(sub_schema, path, visitor, None, parent, keyword)

    return handler


def _schema_single(keyword: str) -> SchemaKeywordHandler:
    """Handler for not / if / then / else: one sub-schema, same path."""

    def handler(
        node: _abc.Mapping[str, _typing.Any],
        path: Path,
        visitor: _context.SchemaVisitor,
        parent: _context.SchemaNode,
        recurse: SchemaRecurse,
    ) -> None:
        sub_schema = node.get(keyword)
        if json_values.is_mapping(sub_schema):
            recurse(sub_schema, path, visitor, None, parent, keyword)

    return handler


def _schema_dependent_schemas(
    node: _abc.Mapping[str, _typing.Any],
    path: Path,
    visitor: _context.SchemaVisitor,
    parent: _context.SchemaNode,
    recurse: SchemaRecurse,
) -> None:
    dependents = node.get("dependentSchemas")
    if not json_values.is_mapping(dependents):
        return
    for sub_schema in dependents.values():
        recurse(sub_schema, path, visitor, None, parent, "dependentSchemas")


def _schema_additional_properties(
    node: _abc.Mapping[str, _typing.Any],
    path: Path,
    visitor: _context.SchemaVisitor,
    parent: _context.SchemaNode,
    recurse: SchemaRecurse,
) -> None:
    # Boolean additionalProperties is not a sub-schema to descend into
    sub_schema = node.get("additionalProperties")
    if json_values.is_mapping(sub_schema):
        recurse(sub_schema, path, visitor, None, parent, "additionalProperties")


def _schema_pattern_properties(
    node: _abc.Mapping[str, _typing.Any],
    path: Path,
    visitor: _context.SchemaVisitor,
    parent: _context.SchemaNode,
    recurse: SchemaRecurse,
) -> None:
    patterns = node.get("patternProperties")
    if not json_values.is_mapping(patterns):
        return
    for sub_schema in patterns.values():
        recurse(sub_schema, path, visitor, None, parent, "patternProperties")


SCHEMA_KEYWORD_HANDLERS: dict[str, SchemaKeywordHandler] = {
    "properties": _schema_properties,
    "items": _schema_items,
    "allOf": _schema_combiner("allOf"),
    "anyOf": _schema_combiner("anyOf"),
    "oneOf": _schema_combiner("oneOf"),
    "not": _schema_single("not"),
    "if": _schema_single("if"),
    "then": _schema_single("then"),
    "else": _schema_single("else"),
    "dependentSchemas": _schema_dependent_schemas,
    "additionalProperties": _schema_additional_properties,
    "patternProperties": _schema_pattern_properties,
}


# =============================================================================
# Data-bound keyword handlers
# =============================================================================


def _data_properties(
    node: _abc.Mapping[str, _typing.Any],
    data: _typing.Any,
    path: Path,
    visitor: _context.DataVisitor,
    parent: _context.SchemaNode,
    recurse: DataRecurse,
) -> None:
    properties = node.get("properties")
    if not json_values.is_mapping(properties):
        return
    for key, sub_schema in properties.items():
        name = str(key)
        # Missing properties are still visited so optional fields are observable
        value = data.get(key, json_values.ABSENT)
        recurse(sub_schema, value, path + (name,), visitor, name, parent, "properties")


def _data_items(
    node: _abc.Mapping[str, _typing.Any],
    data: _typing.Any,
    path: Path,
    visitor: _context.DataVisitor,
    parent: _context.SchemaNode,
    recurse: DataRecurse,
) -> None:
    items = node.get("items")
    if items is None:
        return
    if json_values.is_sequence(items):
        # Tuple positions beyond the data's length are not visited
        for index, item_schema in enumerate(items[: len(data)]):
            recurse(item_schema, data[index], path, visitor, str(index), parent, "items")
    else:
        for index, item in enumerate(data):
            recurse(items, item, path, visitor, str(index), parent, "items")


def _data_combiner(keyword: str) -> DataKeywordHandler:
    """Handler for allOf / anyOf / oneOf: the same data goes to every sub-schema."""

    def handler(
        node: _abc.Mapping[str, _typing.Any],
        data: _typing.Any,
        path: Path,
        visitor: _context.DataVisitor,
        parent: _context.SchemaNode,
        recurse: DataRecurse,
    ) -> None:
        sub_schemas = node.get(keyword)
        if not json_values.is_sequence(sub_schemas):
            return
        for sub_schema in sub_schemas:
            recurse(sub_schema, data, path, visitor, None, parent, keyword)

    return handler


def _data_single(keyword: str) -> DataKeywordHandler:
    """Handler for not / if / then / else: the same data, one sub-schema."""

    def handler(
        node: _abc.Mapping[str, _typing.Any],
        data: _typing.Any,
        path: Path,
        visitor: _context.DataVisitor,
        parent: _context.SchemaNode,
        recurse: DataRecurse,
    ) -> None:
        sub_schema = node.get(keyword)
        if json_values.is_mapping(sub_schema):
            recurse(sub_schema, data, path, visitor, None, parent, keyword)

    return handler


def _data_dependent_schemas(
    node: _abc.Mapping[str, _typing.Any],
    data: _typing.Any,
    path: Path,
    visitor: _context.DataVisitor,
    parent: _context.SchemaNode,
    recurse: DataRecurse,
) -> None:
    dependents = node.get("dependentSchemas")
    if not json_values.is_mapping(dependents):
        return
    for key, sub_schema in dependents.items():
        if key in data:
            recurse(sub_schema, data, path, visitor, None, parent, "dependentSchemas")


DATA_KEYWORD_HANDLERS: dict[str, DataKeywordHandler] = {
    "properties": _data_properties,
    "items": _data_items,
    "allOf": _data_combiner("allOf"),
    "anyOf": _data_combiner("anyOf"),
    "oneOf": _data_combiner("oneOf"),
    "not": _data_single("not"),
    "if": _data_single("if"),
    "then": _data_single("then"),
    "else": _data_single("else"),
    "dependentSchemas": _data_dependent_schemas,
}

# Keywords whose handler needs a particular data shape
_OBJECT_KEYWORDS = frozenset({"properties", "dependentSchemas"})
_ARRAY_KEYWORDS = frozenset({"items"})


def is_data_compatible(keyword: str, data: _typing.Any) -> bool:
    """
    Check whether ``data`` has the shape ``keyword`` expands over.

    properties and dependentSchemas need an object, items needs an array.
    Combiners, conditionals and not pass the data through unchanged, so they
    are always compatible.
    """
    if keyword in _OBJECT_KEYWORDS:
        return json_values.is_mapping(data)
    if keyword in _ARRAY_KEYWORDS:
        return json_values.is_sequence(data)
    return True


# =============================================================================
# Traverser
# =============================================================================


class SchemaTraverser:
    """
    Walks schemas alone or paired with data, calling a visitor per node.

    Each instance starts from copies of the default dispatch tables, so
    registering a handler on one traverser does not affect others.

    Example:
        >>> traverser = SchemaTraverser()
        >>> traverser.traverse_schema(schema, lambda ctx: print(ctx.dotted_path))
    """

    def __init__(self) -> None:
        self._schema_handlers: dict[str, SchemaKeywordHandler] = dict(SCHEMA_KEYWORD_HANDLERS)
        self._data_handlers: dict[str, DataKeywordHandler] = dict(DATA_KEYWORD_HANDLERS)

    @property
    def schema_keywords(self) -> tuple[str, ...]:
        """Keywords expanded by traverse_schema(), in expansion order."""
        return tuple(self._schema_handlers)

    @property
    def data_keywords(self) -> tuple[str, ...]:
        """Keywords expanded by traverse_data(), in expansion order."""
        return tuple(self._data_handlers)

    def register_schema_handler(self, keyword: str, handler: SchemaKeywordHandler) -> None:
        """Add or replace the schema-only handler for ``keyword``."""
        self._schema_handlers[keyword] = handler

    def register_data_handler(self, keyword: str, handler: DataKeywordHandler) -> None:
        """Add or replace the data-bound handler for ``keyword``."""
        self._data_handlers[keyword] = handler

    # =========================================================================
    # Public API
    # =========================================================================

    def traverse_schema(
        self,
        schema: _context.SchemaNode,
        visitor: _context.SchemaVisitor,
    ) -> None:
        """
        Visit every node of ``schema`` reachable through the recognized keywords.

        Args:
            schema: Root schema node.
            visitor: Called with a SchemaTraversalContext for each node,
                before the node's children.
        """
        self._walk_schema(schema, (), visitor, None, None, None)

    def traverse_data(
        self,
        schema: _context.SchemaNode,
        data: _typing.Any,
        visitor: _context.DataVisitor,
    ) -> None:
        """
        Visit ``schema`` in lock-step with ``data``.

        Args:
            schema: Root schema node.
            data: The value described by ``schema``.
            visitor: Called with a DataTraversalContext for each node,
                before the node's children.
        """
        self._walk_data(schema, data, (), visitor, None, None, None)

    # =========================================================================
    # Recursion
    # =========================================================================

    def _walk_schema(
        self,
        node: _context.SchemaNode,
        path: Path,
        visitor: _context.SchemaVisitor,
        property_name: str | None,
        parent: _context.SchemaNode | None,
        keyword: str | None,
    ) -> None:
        if node is None:
            return

        visitor(
            _context.SchemaTraversalContext(
                schema_node=node,
                path=path,
                property_name=property_name,
                parent_schema_node=parent,
                keyword=keyword,
            )
        )

        if not json_values.is_mapping(node):
            return

        for schema_keyword, handler in self._schema_handlers.items():
            if schema_keyword in node:
                handler(node, path, visitor, node, self._walk_schema)

    def _walk_data(
        self,
        node: _context.SchemaNode,
        data: _typing.Any,
        path: Path,
        visitor: _context.DataVisitor,
        property_name: str | None,
        parent: _context.SchemaNode | None,
        keyword: str | None,
    ) -> None:
        if node is None:
            return

        visitor(
            _context.DataTraversalContext(
                schema_node=node,
                path=path,
                property_name=property_name,
                parent_schema_node=parent,
                keyword=keyword,
                data_value=data,
            )
        )

        if not json_values.is_mapping(node):
            return

        for schema_keyword, handler in self._data_handlers.items():
            if schema_keyword not in node:
                continue
            if not is_data_compatible(schema_keyword, data):
                _logger.debug(
                    "Skipping %r at %r: data is %s",
                    schema_keyword,
                    ".".join(path),
                    type(data).__name__,
                )
                continue
            handler(node, data, path, visitor, node, self._walk_data)


_default_traverser = SchemaTraverser()


def traverse_schema(schema: _context.SchemaNode, visitor: _context.SchemaVisitor) -> None:
    """Schema-only traversal with the default keyword handlers."""
    _default_traverser.traverse_schema(schema, visitor)


def traverse_data(
    schema: _context.SchemaNode,
    data: _typing.Any,
    visitor: _context.DataVisitor,
) -> None:
    """Data-bound traversal with the default keyword handlers."""
    _default_traverser.traverse_data(schema, data, visitor)
