"""
Traversal contexts passed to schema visitors.

A context is built fresh for every visited node and handed to the visitor;
the traverser keeps no reference to it afterwards.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import typing as _typing

import jsonprov.constants as constants

# Schema nodes are JSON-Schema-shaped mappings; anything else is a leaf
SchemaNode: _typing.TypeAlias = _typing.Any


@_dataclasses.dataclass(frozen=True, slots=True)
class SchemaTraversalContext:
    """
    Position of a visited schema node.

    Attributes:
        schema_node: The node being visited.
        path: Data path segments. Nodes reached through items, combiners,
            conditionals and dependentSchemas share their owner's path.
        property_name: Property key (via properties) or stringified index
            (via tuple items, or items in data-bound mode); None otherwise.
        parent_schema_node: The node that owns the keyword being expanded.
        keyword: The keyword that produced this visit; None for the root.
    """

    schema_node: SchemaNode
    path: tuple[str, ...] = ()
    property_name: str | None = None
    parent_schema_node: SchemaNode | None = None
    keyword: str | None = None

    @property
    def dotted_path(self) -> str:
        return constants.PATH_SEPARATOR.join(self.path)


@_dataclasses.dataclass(frozen=True, slots=True)
class DataTraversalContext(SchemaTraversalContext):
    """
    Position of a visited schema node paired with the data found there.

    ``data_value`` is ABSENT when a property declared in the schema is
    missing from the data.
    """

    data_value: _typing.Any = None


SchemaVisitor: _typing.TypeAlias = _typing.Callable[[SchemaTraversalContext], None]
DataVisitor: _typing.TypeAlias = _typing.Callable[[DataTraversalContext], None]
