"""
Schema and data-bound traversal of JSON-Schema-shaped trees.

Example:
    >>> from jsonprov.schema import traverse_schema
    >>> schema = {"properties": {"a": {"items": {"type": "string"}}}}
    >>> traverse_schema(schema, lambda ctx: print(ctx.path, ctx.keyword))
    () None
    ('a',) properties
    ('a',) items
"""

from jsonprov.schema._context import (
    DataTraversalContext,
    DataVisitor,
    SchemaNode,
    SchemaTraversalContext,
    SchemaVisitor,
)
from jsonprov.schema._traverser import (
    DATA_KEYWORD_HANDLERS,
    SCHEMA_KEYWORD_HANDLERS,
    SchemaTraverser,
    is_data_compatible,
    traverse_data,
    traverse_schema,
)

__all__ = [
    "DATA_KEYWORD_HANDLERS",
    "DataTraversalContext",
    "DataVisitor",
    "SCHEMA_KEYWORD_HANDLERS",
    "SchemaNode",
    "SchemaTraversalContext",
    "SchemaTraverser",
    "SchemaVisitor",
    "is_data_compatible",
    "traverse_data",
    "traverse_schema",
]
