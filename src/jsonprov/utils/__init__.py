"""
Utility functions for jsonprov.

Value-model helpers shared by the merge engines and the schema traverser.
"""

import jsonprov.utils.json_values as json_values
from jsonprov.utils.json_values import (
    ABSENT,
    deep_clone,
    deep_equal,
    is_mapping,
    is_sequence,
    to_jsonable,
)

__all__ = [
    "ABSENT",
    "deep_clone",
    "deep_equal",
    "is_mapping",
    "is_sequence",
    "json_values",
    "to_jsonable",
]
