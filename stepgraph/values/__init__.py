"""Structured value and type descriptors shared by the engine."""

from .environment import (
    ArrayValue,
    Environment,
    PrimitiveValue,
    RecordValue,
    UnionValue,
    Value,
    make_primitive,
    structurally_equal,
)
from .types import (
    BOOLEAN,
    NULL,
    NUMBER,
    OBJECT,
    STRING,
    ArrayType,
    PrimitiveType,
    RecordType,
    Type,
    UnionType,
    common_type,
    is_subtype,
)

__all__ = [
    "ArrayType",
    "ArrayValue",
    "BOOLEAN",
    "Environment",
    "NULL",
    "NUMBER",
    "OBJECT",
    "PrimitiveType",
    "PrimitiveValue",
    "RecordType",
    "RecordValue",
    "STRING",
    "Type",
    "UnionType",
    "UnionValue",
    "Value",
    "common_type",
    "is_subtype",
    "make_primitive",
    "structurally_equal",
]
