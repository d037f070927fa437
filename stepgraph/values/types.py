"""Type descriptors for structured values."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Tuple


class Type:
    """Base class for every type descriptor."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class PrimitiveType(Type):
    """Scalar type identified by name."""

    name: str


NUMBER = PrimitiveType("number")
STRING = PrimitiveType("string")
BOOLEAN = PrimitiveType("boolean")
NULL = PrimitiveType("null")


@dataclass(frozen=True)
class ArrayType(Type):
    """Homogeneous sequence of ``element`` values."""

    element: Type

    @property
    def name(self) -> str:  # type: ignore[override]
        return f"{self.element.name}[]"


@dataclass(frozen=True)
class UnionType(Type):
    """Closed choice between ``types``, tagged by member name."""

    types: Tuple[Type, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "types", tuple(self.types))

    @property
    def name(self) -> str:  # type: ignore[override]
        return " | ".join(member.name for member in self.types)

    def tags(self) -> Tuple[str, ...]:
        """Return the member type names in declaration order."""

        return tuple(member.name for member in self.types)

    def __iter__(self) -> Iterator[Type]:
        return iter(self.types)


@dataclass(eq=False)
class RecordType(Type):
    """Named composite type with ordered members.

    Records are nominal: two record types are related only through identity
    or the ``base`` chain, never through their member layout. ``open``
    records accept members that were not declared up front; they are used
    for values inferred from plain mappings.
    """

    name: str
    members: Dict[str, Type] = field(default_factory=dict)
    base: Optional["RecordType"] = None
    open: bool = False

    def member(self, name: str) -> Type:
        """Return the declared type of member ``name``."""

        record: Optional[RecordType] = self
        while record is not None:
            if name in record.members:
                return record.members[name]
            record = record.base
        raise KeyError(f"{self.name} has no member '{name}'")

    def has_member(self, name: str) -> bool:
        try:
            self.member(name)
        except KeyError:
            return False
        return True

    def all_members(self) -> Dict[str, Type]:
        """Return inherited and own members, base members first."""

        chain = []
        record: Optional[RecordType] = self
        while record is not None:
            chain.append(record)
            record = record.base
        merged: Dict[str, Type] = {}
        for record in reversed(chain):
            merged.update(record.members)
        return merged

    def lineage(self) -> Iterator["RecordType"]:
        """Yield this type followed by its bases, nearest first."""

        record: Optional[RecordType] = self
        while record is not None:
            yield record
            record = record.base

    def __repr__(self) -> str:
        return f"RecordType({self.name!r})"


# Open record type given to values built from plain mappings.
OBJECT = RecordType("object", open=True)


def common_type(types: Iterable[Type]) -> Type:
    """Return the narrowest type covering ``types``, used for inferred arrays."""

    distinct: List[Type] = []
    for candidate in types:
        if not any(is_subtype(candidate, seen) for seen in distinct):
            distinct = [seen for seen in distinct if not is_subtype(seen, candidate)]
            distinct.append(candidate)
    if not distinct:
        return NULL
    if len(distinct) == 1:
        return distinct[0]
    return UnionType(tuple(distinct))


def is_subtype(candidate: Type, target: Type) -> bool:
    """Return ``True`` when values of ``candidate`` may be used as ``target``."""

    if candidate is target:
        return True
    if isinstance(candidate, UnionType):
        return all(is_subtype(member, target) for member in candidate.types)
    if isinstance(target, UnionType):
        return any(is_subtype(candidate, member) for member in target.types)
    if isinstance(candidate, PrimitiveType) and isinstance(target, PrimitiveType):
        return candidate.name == target.name
    if isinstance(candidate, ArrayType) and isinstance(target, ArrayType):
        return is_subtype(candidate.element, target.element)
    if isinstance(candidate, RecordType) and isinstance(target, RecordType):
        return any(record is target for record in candidate.lineage())
    return False


__all__ = [
    "ArrayType",
    "BOOLEAN",
    "NULL",
    "NUMBER",
    "OBJECT",
    "PrimitiveType",
    "RecordType",
    "STRING",
    "Type",
    "UnionType",
    "common_type",
    "is_subtype",
]
