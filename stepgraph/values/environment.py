"""Arena-backed structured values.

An :class:`Environment` owns every value record created for one program
instance. Value objects are thin handles (environment + index) over those
records, so their lifetime is that of the environment that allocated them.
"""
from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional

from .types import (
    BOOLEAN,
    NULL,
    NUMBER,
    STRING,
    ArrayType,
    PrimitiveType,
    RecordType,
    Type,
    UnionType,
    is_subtype,
)


@dataclass
class _Record:
    type: Type
    payload: Any


class Environment:
    """Append-only arena of value records.

    Handles come from a shared counter, so concurrent runs of one program may
    allocate into the same environment.
    """

    def __init__(self) -> None:
        self._records: Dict[int, _Record] = {}
        self._handles = itertools.count()

    def allocate(self, type_: Type, payload: Any) -> int:
        """Store a new record and return its handle."""

        handle = next(self._handles)
        self._records[handle] = _Record(type_, payload)
        return handle

    def record(self, handle: int) -> _Record:
        return self._records[handle]

    def __len__(self) -> int:
        return len(self._records)


class Value:
    """Handle to a record living in an :class:`Environment`."""

    __slots__ = ("environment", "handle")

    def __init__(self, environment: Environment, handle: int) -> None:
        self.environment = environment
        self.handle = handle

    @property
    def type(self) -> Type:
        return self.environment.record(self.handle).type

    @property
    def _payload(self) -> Any:
        return self.environment.record(self.handle).payload

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        return self.environment is other.environment and self.handle == other.handle

    def __hash__(self) -> int:
        return hash((id(self.environment), self.handle))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.type.name}#{self.handle})"


class PrimitiveValue(Value):
    """Scalar value: number, string, boolean or null."""

    __slots__ = ()

    @classmethod
    def create(cls, environment: Environment, type_: PrimitiveType, data: Any) -> "PrimitiveValue":
        return cls(environment, environment.allocate(type_, data))

    @property
    def data(self) -> Any:
        return self._payload

    def __repr__(self) -> str:
        return f"PrimitiveValue({self.type.name}={self.data!r})"


class ArrayValue(Value):
    """Ordered sequence of values sharing the array's environment."""

    __slots__ = ()

    @classmethod
    def create(
        cls,
        environment: Environment,
        type_: ArrayType,
        items: Optional[List[Value]] = None,
    ) -> "ArrayValue":
        array = cls(environment, environment.allocate(type_, []))
        for item in items or ():
            array.append(item)
        return array

    @property
    def items(self) -> List[Value]:
        return list(self._payload)

    def append(self, item: Value) -> None:
        """Append ``item`` after checking it against the element type."""

        _check_assignable(self, item, self.type.element, "array element")  # type: ignore[attr-defined]
        self._payload.append(item)

    def __len__(self) -> int:
        return len(self._payload)

    def __iter__(self) -> Iterator[Value]:
        return iter(list(self._payload))

    def __getitem__(self, index: int) -> Value:
        return self._payload[index]


class UnionValue(Value):
    """Tagged box holding one value of a union member type."""

    __slots__ = ()

    @classmethod
    def create(cls, environment: Environment, type_: UnionType, value: Value) -> "UnionValue":
        _check_assignable_to(environment, value, type_, "union payload")
        return cls(environment, environment.allocate(type_, value))

    @property
    def value(self) -> Value:
        return self._payload

    @property
    def tag(self) -> str:
        return self.value.type.name


class RecordValue(Value):
    """Named composite whose fields are gettable and settable by name."""

    __slots__ = ()

    @classmethod
    def create(
        cls,
        environment: Environment,
        type_: RecordType,
        fields: Optional[Dict[str, Value]] = None,
    ) -> "RecordValue":
        record = cls(environment, environment.allocate(type_, {}))
        for name, value in (fields or {}).items():
            record.set(name, value)
        return record

    def get(self, name: str) -> Value:
        try:
            return self._payload[name]
        except KeyError:
            raise KeyError(f"{self.type.name} value has no field '{name}'") from None

    def has(self, name: str) -> bool:
        return name in self._payload

    def set(self, name: str, value: Value) -> None:
        """Assign ``value`` to field ``name``."""

        record_type: RecordType = self.type  # type: ignore[assignment]
        if record_type.has_member(name):
            _check_assignable(self, value, record_type.member(name), f"field '{name}'")
        elif record_type.open:
            _check_assignable_to(self.environment, value, None, f"field '{name}'")
        else:
            raise KeyError(f"{record_type.name} declares no member '{name}'")
        self._payload[name] = value

    def fields(self) -> Dict[str, Value]:
        return dict(self._payload)


def _check_assignable(owner: Value, value: Value, expected: Type, what: str) -> None:
    _check_assignable_to(owner.environment, value, expected, what)


def _check_assignable_to(
    environment: Environment, value: Value, expected: Optional[Type], what: str
) -> None:
    if not isinstance(value, Value):
        raise TypeError(f"{what} must be a structured value, got {type(value).__name__}")
    if value.environment is not environment:
        raise ValueError(f"{what} belongs to a different environment")
    if expected is not None and not is_subtype(value.type, expected):
        raise TypeError(f"{what} expects {expected.name}, got {value.type.name}")


def primitive_type_of(data: Any) -> PrimitiveType:
    """Return the primitive type used to store ``data``."""

    if data is None:
        return NULL
    if isinstance(data, bool):
        return BOOLEAN
    if isinstance(data, (int, float)):
        return NUMBER
    return STRING


def make_primitive(environment: Environment, data: Any) -> PrimitiveValue:
    """Wrap plain ``data`` as a primitive; unknown objects become strings."""

    type_ = primitive_type_of(data)
    if type_ is STRING and not isinstance(data, str):
        data = str(data)
    return PrimitiveValue.create(environment, type_, data)


def structurally_equal(left: Value, right: Value) -> bool:
    """Compare two values by what a plugin can observe of them."""

    return _equal(left, right, set())


def _equal(left: Value, right: Value, seen: set) -> bool:
    key = (id(left.environment), left.handle, id(right.environment), right.handle)
    if key in seen:
        return True
    seen.add(key)
    if type(left) is not type(right) or left.type.name != right.type.name:
        return False
    if isinstance(left, PrimitiveValue):
        return left.data == right.data  # type: ignore[attr-defined]
    if isinstance(left, UnionValue):
        return _equal(left.value, right.value, seen)  # type: ignore[attr-defined]
    if isinstance(left, ArrayValue):
        if len(left) != len(right):  # type: ignore[arg-type]
            return False
        return all(_equal(a, b, seen) for a, b in zip(left, right))  # type: ignore[call-overload]
    if isinstance(left, RecordValue):
        left_fields = left.fields()
        right_fields = right.fields()  # type: ignore[attr-defined]
        if left_fields.keys() != right_fields.keys():
            return False
        return all(_equal(left_fields[name], right_fields[name], seen) for name in left_fields)
    return False


__all__ = [
    "ArrayValue",
    "Environment",
    "PrimitiveValue",
    "RecordValue",
    "UnionValue",
    "Value",
    "make_primitive",
    "primitive_type_of",
    "structurally_equal",
]
