"""Conversions between structured values and plugin-native objects.

The plugin works on plain Python data: primitives, lists, dicts and
instances of the classes it registers for its declared record types.
"""
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Tuple

from stepgraph.errors import MarshalError
from stepgraph.exec.rules import RuleTable
from stepgraph.values.environment import (
    ArrayValue,
    Environment,
    PrimitiveValue,
    RecordValue,
    UnionValue,
    Value,
    make_primitive,
)
from stepgraph.values.types import OBJECT, ArrayType, Type, common_type

_PENDING = object()

NativeMemo = Dict[Tuple[int, int], Any]
ValueMemo = Dict[int, Any]


class Marshaller:
    """Convert values across the plugin boundary using a :class:`RuleTable`.

    Both directions keep a memo so shared and cyclic references (a node's
    ``children`` pointing at edges whose ``source`` is the node) convert to a
    single object. Pass the same memo to several calls to share it.
    """

    def __init__(self, rules: RuleTable, environment: Environment) -> None:
        self.rules = rules
        self.environment = environment

    # --- structured -> native ---

    def to_native(self, value: Value, memo: Optional[NativeMemo] = None) -> Any:
        """Return the plain native representation of ``value``."""

        return self._to_native(value, {} if memo is None else memo)

    def _to_native(self, value: Value, memo: NativeMemo) -> Any:
        if isinstance(value, PrimitiveValue):
            return value.data
        if isinstance(value, UnionValue):
            return self._to_native(value.value, memo)

        key = (id(value.environment), value.handle)
        if key in memo:
            return memo[key]

        if isinstance(value, ArrayValue):
            items: list = []
            memo[key] = items
            items.extend(self._to_native(item, memo) for item in value)
            return items
        if isinstance(value, RecordValue):
            rule = self.rules.rule_for_type(value.type)  # type: ignore[arg-type]
            if rule is None:
                mapping: Dict[str, Any] = {}
                memo[key] = mapping
                for name, field_value in value.fields().items():
                    mapping[name] = self._to_native(field_value, memo)
                return mapping
            native = rule.native.__new__(rule.native)
            memo[key] = native
            for name, field_value in value.fields().items():
                # object.__setattr__ also fills frozen dataclasses.
                object.__setattr__(native, name, self._to_native(field_value, memo))
            return native
        raise MarshalError(f"No native conversion for {value!r}")

    # --- native -> structured ---

    def to_value(
        self,
        native: Any,
        memo: Optional[ValueMemo] = None,
        expected: Optional[Type] = None,
    ) -> Value:
        """Wrap ``native`` as a value in the marshaller's environment.

        ``expected`` is the declared type at this position, used to type
        arrays; without it array types are inferred from their items.
        """

        return self._to_value(native, {} if memo is None else memo, expected)

    def _to_value(self, native: Any, memo: ValueMemo, expected: Optional[Type]) -> Value:
        if native is None or isinstance(native, (bool, int, float, str)):
            return make_primitive(self.environment, native)

        key = id(native)
        if key in memo:
            if memo[key] is _PENDING:
                raise MarshalError(f"Cyclic {type(native).__name__} without a declared array type")
            return memo[key]

        if isinstance(native, (list, tuple)):
            if isinstance(expected, ArrayType):
                array = ArrayValue.create(self.environment, expected)
                memo[key] = array
                for item in native:
                    array.append(self._to_value(item, memo, expected.element))
                return array
            memo[key] = _PENDING
            items = [self._to_value(item, memo, None) for item in native]
            array = ArrayValue.create(
                self.environment, ArrayType(common_type(item.type for item in items)), items
            )
            memo[key] = array
            return array

        if isinstance(native, Mapping) and all(isinstance(name, str) for name in native):
            record = RecordValue.create(self.environment, OBJECT)
            memo[key] = record
            for name, item in native.items():
                record.set(name, self._to_value(item, memo, None))
            return record

        rule = self.rules.rule_for_native(native)
        if rule is None:
            raise MarshalError(f"No type rule for native {type(native).__name__} object")
        record = RecordValue.create(self.environment, rule.type)
        memo[key] = record
        for name, member_type in rule.type.all_members().items():
            if hasattr(native, name):
                record.set(name, self._to_value(getattr(native, name), memo, member_type))
        return record


__all__ = ["Marshaller", "OBJECT"]
