"""Type rule table: declared record types paired with native classes."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Sequence

from stepgraph.errors import PluginDefinitionError
from stepgraph.plugin import Plugin
from stepgraph.values.types import RecordType

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class TypeRule:
    """One declared record type and the native class implementing it."""

    type: RecordType
    native: type

    @property
    def tag(self) -> str:
        return self.type.name


class RuleTable:
    """Ordered, tag-indexed collection of :class:`TypeRule` entries.

    ``graph_tag`` and ``state_tag`` name the rules of the graph root and of
    the state kind.
    """

    def __init__(self, rules: Sequence[TypeRule], *, graph_tag: str, state_tag: str) -> None:
        self.rules = tuple(rules)
        self._graph_tag = graph_tag
        self._state_tag = state_tag
        self._by_tag: Dict[str, TypeRule] = {}
        self._by_native: Dict[type, TypeRule] = {}
        for rule in self.rules:
            if rule.tag in self._by_tag:
                raise PluginDefinitionError(f"Type '{rule.tag}' is declared more than once")
            if rule.native in self._by_native:
                raise PluginDefinitionError(
                    f"Native class {rule.native.__name__} implements both "
                    f"'{self._by_native[rule.native].tag}' and '{rule.tag}'"
                )
            self._by_tag[rule.tag] = rule
            self._by_native[rule.native] = rule

    @property
    def graph(self) -> TypeRule:
        return self._by_tag[self._graph_tag]

    @property
    def state(self) -> TypeRule:
        return self._by_tag[self._state_tag]

    def by_tag(self, tag: str) -> Optional[TypeRule]:
        """Return the rule declared under ``tag``, if any."""

        return self._by_tag.get(tag)

    def rule_for_type(self, record_type: RecordType) -> Optional[TypeRule]:
        """Return the rule of ``record_type`` or of its nearest declared base."""

        for record in record_type.lineage():
            rule = self.by_tag(record.name)
            if rule is not None and rule.type is record:
                return rule
        return None

    def rule_for_native(self, obj: Any) -> Optional[TypeRule]:
        """Return the rule of the nearest registered class in ``obj``'s MRO."""

        for cls in type(obj).__mro__:
            rule = self._by_native.get(cls)
            if rule is not None:
                return rule
        return None

    def __iter__(self) -> Iterator[TypeRule]:
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)


def build_rule_table(plugin: Plugin) -> RuleTable:
    """Resolve every declared graph, state, node and edge type to its native class.

    A declared type without a native class is a malformed plugin and raises
    :class:`PluginDefinitionError` immediately.
    """

    rules: List[TypeRule] = []
    seen: List[RecordType] = []

    def add_rule(record_type: RecordType) -> None:
        if any(record_type is known for known in seen):
            return
        seen.append(record_type)
        native = plugin.native(record_type.name)
        if not isinstance(native, type):
            raise PluginDefinitionError(
                f"Plugin '{plugin.name}' implementation of '{record_type.name}' must be a class"
            )
        rules.append(TypeRule(record_type, native))

    add_rule(plugin.types.graph)
    add_rule(plugin.types.state)
    for node_type in plugin.types.node_types():
        add_rule(node_type)
    for edge_type in plugin.types.edge_types():
        add_rule(edge_type)

    LOGGER.debug("Built %d type rules for plugin '%s'", len(rules), plugin.name)
    return RuleTable(
        rules, graph_tag=plugin.types.graph.name, state_tag=plugin.types.state.name
    )


__all__ = ["RuleTable", "TypeRule", "build_rule_table"]
