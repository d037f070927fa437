"""Plugin contract: declared types plus a native implementation registry."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional

from .errors import PluginDefinitionError
from .values.types import ArrayType, RecordType, Type, UnionType


def _record_members(union: UnionType, what: str) -> List[RecordType]:
    records = []
    for member in union.types:
        if not isinstance(member, RecordType):
            raise TypeError(f"{what} union members must be record types, got {member.name}")
        records.append(member)
    return records


def _install(record: RecordType, name: str, type_: Type) -> None:
    if not record.has_member(name):
        record.members[name] = type_


@dataclass
class PluginTypes:
    """Type descriptors a plugin declares.

    Construction installs the members the engine fills in when absent:
    ``children``/``parents`` on node types, ``source``/``destination`` on
    edge types and ``nodes``/``edges`` on the graph type.
    """

    graph: RecordType
    state: RecordType
    nodes: UnionType
    edges: UnionType
    arguments: List[Type] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.arguments = list(self.arguments)
        for node_type in self.node_types():
            _install(node_type, "children", ArrayType(self.edges))
            _install(node_type, "parents", ArrayType(self.edges))
        for edge_type in self.edge_types():
            _install(edge_type, "source", self.nodes)
            _install(edge_type, "destination", self.nodes)
        _install(self.graph, "nodes", ArrayType(self.nodes))
        _install(self.graph, "edges", ArrayType(self.edges))

    def node_types(self) -> List[RecordType]:
        return _record_members(self.nodes, "node")

    def edge_types(self) -> List[RecordType]:
        return _record_members(self.edges, "edge")

    def records(self) -> Iterator[RecordType]:
        """Yield every declared record type: graph, state, nodes, edges."""

        yield self.graph
        yield self.state
        yield from self.node_types()
        yield from self.edge_types()

    def lookup(self, name: str) -> RecordType:
        """Return the record type called ``name``.

        Declared types are searched first, then record types reachable from
        their members (helper records such as a node's ``pos: Point``).
        """

        for record in self.records():
            if record.name == name:
                return record
        for record in self.reachable():
            if record.name == name:
                return record
        raise KeyError(f"No declared type named '{name}'")

    def reachable(self) -> Iterator[RecordType]:
        """Yield every record type reachable from the declared ones, once each."""

        seen: set = set()
        pending: List[Type] = list(self.records())
        while pending:
            current = pending.pop(0)
            if isinstance(current, ArrayType):
                pending.append(current.element)
            elif isinstance(current, UnionType):
                pending.extend(current.types)
            elif isinstance(current, RecordType) and id(current) not in seen:
                seen.add(id(current))
                yield current
                if current.base is not None:
                    pending.append(current.base)
                pending.extend(current.members.values())


@dataclass
class Plugin:
    """A plugin: declared types plus native constructors and functions.

    ``implementation`` is keyed by declared type name and must also provide
    the ``start`` and ``step`` callables.
    """

    name: str
    types: PluginTypes
    implementation: Dict[str, Any] = field(default_factory=dict)

    def register(self, name: str, obj: Optional[Any] = None) -> Any:
        """Register ``obj`` under ``name``; usable as a decorator."""

        if obj is not None:
            self.implementation[name] = obj
            return obj

        def decorator(target: Any) -> Any:
            self.implementation[name] = target
            return target

        return decorator

    def native(self, name: str) -> Any:
        """Return the native implementation registered for ``name``."""

        if name not in self.implementation:
            raise PluginDefinitionError(
                f"Plugin '{self.name}' has no native implementation for '{name}'"
            )
        return self.implementation[name]

    @property
    def start(self) -> Callable[..., Any]:
        return self.native("start")

    @property
    def step(self) -> Callable[[Any], Any]:
        return self.native("step")


__all__ = ["Plugin", "PluginTypes"]
