"""Graph model: nodes, edges and the graph root as structured values."""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from stepgraph.errors import ModelConsistencyError
from stepgraph.graph.ids import new_id
from stepgraph.plugin import Plugin
from stepgraph.values.environment import (
    ArrayValue,
    Environment,
    RecordValue,
    UnionValue,
    Value,
    make_primitive,
)
from stepgraph.values.types import OBJECT, ArrayType, RecordType, Type, UnionType, common_type

NODE_DERIVED_FIELDS = ("children", "parents")
GRAPH_DERIVED_FIELDS = ("nodes", "edges")
EDGE_ENDPOINT_FIELDS = ("source", "destination")

NodeRef = Union[str, RecordValue]


class Model:
    """A plugin-typed graph held in one :class:`Environment`.

    Nodes and edges are kept in declaration order. Edge endpoints are stored
    as direct references to node values, resolved when the edge is added.
    """

    def __init__(self, plugin: Plugin, environment: Optional[Environment] = None) -> None:
        self.plugin = plugin
        self.environment = environment or Environment()
        self.nodes: List[RecordValue] = []
        self.edges: List[RecordValue] = []
        self.graph = RecordValue.create(self.environment, plugin.types.graph)
        self._ids: Dict[int, str] = {}
        self._roles: Dict[int, str] = {}
        self._elements: Dict[str, RecordValue] = {}

    # --- Construction ---

    def add_node(self, kind: str, *, id: Optional[str] = None, **fields: Any) -> RecordValue:
        """Add a node of the declared node type ``kind``."""

        node_type = _declared(kind, self.plugin.types.node_types(), "node", self.plugin)
        node = RecordValue.create(self.environment, node_type)
        self._register(node, id or new_id("node"), "node")
        self.nodes.append(node)
        self._assign(node, fields)
        return node

    def add_edge(
        self,
        kind: str,
        source: NodeRef,
        destination: NodeRef,
        *,
        id: Optional[str] = None,
        **fields: Any,
    ) -> RecordValue:
        """Add an edge of the declared edge type ``kind`` between two nodes."""

        edge_type = _declared(kind, self.plugin.types.edge_types(), "edge", self.plugin)
        source_node = self._resolve_node(source)
        destination_node = self._resolve_node(destination)
        edge = RecordValue.create(self.environment, edge_type)
        edge.set("source", source_node)
        edge.set("destination", destination_node)
        self._register(edge, id or new_id("edge"), "edge")
        self.edges.append(edge)
        self._assign(edge, fields)
        return edge

    def set_graph_fields(self, **fields: Any) -> None:
        """Assign plugin-declared fields on the graph root."""

        self._assign(self.graph, fields)

    # --- Lookup ---

    def node(self, element_id: str) -> RecordValue:
        element = self._elements.get(element_id)
        if element is None or self._roles[element.handle] != "node":
            raise KeyError(f"Unknown node '{element_id}'")
        return element

    def edge(self, element_id: str) -> RecordValue:
        element = self._elements.get(element_id)
        if element is None or self._roles[element.handle] != "edge":
            raise KeyError(f"Unknown edge '{element_id}'")
        return element

    def id_of(self, element: Value) -> str:
        """Return the identifier of a node or edge of this model."""

        if element.environment is not self.environment or element.handle not in self._ids:
            raise ModelConsistencyError(f"{element!r} is not an element of this model")
        return self._ids[element.handle]

    def is_node(self, value: Value) -> bool:
        return (
            value.environment is self.environment
            and self._roles.get(value.handle) == "node"
        )

    # --- Conversion ---

    def convert(self, data: Any, expected: Optional[Type] = None) -> Value:
        """Convert plain ``data`` (or an existing value) into a model value.

        ``{"node": id}`` and ``{"edge": id}`` refer to model elements and
        ``{"type": name, "fields": {...}}`` builds a record of a named type.
        Any other mapping with string keys becomes an open ``object`` record.
        """

        if isinstance(data, Value):
            return data
        if isinstance(data, Mapping):
            return self._convert_mapping(data, expected)
        if isinstance(data, (list, tuple)):
            element = expected.element if isinstance(expected, ArrayType) else None
            items = [self.convert(item, element) for item in data]
            array_type = expected if isinstance(expected, ArrayType) else ArrayType(
                common_type(item.type for item in items)
            )
            return ArrayValue.create(self.environment, array_type, items)
        return make_primitive(self.environment, data)

    def _convert_mapping(self, data: Mapping[Any, Any], expected: Optional[Type]) -> Value:
        keys = set(data)
        if keys == {"node"}:
            return self._resolve_node(data["node"])
        if keys == {"edge"}:
            return self.edge(data["edge"])
        if "type" in keys and keys <= {"type", "fields"} and isinstance(data["type"], str):
            record = RecordValue.create(self.environment, self._record_type(data["type"], expected))
            self._assign(record, data.get("fields", {}))
            return record
        if not all(isinstance(name, str) for name in keys):
            raise TypeError(f"Mapping keys must be strings to convert {data!r}")
        record = RecordValue.create(self.environment, OBJECT)
        self._assign(record, data)
        return record

    def _record_type(self, name: str, expected: Optional[Type]) -> RecordType:
        candidates = expected.types if isinstance(expected, UnionType) else (expected,)
        for candidate in candidates:
            if isinstance(candidate, RecordType) and candidate.name == name:
                return candidate
        try:
            return self.plugin.types.lookup(name)
        except KeyError:
            if name == OBJECT.name:
                return OBJECT
            raise

    def _assign(self, record: RecordValue, fields: Mapping[str, Any]) -> None:
        record_type: RecordType = record.type  # type: ignore[assignment]
        for name, data in fields.items():
            expected = record_type.member(name) if record_type.has_member(name) else None
            record.set(name, self.convert(data, expected))

    def _register(self, element: RecordValue, element_id: str, role: str) -> None:
        if element_id in self._elements:
            raise ValueError(f"Duplicate model element id '{element_id}'")
        self._ids[element.handle] = element_id
        self._roles[element.handle] = role
        self._elements[element_id] = element

    def _resolve_node(self, ref: NodeRef) -> RecordValue:
        if isinstance(ref, RecordValue):
            if self.is_node(ref):
                return ref
            raise ModelConsistencyError(f"{ref!r} is not a node of this model")
        try:
            return self.node(ref)
        except KeyError:
            raise ModelConsistencyError(f"Edge endpoint '{ref}' does not resolve to a node") from None

    # --- Serialization ---

    def serialize(self) -> Dict[str, Any]:
        """Return a JSON-compatible representation without derived fields."""

        return {
            "graph": self._encode_fields(self.graph, GRAPH_DERIVED_FIELDS),
            "nodes": [
                {
                    "id": self.id_of(node),
                    "kind": node.type.name,
                    "fields": self._encode_fields(node, NODE_DERIVED_FIELDS),
                }
                for node in self.nodes
            ],
            "edges": [
                {
                    "id": self.id_of(edge),
                    "kind": edge.type.name,
                    "source": self.id_of(edge.get("source")),
                    "destination": self.id_of(edge.get("destination")),
                    "fields": self._encode_fields(edge, EDGE_ENDPOINT_FIELDS),
                }
                for edge in self.edges
            ],
        }

    @classmethod
    def from_serial(cls, serial: Mapping[str, Any], plugin: Plugin) -> "Model":
        """Build a model in a fresh environment from :meth:`serialize` output.

        Elements are created before any field is decoded, so fields may refer
        to nodes and edges declared later.
        """

        model = cls(plugin)
        nodes = serial.get("nodes", [])
        edges = serial.get("edges", [])
        for entry in nodes:
            model.add_node(entry["kind"], id=entry["id"])
        for entry in edges:
            model.add_edge(entry["kind"], entry["source"], entry["destination"], id=entry["id"])
        for entry in nodes:
            model._assign(model.node(entry["id"]), entry.get("fields", {}))
        for entry in edges:
            model._assign(model.edge(entry["id"]), entry.get("fields", {}))
        model._assign(model.graph, serial.get("graph", {}))
        return model

    def _encode_fields(self, record: RecordValue, skip: Sequence[str]) -> Dict[str, Any]:
        return {
            name: self._encode(value)
            for name, value in record.fields().items()
            if name not in skip
        }

    def _encode(self, value: Value) -> Any:
        if isinstance(value, UnionValue):
            return self._encode(value.value)
        if isinstance(value, ArrayValue):
            return [self._encode(item) for item in value]
        if isinstance(value, RecordValue):
            if value.handle in self._ids and value.environment is self.environment:
                return {self._roles[value.handle]: self._ids[value.handle]}
            return {"type": value.type.name, "fields": self._encode_fields(value, ())}
        return value.data  # type: ignore[attr-defined]

    def __repr__(self) -> str:
        return f"Model({self.plugin.name}, nodes={len(self.nodes)}, edges={len(self.edges)})"


def _declared(kind: str, candidates: Iterable[RecordType], what: str, plugin: Plugin) -> RecordType:
    for candidate in candidates:
        if candidate.name == kind:
            return candidate
    raise KeyError(f"Plugin '{plugin.name}' declares no {what} type '{kind}'")


__all__ = ["Model", "NodeRef"]
