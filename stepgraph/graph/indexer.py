"""Adjacency indexing for a model's nodes and edges."""
from __future__ import annotations

import logging

from stepgraph.errors import ModelConsistencyError
from stepgraph.graph.model import Model
from stepgraph.values.environment import ArrayValue, RecordValue, Value
from stepgraph.values.types import ArrayType

LOGGER = logging.getLogger(__name__)


def _array_member(record: RecordValue, name: str) -> ArrayValue:
    member = record.type.member(name)  # type: ignore[attr-defined]
    if not isinstance(member, ArrayType):
        raise TypeError(f"{record.type.name}.{name} must be an array type, got {member.name}")
    return ArrayValue.create(record.environment, member)


def _endpoint(model: Model, edge: RecordValue, name: str) -> RecordValue:
    endpoint: Value = edge.get(name)
    if not isinstance(endpoint, RecordValue) or not model.is_node(endpoint):
        raise ModelConsistencyError(
            f"Edge '{model.id_of(edge)}' {name} does not resolve to a node of the model"
        )
    return endpoint


def index_model(model: Model) -> None:
    """Populate ``children``/``parents`` on every node and flat graph lists.

    Edges are visited once in declaration order, so each node's adjacency
    lists keep that order. The model is modified in place.
    """

    nodes = ArrayValue.create(model.environment, model.graph.type.member("nodes"))  # type: ignore[attr-defined]
    edges = ArrayValue.create(model.environment, model.graph.type.member("edges"))  # type: ignore[attr-defined]

    for node in model.nodes:
        nodes.append(node)
        node.set("children", _array_member(node, "children"))
        node.set("parents", _array_member(node, "parents"))

    for edge in model.edges:
        edges.append(edge)
        source = _endpoint(model, edge, "source")
        source.get("children").append(edge)  # type: ignore[attr-defined]
        destination = _endpoint(model, edge, "destination")
        destination.get("parents").append(edge)  # type: ignore[attr-defined]

    model.graph.set("nodes", nodes)
    model.graph.set("edges", edges)
    LOGGER.debug("Indexed model with %d nodes and %d edges", len(nodes), len(edges))


__all__ = ["index_model"]
