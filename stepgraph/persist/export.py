"""Model export utilities for visualization hosts."""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Literal

import networkx as nx

from stepgraph.graph.model import EDGE_ENDPOINT_FIELDS, NODE_DERIVED_FIELDS, Model
from stepgraph.values.environment import PrimitiveValue, RecordValue


def _primitive_fields(record: RecordValue, skip) -> Dict[str, Any]:
    return {
        name: value.data
        for name, value in record.fields().items()
        if name not in skip and isinstance(value, PrimitiveValue) and value.data is not None
    }


@dataclass
class GraphExporter:
    """Render a :class:`Model` as a ``networkx`` graph or a portable document.

    Only primitive fields are carried over; references and arrays stay in the
    model.
    """

    model: Model

    def to_networkx(self) -> nx.MultiDiGraph:
        """Return a multigraph with one node per model node and one keyed edge per model edge."""

        graph = nx.MultiDiGraph(plugin=self.model.plugin.name)
        for node in self.model.nodes:
            graph.add_node(
                self.model.id_of(node),
                kind=node.type.name,
                **_primitive_fields(node, NODE_DERIVED_FIELDS),
            )
        for edge in self.model.edges:
            graph.add_edge(
                self.model.id_of(edge.get("source")),
                self.model.id_of(edge.get("destination")),
                key=self.model.id_of(edge),
                kind=edge.type.name,
                **_primitive_fields(edge, EDGE_ENDPOINT_FIELDS),
            )
        return graph

    def export(self, *, format: Literal["graphml", "json"] = "json") -> str:
        """Export the model to the requested ``format``."""

        if format == "graphml":
            return "\n".join(nx.generate_graphml(self.to_networkx()))
        if format == "json":
            return json.dumps(nx.node_link_data(self.to_networkx(), edges="edges"))
        raise ValueError(f"Unsupported export format: {format}")


__all__ = ["GraphExporter"]
