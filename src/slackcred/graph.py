"""Addressed graph records and an in-memory weighted graph container.

Addresses are ordered tuples of string parts. Node and edge addresses are
separate types, so the two spaces never overlap; within each space every
variant owns its own prefix (see ``slackcred.declaration``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

SEPARATOR = "\0"


@dataclass(frozen=True)
class _Address:
    parts: tuple[str, ...]

    _marker = ""

    def __post_init__(self) -> None:
        parts = tuple(self.parts)
        for part in parts:
            if not isinstance(part, str):
                raise TypeError(f"address part must be str, got {type(part).__name__}: {part!r}")
            if SEPARATOR in part:
                raise ValueError(f"address part contains NUL: {part!r}")
        object.__setattr__(self, "parts", parts)

    @classmethod
    def from_parts(cls, *parts: str):
        return cls(tuple(parts))

    def append(self, *parts: str):
        """Return a new address with parts added at the end."""
        return type(self)(self.parts + tuple(parts))

    def has_prefix(self, prefix: _Address) -> bool:
        """Whether prefix is a leading run of this address's parts."""
        if type(prefix) is not type(self):
            return False
        return self.parts[: len(prefix.parts)] == prefix.parts

    def __str__(self) -> str:
        return self._marker + SEPARATOR + "".join(p + SEPARATOR for p in self.parts)


@dataclass(frozen=True)
class NodeAddress(_Address):
    """Address of a graph node."""

    _marker = "N"


@dataclass(frozen=True)
class EdgeAddress(_Address):
    """Address of a graph edge."""

    _marker = "E"


@dataclass(frozen=True)
class Node:
    address: NodeAddress
    description: str
    timestamp_ms: float | None


@dataclass(frozen=True)
class Edge:
    address: EdgeAddress
    timestamp_ms: float | None
    src: NodeAddress
    dst: NodeAddress


class GraphSink(Protocol):
    """What the graph builder needs from a weighted graph container."""

    def add_node(self, node: Node) -> None: ...

    def add_edge(self, edge: Edge) -> None: ...

    def set_node_weight(self, address: NodeAddress, weight: float) -> None: ...


class WeightedGraph:
    """In-memory weighted graph.

    Adding the same node or edge twice is a no-op; adding a different record
    under an address already in use raises ``ValueError``. Edges may point at
    nodes that were never added.
    """

    def __init__(self) -> None:
        self._nodes: dict[NodeAddress, Node] = {}
        self._edges: dict[EdgeAddress, Edge] = {}
        self.node_weights: dict[NodeAddress, float] = {}

    def add_node(self, node: Node) -> None:
        existing = self._nodes.get(node.address)
        if existing is None:
            self._nodes[node.address] = node
        elif existing != node:
            raise ValueError(f"conflict between new node {node} and existing {existing}")

    def add_edge(self, edge: Edge) -> None:
        existing = self._edges.get(edge.address)
        if existing is None:
            self._edges[edge.address] = edge
        elif existing != edge:
            raise ValueError(f"conflict between new edge {edge} and existing {existing}")

    def set_node_weight(self, address: NodeAddress, weight: float) -> None:
        self.node_weights[address] = weight

    def node(self, address: NodeAddress) -> Node | None:
        return self._nodes.get(address)

    def edge(self, address: EdgeAddress) -> Edge | None:
        return self._edges.get(address)

    def nodes(self, prefix: NodeAddress | None = None) -> list[Node]:
        """List nodes, optionally only those under an address prefix."""
        return [n for n in self._nodes.values() if prefix is None or n.address.has_prefix(prefix)]

    def edges(self, prefix: EdgeAddress | None = None) -> list[Edge]:
        """List edges, optionally only those under an address prefix."""
        return [e for e in self._edges.values() if prefix is None or e.address.has_prefix(prefix)]

    def to_json(self) -> dict[str, Any]:
        """Serialize to plain JSON types, sorted by address."""
        nodes = sorted(self._nodes.values(), key=lambda n: n.address.parts)
        edges = sorted(self._edges.values(), key=lambda e: e.address.parts)
        weights = sorted(self.node_weights.items(), key=lambda item: item[0].parts)
        return {
            "nodes": [
                {
                    "address": list(n.address.parts),
                    "description": n.description,
                    "timestampMs": n.timestamp_ms,
                }
                for n in nodes
            ],
            "edges": [
                {
                    "address": list(e.address.parts),
                    "src": list(e.src.parts),
                    "dst": list(e.dst.parts),
                    "timestampMs": e.timestamp_ms,
                }
                for e in edges
            ],
            "nodeWeights": [
                {"address": list(address.parts), "weight": weight}
                for address, weight in weights
            ],
        }
