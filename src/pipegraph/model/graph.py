"""Core graph model: Node, Edge, and Graph dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

START_SHAPE = "Mdiamond"
EXIT_SHAPE = "Msquare"

_START_IDS = ("start", "Start")
_EXIT_IDS = ("exit", "Exit", "end", "End")


@dataclass(frozen=True)
class Node:
    """A single stage in the pipeline graph.

    Well-known attributes are typed fields; anything else the graph author
    declares (``tool_command``, ``human.default_choice``, ...) lands in
    ``attrs`` with its parsed scalar type.
    """

    id: str
    label: str = ""
    shape: str = "box"
    type: str = ""
    prompt: str = ""
    max_retries: int | None = None
    goal_gate: bool = False
    retry_target: str = ""
    fallback_retry_target: str = ""
    timeout: float | None = None
    allow_partial: bool = False
    attrs: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Node id must be a non-empty string")

    @property
    def display_name(self) -> str:
        """Return the label if set, otherwise the id."""
        return self.label or self.id

    def attr(self, key: str, default: Any = None) -> Any:
        """Look up an extra attribute by name."""
        return self.attrs.get(key, default)


@dataclass(frozen=True)
class Edge:
    """A directed, optionally guarded transition between two nodes."""

    from_node: str
    to_node: str
    label: str = ""
    condition: str = ""
    weight: int = 0
    attrs: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.from_node or not self.to_node:
            raise ValueError("Edge must have non-empty from_node and to_node")


@dataclass
class Graph:
    """The full pipeline graph: nodes keyed by id, edges in declaration order."""

    name: str
    nodes: dict[str, Node] = field(default_factory=dict)
    edges: list[Edge] = field(default_factory=list)
    attributes: dict[str, Any] = field(default_factory=dict)

    @property
    def goal(self) -> str:
        """Return the pipeline-level goal string."""
        return str(self.attributes.get("goal", ""))

    def add_node(self, node: Node) -> Node:
        self.nodes[node.id] = node
        return node

    def add_edge(self, edge: Edge) -> Edge:
        self.edges.append(edge)
        return edge

    def get_node(self, node_id: str) -> Node | None:
        return self.nodes.get(node_id)

    def start_node(self) -> Node | None:
        """Find the start node: first by Mdiamond shape, then by id."""
        for node in self.nodes.values():
            if node.shape == START_SHAPE:
                return node
        for name in _START_IDS:
            if name in self.nodes:
                return self.nodes[name]
        return None

    def exit_node(self) -> Node | None:
        """Find the exit node: first by Msquare shape, then by id."""
        for node in self.nodes.values():
            if node.shape == EXIT_SHAPE:
                return node
        for name in _EXIT_IDS:
            if name in self.nodes:
                return self.nodes[name]
        return None

    def is_terminal(self, node: Node) -> bool:
        """True for exit-shaped nodes and the conventional exit ids."""
        return node.shape == EXIT_SHAPE or node.id in _EXIT_IDS

    def outgoing_edges(self, node_id: str) -> list[Edge]:
        """Return all edges originating from the given node, in declaration order."""
        return [e for e in self.edges if e.from_node == node_id]

    def incoming_edges(self, node_id: str) -> list[Edge]:
        """Return all edges arriving at the given node."""
        return [e for e in self.edges if e.to_node == node_id]
