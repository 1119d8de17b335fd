"""Lark Transformer that converts a DOT parse tree into a Graph model."""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from pathlib import Path
from typing import Any

from lark import Lark, Token, Transformer
from lark.exceptions import LarkError, UnexpectedInput

from pipegraph.durations import DURATION_RE, parse_duration_seconds
from pipegraph.model.graph import Edge, Graph, Node
from pipegraph.parser.errors import ParseError

logger = logging.getLogger(__name__)

GRAMMAR_PATH = Path(__file__).parent / "grammar.lark"

# Fields that live directly on the Node dataclass (not in attrs).
_NODE_FIELDS: dict[str, type] = {
    "label": str,
    "shape": str,
    "type": str,
    "prompt": str,
    "max_retries": int,
    "goal_gate": bool,
    "retry_target": str,
    "fallback_retry_target": str,
    "timeout": float,
    "allow_partial": bool,
}

# Fields that live directly on the Edge dataclass.
_EDGE_FIELDS: dict[str, type] = {
    "label": str,
    "condition": str,
    "weight": int,
}

_ESCAPES = {"n": "\n", "t": "\t", '"': '"', "\\": "\\"}
_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)


def _unescape(body: str) -> str:
    """Decode ``\\n``, ``\\t``, ``\\"`` and ``\\\\``; other escapes stay verbatim."""
    return _ESCAPE_RE.sub(lambda m: _ESCAPES.get(m.group(1), m.group(0)), body)


def _coerce(key: str, value: Any, target: type) -> Any:
    """Coerce a parsed value to the type the Node/Edge field expects."""
    if target is bool:
        if isinstance(value, str):
            return value.strip().lower() in ("true", "1", "yes")
        return bool(value)
    if target is int:
        try:
            return int(value)
        except (TypeError, ValueError) as exc:
            raise ParseError(f"Attribute {key!r} expects an integer, got {value!r}") from exc
    if target is float:
        return _timeout_seconds(key, value)
    return str(value)


def _timeout_seconds(key: str, value: Any) -> float | None:
    """Durations become seconds; bare numbers are milliseconds.

    Anything else yields None so the raw value stays in ``Node.attrs``.
    """
    if isinstance(value, str) and DURATION_RE.match(value):
        return parse_duration_seconds(value)
    if not isinstance(value, bool):
        try:
            return float(value) / 1000.0
        except (TypeError, ValueError):
            pass
    logger.warning("Attribute %r is not a duration: %r", key, value)
    return None


def _build_node(node_id: str, attrs: dict[str, Any]) -> Node:
    """Build a Node from an id and merged attribute dict."""
    kwargs: dict[str, Any] = {"id": node_id}
    extra: dict[str, Any] = {}
    for k, v in attrs.items():
        if k in _NODE_FIELDS:
            coerced = _coerce(k, v, _NODE_FIELDS[k])
            if coerced is None:
                extra[k] = v
            else:
                kwargs[k] = coerced
        else:
            extra[k] = v
    return Node(attrs=extra, **kwargs)


def _build_edge(from_node: str, to_node: str, attrs: dict[str, Any]) -> Edge:
    """Build an Edge from endpoints and merged attribute dict."""
    kwargs: dict[str, Any] = {"from_node": from_node, "to_node": to_node}
    extra: dict[str, Any] = {}
    for k, v in attrs.items():
        if k in _EDGE_FIELDS:
            kwargs[k] = _coerce(k, v, _EDGE_FIELDS[k])
        else:
            extra[k] = v
    return Edge(attrs=extra, **kwargs)


class _Sentinel:
    """Marker objects returned by transformer rules that represent statements."""


class _NodeDefault(_Sentinel):
    def __init__(self, attrs: dict[str, Any]):
        self.attrs = attrs


class _EdgeDefault(_Sentinel):
    def __init__(self, attrs: dict[str, Any]):
        self.attrs = attrs


class _GraphAttr(_Sentinel):
    def __init__(self, attrs: dict[str, Any]):
        self.attrs = attrs


class _NodeDecl(_Sentinel):
    def __init__(self, node_id: str, attrs: dict[str, Any]):
        self.node_id = node_id
        self.attrs = attrs


class _EdgeDecl(_Sentinel):
    def __init__(self, node_ids: list[str], attrs: dict[str, Any]):
        self.node_ids = node_ids
        self.attrs = attrs


class _Subgraph(_Sentinel):
    def __init__(self, statements: list[_Sentinel]):
        self.statements = statements


class DotTransformer(Transformer):  # type: ignore[type-arg]
    """Transform a Lark parse tree into the graph name and its statement sentinels."""

    # ---- value typing ----

    def string_value(self, items: list[Token]) -> str:
        return _unescape(str(items[0])[1:-1])

    def duration_value(self, items: list[Token]) -> str:
        # Kept as written; consumers convert with pipegraph.durations.
        return str(items[0])

    def boolean_value(self, items: list[Token]) -> bool:
        return str(items[0]) == "true"

    def float_value(self, items: list[Token]) -> float:
        return float(items[0])

    def int_value(self, items: list[Token]) -> int:
        return int(items[0])

    def bare_id_value(self, items: list[Token]) -> str:
        return str(items[0])

    # ---- structural ----

    def key(self, items: list[Token]) -> str:
        return ".".join(str(t) for t in items)

    def attr(self, items: list[Any]) -> tuple[str, Any]:
        return (str(items[0]), items[1])

    def attr_list(self, items: list[tuple[str, Any]]) -> dict[str, Any]:
        return dict(items)

    def node_id(self, items: list[Token]) -> str:
        return str(items[0])

    def node_stmt(self, items: list[Any]) -> _NodeDecl:
        attrs = items[1] if len(items) > 1 else {}
        return _NodeDecl(str(items[0]), attrs)

    def edge_stmt(self, items: list[Any]) -> _EdgeDecl:
        attrs: dict[str, Any] = {}
        if isinstance(items[-1], dict):
            attrs = items[-1]
            items = items[:-1]
        return _EdgeDecl([str(i) for i in items], attrs)

    def graph_attr_stmt(self, items: list[Any]) -> _GraphAttr:
        return _GraphAttr(items[0])

    def graph_attr_assign(self, items: list[Any]) -> _GraphAttr:
        return _GraphAttr({str(items[0]): items[1]})

    def node_defaults(self, items: list[Any]) -> _NodeDefault:
        return _NodeDefault(items[0])

    def edge_defaults(self, items: list[Any]) -> _EdgeDefault:
        return _EdgeDefault(items[0])

    def subgraph(self, items: list[Any]) -> _Subgraph:
        return _Subgraph([item for item in items if isinstance(item, _Sentinel)])

    def digraph(self, items: list[Any]) -> tuple[str, list[_Sentinel]]:
        return str(items[0]), [item for item in items[1:] if isinstance(item, _Sentinel)]

    def start(self, items: list[Any]) -> tuple[str, list[_Sentinel]]:
        return items[0]


class _GraphBuilder:
    """Walk the sentinel statements and assemble a Graph.

    Node attributes are collected raw and turned into Nodes at the end so
    that repeated declarations of the same id merge (later keys win).
    Default blocks apply to nodes and edges declared after them, within
    the enclosing (sub)graph only.
    """

    def __init__(self, name: str) -> None:
        self.graph = Graph(name=name)
        self._node_attrs: dict[str, dict[str, Any]] = {}

    def build(self, statements: list[_Sentinel]) -> Graph:
        self._process(statements, {}, {})
        for node_id, attrs in self._node_attrs.items():
            self.graph.add_node(_build_node(node_id, attrs))
        return self.graph

    def _declare(self, node_id: str, attrs: dict[str, Any], node_defaults: dict[str, Any]) -> None:
        existing = self._node_attrs.get(node_id)
        if existing is None:
            self._node_attrs[node_id] = {**node_defaults, **attrs}
        else:
            existing.update(attrs)

    def _process(
        self,
        statements: list[_Sentinel],
        node_defaults: dict[str, Any],
        edge_defaults: dict[str, Any],
    ) -> None:
        node_defaults = dict(node_defaults)
        edge_defaults = dict(edge_defaults)

        for stmt in statements:
            if isinstance(stmt, _GraphAttr):
                self.graph.attributes.update(stmt.attrs)

            elif isinstance(stmt, _NodeDefault):
                node_defaults.update(stmt.attrs)

            elif isinstance(stmt, _EdgeDefault):
                edge_defaults.update(stmt.attrs)

            elif isinstance(stmt, _NodeDecl):
                self._declare(stmt.node_id, stmt.attrs, node_defaults)

            elif isinstance(stmt, _EdgeDecl):
                merged = {**edge_defaults, **stmt.attrs}
                for nid in stmt.node_ids:
                    self._declare(nid, {}, node_defaults)
                # A -> B -> C produces A->B and B->C, sharing one attribute list.
                for src, dst in zip(stmt.node_ids, stmt.node_ids[1:]):
                    self.graph.add_edge(_build_edge(src, dst, merged))

            elif isinstance(stmt, _Subgraph):
                self._process(stmt.statements, node_defaults, edge_defaults)


@lru_cache(maxsize=1)
def _parser() -> Lark:
    return Lark(GRAMMAR_PATH.read_text(encoding="utf-8"), parser="lalr", start="start")


def parse_dot(source: str) -> Graph:
    """Parse a DOT source string into a Graph model.

    Raises ParseError (with line/column where known) on malformed input.
    """
    try:
        tree = _parser().parse(source)
    except UnexpectedInput as e:
        raise ParseError(str(e), line=e.line, column=e.column) from e
    except LarkError as e:
        raise ParseError(str(e)) from e
    name, statements = DotTransformer().transform(tree)
    return _GraphBuilder(name).build(statements)


def parse_dot_file(path: str | Path) -> Graph:
    """Read and parse a DOT file."""
    return parse_dot(Path(path).read_text(encoding="utf-8"))
