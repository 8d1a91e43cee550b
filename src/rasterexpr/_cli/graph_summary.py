"""Graph summary functions for CLI commands.

This module provides pure functions for describing a value's graph.
These are the functional core - no I/O, no Rich rendering.
"""

from collections import Counter
from dataclasses import dataclass

from rasterexpr._ir import Node, NodeKind


@dataclass(frozen=True, slots=True)
class OperationCount:
    """How often one operation is called in a graph."""

    name: str
    calls: int


@dataclass(frozen=True, slots=True)
class GraphSummary:
    """Shape of a graph, counting each shared node once."""

    root_kind: NodeKind
    root_operation: str | None
    node_count: int
    kind_counts: dict[NodeKind, int]
    operations: list[OperationCount]
    depth: int


def graph_depth(root: Node) -> int:
    """Length of the longest path from ``root`` to a leaf, counting nodes."""
    depths: dict[int, int] = {}
    for node in root.walk():
        depths[id(node)] = 1 + max((depths[id(child)] for child in node.children()), default=0)
    return depths[id(root)]


def summarize_graph(root: Node) -> GraphSummary:
    """Summarize the graph rooted at ``root``.

    Calls through a function-valued node (e.g. a parsed expression) are
    counted under ``<function>``.
    """
    nodes = list(root.walk())
    kinds = Counter(node.kind for node in nodes)
    operations = Counter(
        node.operation_name or "<function>" for node in nodes if node.kind == NodeKind.CALL
    )
    return GraphSummary(
        root_kind=root.kind,
        root_operation=root.operation_name,
        node_count=len(nodes),
        kind_counts=dict(kinds),
        operations=[OperationCount(name, calls) for name, calls in sorted(operations.items())],
        depth=graph_depth(root),
    )
