"""Tests for graph summaries shown by the CLI."""

from rasterexpr import Image, Node, NodeKind
from rasterexpr._cli.graph_summary import OperationCount, graph_depth, summarize_graph


def test_depth_of_constant() -> None:
    assert graph_depth(Node.constant(1)) == 1


def test_summary_of_concatenation() -> None:
    summary = summarize_graph(Image.cat(1, 2).node)

    assert summary.root_kind == NodeKind.CALL
    assert summary.root_operation == "Image.addBands"
    assert summary.node_count == 5
    assert summary.depth == 3
    assert summary.kind_counts == {NodeKind.CONSTANT: 2, NodeKind.CALL: 3}
    assert summary.operations == [OperationCount("Image.addBands", 1), OperationCount("Image.constant", 2)]


def test_shared_nodes_are_counted_once() -> None:
    image = Image(1)

    summary = summarize_graph(image.add(image).node)

    assert summary.node_count == 3
    assert summary.operations == [OperationCount("Image.add", 1), OperationCount("Image.constant", 1)]


def test_calls_through_functions() -> None:
    summary = summarize_graph(Image("abc").expression("b1 * 2").node)

    assert summary.root_operation is None
    assert OperationCount("<function>", 1) in summary.operations
    assert OperationCount("Image.parseExpression", 1) in summary.operations
