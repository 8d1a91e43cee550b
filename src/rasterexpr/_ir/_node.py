"""Node of a deferred computation graph."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum, auto
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterator

    from ._signature import Signature


class NodeKind(StrEnum):
    """The kind of vertex in the computation graph."""

    CONSTANT = auto()  # Literal value
    REFERENCE = auto()  # Named variable, bound when a function is applied
    CALL = auto()  # Invocation of a remote operation or function-valued node
    FUNCTION = auto()  # Lambda with argument names and a body


@dataclass(frozen=True, slots=True, eq=False)
class Node:
    """An immutable vertex of the computation graph.

    Nodes never change after construction. Building a larger expression only
    creates new nodes that hold references to existing ones, so two
    expressions may safely share a common subgraph.

    Use the constructors rather than instantiating directly:

    >>> five = Node.constant(5)
    >>> Node.call("Image.constant", {"value": five}).arguments["value"] is five
    True

    Attributes:
        kind: Which of the four vertex kinds this is.
        value: The literal for CONSTANT nodes.
        name: The variable name for REFERENCE nodes.
        callee: For CALL nodes, an operation name or a node evaluating to a function.
        args: For CALL nodes, the (parameter name, argument node) pairs in order.
        params: For FUNCTION nodes, the argument names.
        body: For FUNCTION nodes, the expression computed from the arguments.
        signature: For CALL nodes, the signature the call was built against.
            Ignored by equality.

    Equality is structural and compares the whole subgraph.

    """

    kind: NodeKind
    value: Any = None
    name: str | None = None
    callee: str | Node | None = None
    args: tuple[tuple[str, Node], ...] = ()
    params: tuple[str, ...] = ()
    body: Node | None = None
    signature: Signature | None = field(default=None, compare=False, repr=False)

    @classmethod
    def constant(cls, value: Any) -> Node:
        """Create a literal node."""
        return cls(kind=NodeKind.CONSTANT, value=value)

    @classmethod
    def reference(cls, name: str) -> Node:
        """Create a reference to a named variable."""
        return cls(kind=NodeKind.REFERENCE, name=name)

    @classmethod
    def call(
        cls,
        callee: str | Node,
        arguments: Mapping[str, Node],
        signature: Signature | None = None,
    ) -> Node:
        """Create a call node.

        Args:
            callee: Name of the remote operation, or a node that evaluates to a function.
            arguments: Argument nodes keyed by parameter name.
            signature: The signature describing the call, if known.

        Raises:
            TypeError: If an argument is not a Node.

        """
        for arg_name, arg in arguments.items():
            if not isinstance(arg, Node):
                msg = f"Argument '{arg_name}' must be a Node, got {type(arg).__name__}"
                raise TypeError(msg)
        return cls(kind=NodeKind.CALL, callee=callee, args=tuple(arguments.items()), signature=signature)

    @classmethod
    def function(cls, params: tuple[str, ...], body: Node) -> Node:
        """Create a lambda node whose body refers to ``params`` by name."""
        return cls(kind=NodeKind.FUNCTION, params=tuple(params), body=body)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        # Iterative so comparing deep left folds doesn't hit the recursion limit
        compared: set[tuple[int, int]] = set()
        stack: list[tuple[Node, Node]] = [(self, other)]
        while stack:
            left, right = stack.pop()
            if left is right or (id(left), id(right)) in compared:
                continue
            compared.add((id(left), id(right)))
            if not left._same_fields(right):
                return False
            if isinstance(left.callee, Node) and isinstance(right.callee, Node):
                stack.append((left.callee, right.callee))
            if left.body is not None and right.body is not None:
                stack.append((left.body, right.body))
            stack.extend((a, b) for (_, a), (_, b) in zip(left.args, right.args, strict=True))
        return True

    def __hash__(self) -> int:
        return hash((self.kind, self.name, self.operation_name, self.params, len(self.args)))

    def _same_fields(self, other: Node) -> bool:
        """Compare everything except the child nodes of calls and functions."""
        if (self.kind, self.name, self.params) != (other.kind, other.name, other.params):
            return False
        if isinstance(self.callee, Node) or isinstance(other.callee, Node):
            if not (isinstance(self.callee, Node) and isinstance(other.callee, Node)):
                return False
        elif self.callee != other.callee:
            return False
        if [name for name, _ in self.args] != [name for name, _ in other.args]:
            return False
        if (self.body is None) != (other.body is None):
            return False
        return self.value == other.value

    @property
    def arguments(self) -> Mapping[str, Node]:
        """Read-only view of the call arguments."""
        return MappingProxyType(dict(self.args))

    @property
    def operation_name(self) -> str | None:
        """The remote operation name, or None if this is not a named call."""
        if self.kind == NodeKind.CALL and isinstance(self.callee, str):
            return self.callee
        return None

    def children(self) -> Iterator[Node]:
        """Yield the nodes this node refers to directly."""
        match self.kind:
            case NodeKind.CALL:
                if isinstance(self.callee, Node):
                    yield self.callee
                for _, arg in self.args:
                    yield arg
            case NodeKind.FUNCTION:
                if self.body is not None:
                    yield self.body
            case NodeKind.CONSTANT:
                yield from _nodes_in_literal(self.value)
            case _:
                return

    def walk(self) -> Iterator[Node]:
        """Yield every distinct node reachable from this one, children first.

        Shared subgraphs are visited once, identified by object identity.
        """
        seen: set[int] = set()
        # Iterative post-order so deep left folds don't hit the recursion limit
        stack: list[tuple[Node, bool]] = [(self, False)]
        while stack:
            node, expanded = stack.pop()
            if expanded:
                yield node
                continue
            if id(node) in seen:
                continue
            seen.add(id(node))
            stack.append((node, True))
            stack.extend((child, False) for child in reversed(list(node.children())) if id(child) not in seen)


def _nodes_in_literal(value: Any) -> Iterator[Node]:
    if isinstance(value, Node):
        yield value
    elif isinstance(value, (list, tuple)):
        for item in value:
            yield from _nodes_in_literal(item)
    elif isinstance(value, Mapping):
        for item in value.values():
            yield from _nodes_in_literal(item)
