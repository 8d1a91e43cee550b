"""Base class for values backed by a computation graph node."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Self

from ._ir import Node

if TYPE_CHECKING:
    from ._encoder import Serializer


class ComputedObjectMeta(type):
    """Metaclass that makes ``Cls(x)`` return ``x`` when it already is a ``Cls``.

    Constructors of value types are idempotent on their own type, without
    re-running ``__init__`` on the existing instance.
    """

    def __call__(cls, *args: Any, **kwargs: Any) -> Any:
        if len(args) == 1 and not kwargs and isinstance(args[0], cls):
            return args[0]
        return super().__call__(*args, **kwargs)


class ComputedObject(metaclass=ComputedObjectMeta):
    """A value whose computation is deferred to the remote evaluator.

    Operations on a ComputedObject never compute anything; they produce new
    objects wrapping new graph nodes that refer to this one.

    Results of operations whose declared return type has no dedicated value
    class are plain ComputedObjects that remember that type, so
    ``name()`` reports e.g. ``"Array"``.
    """

    _type_name: str = "ComputedObject"

    def __init__(self, node: Node, type_name: str | None = None) -> None:
        if not isinstance(node, Node):
            msg = f"ComputedObject requires a Node, got {type(node).__name__}"
            raise TypeError(msg)
        self._node = node
        if type_name is not None:
            self._type_name = type_name

    @classmethod
    def _from_node(cls, node: Node) -> Self:
        """Wrap an existing node without going through the public constructor."""
        obj = cls.__new__(cls)
        ComputedObject.__init__(obj, node)
        return obj

    @classmethod
    def variable(cls, name: str) -> Self:
        """Create a placeholder for a function argument called ``name``."""
        return cls._from_node(Node.reference(name))

    @property
    def node(self) -> Node:
        """The root node of this value's graph."""
        return self._node

    def name(self) -> str:
        """The value type name used for promotion decisions."""
        return self._type_name

    def encode(self, serializer: Serializer | None = None) -> Any:
        """Encode this value's graph into its JSON-compatible wire form."""
        from ._encoder import Serializer  # noqa: PLC0415

        return (serializer or Serializer()).encode(self._node)

    def serialize(self, *, pretty: bool = False, compact: bool = True) -> str:
        """Serialize this value's graph to a JSON string."""
        from ._encoder import serialize  # noqa: PLC0415

        return serialize(self._node, pretty=pretty, compact=compact)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ComputedObject):
            return NotImplemented
        return self.name() == other.name() and self._node == other._node

    def __hash__(self) -> int:
        return hash((self.name(), self._node.kind, self._node.operation_name))

    def __repr__(self) -> str:
        node = self._node
        detail = node.operation_name or node.name or node.kind.value
        return f"{type(self).__name__}<{self.name()}: {detail}>"
