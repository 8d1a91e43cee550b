"""Promotion of caller-supplied values into graph nodes of a declared type."""

from __future__ import annotations

import numbers
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, TypeVar

from ._computed import ComputedObject
from ._errors import ArgumentError
from ._ir import Node

if TYPE_CHECKING:
    from ._ir import Signature

NUMBER_TYPES = frozenset({"Number", "Float", "Double", "Integer", "Long", "Short", "Byte"})
SEQUENCE_TYPES = frozenset({"List", "Array"})
FUNCTION_TYPES = frozenset({"Algorithm", "Function"})

# Value classes keyed by the type name they report, e.g. "Image" -> Image
_value_types: dict[str, type[ComputedObject]] = {}

T = TypeVar("T", bound=type[ComputedObject])


def register_value_type(cls: T) -> T:
    """Class decorator registering ``cls`` as the promotion target for its type name."""
    _value_types[cls._type_name] = cls
    return cls


def value_type(type_name: str) -> type[ComputedObject] | None:
    return _value_types.get(type_name)


def is_number(value: object) -> bool:
    return isinstance(value, numbers.Number) and not isinstance(value, bool)


def is_string(value: object) -> bool:
    return isinstance(value, str)


def is_sequence(value: object) -> bool:
    return isinstance(value, (list, tuple))


def promote(value: Any, type_name: str) -> Any:
    """Convert ``value`` to something acceptable for a parameter of ``type_name``.

    Registered value types are constructed from the value; primitive types
    are checked; anything declared ``Object`` (or an unknown type) passes
    through unchanged.

    Raises:
        ArgumentError: If the value cannot be promoted to the declared type.

    """
    if value is None:
        return None

    if (cls := _value_types.get(type_name)) is not None:
        return cls(value)

    if type_name in FUNCTION_TYPES:
        from ._function import CustomFunction, Function  # noqa: PLC0415

        if isinstance(value, (Function, ComputedObject)):
            return value
        if callable(value):
            return CustomFunction.from_callable(value)
        msg = f"Cannot promote {value!r} to {type_name}"
        raise ArgumentError(msg)

    if isinstance(value, ComputedObject):
        return value

    if type_name in NUMBER_TYPES:
        if is_number(value):
            return value
    elif type_name == "String":
        if is_string(value):
            return value
    elif type_name == "Boolean":
        if isinstance(value, (bool, numbers.Integral)):
            return value
    elif type_name in SEQUENCE_TYPES:
        if is_sequence(value) or (type_name == "Array" and is_number(value)):
            return value
    elif type_name == "Dictionary":
        if isinstance(value, Mapping):
            return value
    else:
        return value

    msg = f"Cannot promote {value!r} to {type_name}"
    raise ArgumentError(msg)


def to_node(value: Any) -> Node:
    """Turn a promoted value into a graph node.

    Graph values contribute their existing node (no copy). Literals become
    constants; sequences and mappings keep any graph values they contain as
    nested nodes.
    """
    from ._function import Function  # noqa: PLC0415

    if isinstance(value, Node):
        return value
    if isinstance(value, ComputedObject):
        return value.node
    if isinstance(value, Function):
        return value.as_node()
    return Node.constant(_literal(value))


def _literal(value: Any) -> Any:
    from ._function import Function  # noqa: PLC0415

    if isinstance(value, (ComputedObject, Function)):
        return to_node(value)
    if is_sequence(value):
        return tuple(_literal(item) for item in value)
    if isinstance(value, Mapping):
        return {key: _literal(item) for key, item in value.items()}
    return value


def promote_arguments(signature: Signature, named: Mapping[str, Any]) -> dict[str, Node]:
    """Promote named arguments against a signature and turn them into nodes.

    Optional parameters that are absent or None are left out.

    Raises:
        ArgumentError: If an argument is unknown, a required one is missing,
            or a value cannot be promoted.

    """
    known = {param.name for param in signature.args}
    unknown = [key for key in named if key not in known]
    if unknown:
        msg = f"Unrecognized arguments {unknown} to function: {signature.name or '<anonymous>'}"
        raise ArgumentError(msg)

    nodes: dict[str, Node] = {}
    for param in signature.args:
        value = named.get(param.name)
        if value is None:
            if not param.optional:
                msg = f"Required argument ({param.name}) missing to function: {signature.name or '<anonymous>'}"
                raise ArgumentError(msg)
            continue
        try:
            promoted = promote(value, param.declared_type)
        except ArgumentError as e:
            msg = f"Invalid argument '{param.name}' to function {signature.name or '<anonymous>'}: {e}"
            raise ArgumentError(msg) from e
        nodes[param.name] = to_node(promoted)
    return nodes


def wrap_result(node: Node, type_name: str) -> ComputedObject:
    """Wrap a node in the value class registered for ``type_name``."""
    if (cls := _value_types.get(type_name)) is not None:
        return cls._from_node(node)
    return ComputedObject(node, type_name)
