"""Callable operations that produce call nodes instead of results."""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from ._api import get_registry
from ._computed import ComputedObject
from ._ir import Node, Parameter, Signature
from ._promote import promote, promote_arguments, to_node, wrap_result

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping


class Function(ABC):
    """Something with a signature that can be applied to arguments.

    Applying a function does not evaluate anything: it promotes the
    arguments, builds a call node and wraps it in the value class registered
    for the declared return type.
    """

    @abstractmethod
    def signature(self) -> Signature: ...

    @abstractmethod
    def callee(self) -> str | Node:
        """What call nodes built from this function invoke."""

    def as_node(self) -> Node:
        """The node representing this function when it is passed as a value."""
        callee = self.callee()
        return callee if isinstance(callee, Node) else Node.constant(callee)

    def call(self, *args: Any, **kwargs: Any) -> ComputedObject:
        """Apply to positional and keyword arguments."""
        return self.apply(self.signature().name_args(args, kwargs))

    def apply(self, named: Mapping[str, Any]) -> ComputedObject:
        """Apply to a mapping of argument names to values."""
        signature = self.signature()
        node = Node.call(self.callee(), promote_arguments(signature, named), signature=signature)
        return wrap_result(node, signature.return_type)


class ApiFunction(Function):
    """An operation offered by the remote evaluator, looked up in the installed registry."""

    def __init__(self, name: str) -> None:
        self._signature = get_registry().get(name)

    @classmethod
    def lookup(cls, name: str) -> ApiFunction:
        return cls(name)

    @classmethod
    def call_(cls, name: str, *args: Any, **kwargs: Any) -> Any:
        """Call the named operation with positional and keyword arguments."""
        return cls(name).call(*args, **kwargs)

    @classmethod
    def apply_(cls, name: str, named: Mapping[str, Any]) -> Any:
        """Call the named operation with a mapping of named arguments."""
        return cls(name).apply(named)

    def signature(self) -> Signature:
        return self._signature

    def callee(self) -> str:
        return self._signature.name

    def __repr__(self) -> str:
        return f"ApiFunction({self._signature.name!r})"


class SynthesizedFunction(Function):
    """A function-valued graph node paired with a hand-written signature.

    Used where the graph itself produces the function (e.g. a parsed
    expression), so no registry entry describes it.
    """

    def __init__(self, body: ComputedObject | Node, signature: Signature) -> None:
        self._body = body.node if isinstance(body, ComputedObject) else body
        self._signature = signature

    def signature(self) -> Signature:
        return self._signature

    def callee(self) -> Node:
        return self._body


class CustomFunction(Function):
    """A function defined on the client whose body is itself a graph.

    The Python callable runs once, at definition time, on placeholder values
    standing for the arguments; the graph it returns becomes the body.

    Example:
        >>> double = CustomFunction(
        ...     Signature(args=(Parameter(name="img", type="Image"),), returns="Image"),
        ...     lambda img: img.add(img),
        ... )

    """

    def __init__(self, signature: Signature, body: Callable[..., Any]) -> None:
        self._signature = signature
        variables = [wrap_result(Node.reference(param.name), param.declared_type) for param in signature.args]
        result = promote(body(*variables), signature.return_type)
        self._node = Node.function(tuple(param.name for param in signature.args), to_node(result))

    @classmethod
    def from_callable(
        cls,
        func: Callable[..., Any],
        arg_type: str = "Object",
        return_type: str = "Object",
    ) -> CustomFunction:
        """Create a custom function, taking parameter names from ``func``'s signature."""
        params = tuple(
            Parameter(name=param.name, declared_type=arg_type, optional=param.default is not inspect.Parameter.empty)
            for param in inspect.signature(func).parameters.values()
        )
        return cls(Signature(args=params, return_type=return_type), func)

    def signature(self) -> Signature:
        return self._signature

    def callee(self) -> Node:
        return self._node
