"""Installation of registry operations as members of value types."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator, Mapping
from types import MethodType
from typing import TYPE_CHECKING, Any

from ._function import Function

if TYPE_CHECKING:
    from ._computed import ComputedObject
    from ._ir import Signature
    from ._registry import SignatureRegistry

logger = logging.getLogger(__name__)

# Guards member installation/removal and the initialized flags of value types
bind_lock = threading.RLock()

_BOUND_ATTR = "__rasterexpr_bound__"
_INITIALIZED_ATTR = "__rasterexpr_initialized__"


class BoundOperation(Function):
    """A registry operation installed as a member of a value type.

    Calling it builds a call node. Accessed through an instance, the instance
    is passed as the first argument when the operation's first parameter is
    declared with the bound type name.
    """

    def __init__(self, member_name: str, signature: Signature, bound_type_name: str) -> None:
        self.member_name = member_name
        self._signature = signature
        self.binds_receiver = bool(signature.args) and signature.args[0].declared_type == bound_type_name
        self.__name__ = member_name
        self.__doc__ = _make_doc(signature)

    def signature(self) -> Signature:
        return self._signature

    def callee(self) -> str:
        return self._signature.name

    def __get__(self, instance: object, owner: type | None = None) -> Any:
        if instance is None or not self.binds_receiver:
            return self
        return MethodType(self, instance)

    def __call__(self, *args: Any, **kwargs: Any) -> ComputedObject:
        return self.call(*args, **kwargs)

    def __repr__(self) -> str:
        return f"<bound operation {self._signature.name} as {self.member_name}>"


def _make_doc(signature: Signature) -> str:
    lines = [signature.description or signature.name, "", "Args:"]
    lines.extend(
        f"    {param.name} ({param.declared_type}{', optional' if param.optional else ''}): {param.description}".rstrip()
        for param in signature.args
    )
    lines.extend(["", "Returns:", f"    {signature.return_type}"])
    return "\n".join(lines)


class CallableTable(Mapping[str, BoundOperation]):
    """Read-only mapping from member name to the operation installed under it."""

    def __init__(self, members: Mapping[str, BoundOperation]) -> None:
        self._members = dict(members)

    def __getitem__(self, key: str) -> BoundOperation:
        return self._members[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._members)

    def __len__(self) -> int:
        return len(self._members)

    def __repr__(self) -> str:
        return f"CallableTable({sorted(self._members)})"


def _installed(target: type) -> dict[str, BoundOperation]:
    # Look in the class's own namespace so subclasses don't share the parent's table
    installed = target.__dict__.get(_BOUND_ATTR)
    if installed is None:
        installed = {}
        setattr(target, _BOUND_ATTR, installed)
    return installed


def bind(
    target: type,
    registry: SignatureRegistry,
    namespace: str,
    bound_type_name: str,
    prefix: str = "",
) -> CallableTable:
    """Install every operation of ``namespace`` as a member of ``target``.

    Members the type already has (hand-written methods, inherited attributes
    or members installed by an earlier call) are left untouched, so binding
    twice is a no-op.

    Args:
        target: The class to install members on.
        registry: Where to read the operations from.
        namespace: Registry namespace, e.g. ``"Image"``.
        bound_type_name: Type name whose first parameter binds the receiver.
        prefix: Prepended to each member name, e.g. ``"focal_"``.

    Returns:
        The members of ``namespace`` now installed on ``target``.

    """
    with bind_lock:
        installed = _installed(target)
        table: dict[str, BoundOperation] = {}
        skipped: list[str] = []
        for signature in registry.list_operations(namespace):
            member_name = prefix + signature.member_name
            existing = installed.get(member_name)
            if existing is not None:
                table[member_name] = existing
                continue
            if hasattr(target, member_name):
                skipped.append(member_name)
                continue
            operation = BoundOperation(member_name, signature, bound_type_name)
            setattr(target, member_name, operation)
            installed[member_name] = operation
            table[member_name] = operation

    if skipped:
        logger.debug(f"{target.__name__} already defines {skipped}; not binding them from '{namespace}'")
    logger.debug(f"Bound {len(table)} operations from '{namespace}' onto {target.__name__}")
    return CallableTable(table)


def unbind(target: type) -> None:
    """Remove every member previously installed on ``target`` by ``bind``.

    Also clears the flag set by ``mark_initialized``, so the next
    initialization of ``target`` binds again from the current registry.
    """
    with bind_lock:
        installed = _installed(target)
        for member_name in installed:
            delattr(target, member_name)
        count = len(installed)
        installed.clear()
        setattr(target, _INITIALIZED_ATTR, False)
    logger.debug(f"Removed {count} bound operations from {target.__name__}")


def bound_members(target: type) -> CallableTable:
    """Get the members currently installed on ``target``."""
    with bind_lock:
        return CallableTable(_installed(target))


def mark_initialized(target: type) -> None:
    """Record that ``target`` has bound everything it needs. Cleared by ``unbind``."""
    with bind_lock:
        setattr(target, _INITIALIZED_ATTR, True)


def is_initialized(target: type) -> bool:
    # Own namespace only: a subclass is not initialized just because its parent is
    return bool(target.__dict__.get(_INITIALIZED_ATTR, False))
