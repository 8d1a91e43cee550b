"""Encoding of computation graphs into the JSON request format."""

from __future__ import annotations

import hashlib
import json
import numbers
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from ._errors import EncodeError
from ._ir import Node, NodeKind
from ._promote import to_node


class Serializer:
    """Walks a graph and produces its JSON-compatible wire form.

    In compact mode every call and function is hoisted into a scope, keyed by
    a hash of its encoding, and referenced by key. Identical subgraphs are
    therefore emitted once:

        {"type": "CompoundValue",
         "scope": [["0", {...}], ["1", {...}]],
         "value": {"type": "ValueRef", "value": "1"}}

    Without compact mode the graph is written out as a nested tree.
    """

    def __init__(self, *, compact: bool = True) -> None:
        self.compact = compact
        self._scope: list[tuple[str, Any]] = []
        self._keys: dict[str, str] = {}
        self._memo: dict[int, Any] = {}

    def encode(self, value: Any) -> Any:
        """Encode a node, graph value or literal."""
        self._scope = []
        self._keys = {}
        self._memo = {}
        root = to_node(value)
        # Children come first, so every node finds its arguments already encoded
        for node in root.walk():
            self._memo[id(node)] = self._encode_node(node)
        encoded = self._memo[id(root)]
        if self.compact and self._scope:
            return {
                "type": "CompoundValue",
                "scope": [[key, item] for key, item in self._scope],
                "value": encoded,
            }
        return encoded

    def _encoded(self, node: Node) -> Any:
        try:
            return self._memo[id(node)]
        except KeyError as e:
            msg = f"{node.kind} node reached before its dependencies were encoded"
            raise EncodeError(msg) from e

    def _encode_node(self, node: Node) -> Any:
        match node.kind:
            case NodeKind.CONSTANT:
                encoded = self._encode_literal(node.value)
            case NodeKind.REFERENCE:
                encoded = {"type": "ArgumentRef", "value": node.name}
            case NodeKind.CALL:
                encoded = self._encode_call(node)
            case NodeKind.FUNCTION:
                if node.body is None:
                    msg = "Function node has no body"
                    raise EncodeError(msg)
                encoded = {
                    "type": "Function",
                    "argumentNames": list(node.params),
                    "body": self._encoded(node.body),
                }

        if self.compact and node.kind in (NodeKind.CALL, NodeKind.FUNCTION):
            encoded = self._hoist(encoded)
        return encoded

    def _encode_call(self, node: Node) -> dict[str, Any]:
        encoded: dict[str, Any] = {"type": "Invocation"}
        match node.callee:
            case str() as name:
                encoded["functionName"] = name
            case Node() as callee:
                encoded["function"] = self._encoded(callee)
            case _:
                msg = f"Call node has no callee: {node!r}"
                raise EncodeError(msg)
        encoded["arguments"] = {name: self._encoded(arg) for name, arg in node.args}
        return encoded

    def _encode_literal(self, value: Any) -> Any:
        if value is None or isinstance(value, (bool, int, float, str)):
            return value
        if isinstance(value, numbers.Real):
            return float(value)
        if isinstance(value, Node):
            return self._encoded(value)
        if isinstance(value, BaseModel):
            return value.model_dump(mode="json", exclude_none=True)
        if isinstance(value, (list, tuple)):
            return [self._encode_literal(item) for item in value]
        if isinstance(value, Mapping):
            return {
                "type": "Dictionary",
                "value": {str(key): self._encode_literal(item) for key, item in value.items()},
            }
        msg = f"Can't encode object: {value!r}"
        raise EncodeError(msg)

    def _hoist(self, encoded: Any) -> dict[str, str]:
        digest = hashlib.sha256(json.dumps(encoded, sort_keys=True).encode()).hexdigest()
        key = self._keys.get(digest)
        if key is None:
            key = str(len(self._scope))
            self._keys[digest] = key
            self._scope.append((key, encoded))
        return {"type": "ValueRef", "value": key}


def encode(value: Any, *, compact: bool = True) -> Any:
    """Encode a node, graph value or literal into its JSON-compatible form."""
    return Serializer(compact=compact).encode(value)


def serialize(value: Any, *, pretty: bool = False, compact: bool = True) -> str:
    """Encode a node, graph value or literal as a JSON string."""
    return json.dumps(encode(value, compact=compact), indent=2 if pretty else None)
