"""Intermediate Representation (IR) module for rasterexpr.

This module provides pure data structures for computation graphs,
independent of the user-facing value types.

Key types:
- NodeKind: Enum for node kinds (CONSTANT, REFERENCE, CALL, FUNCTION)
- Node: Immutable graph vertex
- Parameter, Signature: Declared shape of an operation
"""

from ._node import Node, NodeKind
from ._signature import Parameter, Signature

__all__ = ["Node", "NodeKind", "Parameter", "Signature"]
