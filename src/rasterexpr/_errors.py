"""Exceptions raised while building and encoding computation graphs."""


class RasterExprError(Exception):
    """Base class for all rasterexpr errors."""


class ArgumentError(RasterExprError, TypeError):
    """A value cannot be reconciled with any accepted overload or declared parameter type."""


class ArityError(ArgumentError):
    """Wrong number of positional arguments to a fixed-arity call."""


class CombineError(RasterExprError, ValueError):
    """Attempt to combine an empty sequence of images."""


class RegistryError(RasterExprError, LookupError):
    """The signature registry is missing, invalid, or lacks an operation."""


class EncodeError(RasterExprError, ValueError):
    """A value in the graph has no wire encoding."""
