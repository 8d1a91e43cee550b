"""Deferred computation graphs over remote raster data."""

__all__ = [
    "DEFAULT_EXPRESSION_IMAGE",
    "ApiFunction",
    "ArgumentError",
    "ArityError",
    "BoundOperation",
    "CallableTable",
    "CombineError",
    "ComputedObject",
    "CustomFunction",
    "DownloadBand",
    "DownloadParams",
    "EncodeError",
    "Function",
    "GeoJSON",
    "Geometry",
    "Image",
    "Node",
    "NodeKind",
    "Parameter",
    "RasterExprError",
    "RegistryError",
    "Serializer",
    "Signature",
    "SignatureRegistry",
    "SynthesizedFunction",
    "ThumbParams",
    "Transport",
    "VisParams",
    "bind",
    "bound_members",
    "encode",
    "get_registry",
    "initialize",
    "reset",
    "serialize",
    "unbind",
]

from ._api import get_registry, initialize, reset
from ._binder import BoundOperation, CallableTable, bind, bound_members, unbind
from ._computed import ComputedObject
from ._encoder import Serializer, encode, serialize
from ._errors import ArgumentError, ArityError, CombineError, EncodeError, RasterExprError, RegistryError
from ._function import ApiFunction, CustomFunction, Function, SynthesizedFunction
from ._geometry import GeoJSON, Geometry
from ._image import DEFAULT_EXPRESSION_IMAGE, Image
from ._ir import Node, NodeKind, Parameter, Signature
from ._registry import SignatureRegistry
from ._requests import DownloadBand, DownloadParams, ThumbParams, Transport, VisParams
