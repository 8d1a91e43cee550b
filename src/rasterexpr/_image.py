"""The Image value type."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ._api import get_registry
from ._binder import bind, bind_lock, is_initialized, mark_initialized, unbind
from ._computed import ComputedObject
from ._errors import ArgumentError, ArityError, CombineError
from ._function import ApiFunction, SynthesizedFunction
from ._geometry import Geometry
from ._ir import Parameter, Signature
from ._promote import is_number, is_sequence, is_string, register_value_type
from ._requests import (
    DownloadParams,
    ThumbParams,
    VisParams,
    build_download_request,
    build_map_request,
    build_thumb_request,
)

if TYPE_CHECKING:
    from ._ir import Node
    from ._requests import Transport

logger = logging.getLogger(__name__)

# Name under which expression() binds the image it is called on
DEFAULT_EXPRESSION_IMAGE = "DEFAULT_EXPRESSION_IMAGE"

RGB_BAND_NAMES = ("vis-red", "vis-green", "vis-blue")


# =============================================================================
# Constructor inputs
# =============================================================================


@dataclass(frozen=True, slots=True)
class EmptyInput:
    """No argument: a fully transparent image."""


@dataclass(frozen=True, slots=True)
class ConstantInput:
    """A number: a constant image."""

    value: Any


@dataclass(frozen=True, slots=True)
class AssetInput:
    """An asset ID."""

    asset_id: str


@dataclass(frozen=True, slots=True)
class VersionedAssetInput:
    """An asset ID and version."""

    asset_id: str
    version: Any


@dataclass(frozen=True, slots=True)
class SequenceInput:
    """A sequence of image-like values whose bands are combined."""

    items: tuple[Any, ...]


@dataclass(frozen=True, slots=True)
class ExistingInput:
    """A graph value of another type."""

    value: ComputedObject


ImageInput = EmptyInput | ConstantInput | AssetInput | VersionedAssetInput | SequenceInput | ExistingInput


def classify_image_args(args: tuple[Any, ...]) -> ImageInput:
    """Sort the arguments of ``Image(...)`` into one of the accepted shapes.

    Raises:
        ArityError: If more than two arguments are given.
        ArgumentError: If the argument types match no accepted shape.

    """
    match args:
        case () | (None,):
            return EmptyInput()
        case (value,) if is_number(value):
            return ConstantInput(value)
        case (value,) if is_string(value):
            return AssetInput(value)
        case (value,) if is_sequence(value):
            return SequenceInput(tuple(value))
        case (ComputedObject() as value,):
            return ExistingInput(value)
        case (value,):
            msg = f"Unrecognized argument type to convert to an Image: {value!r}"
            raise ArgumentError(msg)
        case (asset_id, version) if is_string(asset_id) and is_number(version):
            return VersionedAssetInput(asset_id, version)
        case (_, _):
            msg = f"Unrecognized argument types to convert to an Image: {args!r}"
            raise ArgumentError(msg)
        case _:
            msg = f"The Image constructor takes at most 2 arguments ({len(args)} given)"
            raise ArityError(msg)


def image_node(image_input: ImageInput) -> Node:
    """Build the root node for a classified constructor input."""
    match image_input:
        case EmptyInput():
            return ApiFunction.call_("Image.mask", Image(0), Image(0)).node
        case ConstantInput(value=value):
            return ApiFunction.call_("Image.constant", value).node
        case AssetInput(asset_id=asset_id):
            return ApiFunction.apply_("Image.load", {"id": asset_id}).node
        case VersionedAssetInput(asset_id=asset_id, version=version):
            return ApiFunction.apply_("Image.load", {"id": asset_id, "version": version}).node
        case SequenceInput(items=items):
            return Image.combine([Image(item) for item in items]).node
        case ExistingInput(value=value) if value.name() == "Array":
            return ApiFunction.call_("Image.constant", value).node
        case ExistingInput(value=value):
            # Reinterpret: the other value's graph becomes this image's graph
            return value.node


# =============================================================================
# Image
# =============================================================================


@register_value_type
class Image(ComputedObject):
    """A raster image computed remotely.

    Accepted constructor arguments:
    - nothing (or None): an empty, fully transparent image,
    - a number: a constant image,
    - a string: an asset ID,
    - a string and a number: an asset ID and version,
    - a list or tuple: an image made from each element, with all their bands combined,
    - an Image: returned unchanged,
    - another graph value: reinterpreted as an image (an ``Array`` becomes a constant image).

    Every operation of the ``Image`` namespace in the signature registry is
    available as a member, and every ``Window`` operation with a ``focal_``
    prefix. Members are bound on first construction.
    """

    _type_name = "Image"

    def __init__(self, *args: Any) -> None:
        Image.initialize()
        super().__init__(image_node(classify_image_args(args)))

    @classmethod
    def initialize(cls) -> None:
        """Bind the registry's ``Image`` and ``Window`` operations as members, once."""
        if is_initialized(Image):
            return
        with bind_lock:
            if is_initialized(Image):
                return
            registry = get_registry()
            bind(Image, registry, "Image", "Image")
            bind(Image, registry, "Window", "Image", prefix="focal_")
            mark_initialized(Image)

    @classmethod
    def reset(cls) -> None:
        """Remove the bound members so the next initialization rebinds from the registry."""
        unbind(Image)

    # -------------------------------------------------------------------------
    # Band combination
    # -------------------------------------------------------------------------

    @classmethod
    def combine(cls, images: Sequence[Any], names: Sequence[Any] | None = None) -> Image:
        """Combine the bands of several images into one image, optionally renaming them.

        Bands are appended left to right, so on a name collision later bands
        win when the graph is evaluated.

        Args:
            images: The images to combine, in order. Anything ``Image()`` accepts.
            names: New names for all output bands. Their count is checked remotely.

        Raises:
            CombineError: If ``images`` is empty.

        """
        if not images:
            msg = "Can't combine 0 images."
            raise CombineError(msg)

        result = Image(images[0])
        for image in images[1:]:
            result = ApiFunction.call_("Image.addBands", result, image)

        if names is not None:
            result = result.select([".*"], names)
        return result

    @classmethod
    def rgb(cls, r: Any, g: Any, b: Any) -> Image:
        """Create a 3-band image for visualization, bands named vis-red, vis-green and vis-blue."""
        return cls.combine([r, g, b], list(RGB_BAND_NAMES))

    @classmethod
    def cat(cls, *images: Any) -> Image:
        """Concatenate the bands of the given images."""
        return cls.combine(images)

    # -------------------------------------------------------------------------
    # Hand-written operations
    # -------------------------------------------------------------------------

    def select(self, selectors: Any = None, names: Any = None, *more: Any) -> Image:
        """Select bands from this image.

        Can be called with a list of selectors and an optional list of new
        names, or with the selectors as separate arguments:

        >>> image.select(["B1", "B2"], ["blue", "green"])
        >>> image.select("B1", "B2")

        Args:
            selectors: Band names, regexes or indices, as a list or spread out.
            names: New names for the selected bands (list form only).
            *more: Further selectors (spread form only).

        Raises:
            ArgumentError: If a selector is not a string, number or graph value.
            ArityError: If extra arguments follow a selector list.

        """
        if selectors is None:
            selectors = []

        if is_string(selectors) or is_number(selectors):
            flat = [selectors, *([] if names is None and not more else [names]), *more]
            _check_selectors(flat)
            return ApiFunction.apply_("Image.select", {"input": self, "bandSelectors": flat})

        if more:
            msg = f"select() takes a selector list and a name list, got {2 + len(more)} arguments"
            raise ArityError(msg)
        if is_sequence(selectors):
            _check_selectors(selectors)
        args: dict[str, Any] = {"input": self, "bandSelectors": selectors}
        if names is not None:
            args["newNames"] = names
        return ApiFunction.apply_("Image.select", args)

    def expression(self, expression: str, variables: Mapping[str, Any] | None = None) -> Image:
        """Evaluate a text expression over this image.

        The expression is parsed remotely. This image is available in it as
        the default image; other images are referenced by their variable name.

        Args:
            expression: The expression, e.g. ``"(b('B4') - b2) / 2"``.
            variables: Images (or anything ``Image()`` accepts) available by name.

        Raises:
            ArgumentError: If a variable uses the reserved default image name.

        """
        arg_names = [DEFAULT_EXPRESSION_IMAGE]
        args: dict[str, Any] = {DEFAULT_EXPRESSION_IMAGE: self}
        for name, value in (variables or {}).items():
            if name == DEFAULT_EXPRESSION_IMAGE:
                msg = f"'{DEFAULT_EXPRESSION_IMAGE}' is reserved for the image expression() is called on"
                raise ArgumentError(msg)
            arg_names.append(name)
            args[name] = Image(value)

        body = ApiFunction.call_("Image.parseExpression", expression, DEFAULT_EXPRESSION_IMAGE, arg_names)

        # The parsed expression is a function; describe it so the call is typed
        signature = Signature(
            args=tuple(Parameter(name=name, declared_type="Image", optional=False) for name in arg_names),
            return_type="Image",
        )
        return SynthesizedFunction(body, signature).apply(args)

    def clip(self, geometry: Any) -> Image:
        """Clip this image to a geometry.

        Args:
            geometry: A Geometry, GeoJSON, or any graph value the evaluator accepts
                as a region (e.g. a feature collection). Values that are not
                geometries are forwarded unchanged for the evaluator to validate.

        """
        try:
            geometry = Geometry(geometry)
        except ArgumentError:
            logger.debug(f"clip() argument is not a geometry, forwarding as-is: {geometry!r}")
        return ApiFunction.call_("Image.clip", self, geometry)

    # -------------------------------------------------------------------------
    # Requests
    # -------------------------------------------------------------------------

    def get_info(self, transport: Transport) -> Any:
        """Compute this image's description (bands, properties) remotely."""
        return transport.compute_value(self.serialize())

    def get_map(self, transport: Transport, vis_params: VisParams | Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Request a map ID and token for displaying this image as tiles.

        Returns:
            The transport's response with this image added under ``"image"``.

        """
        response = dict(transport.get_map_id(build_map_request(self, vis_params)))
        response["image"] = self
        return response

    def get_download_url(self, transport: Transport, params: DownloadParams | Mapping[str, Any] | None = None) -> str:
        """Request a download URL for this image."""
        download_id = transport.get_download_id(build_download_request(self, params))
        return transport.make_download_url(download_id)

    def get_thumb_url(self, transport: Transport, params: ThumbParams | Mapping[str, Any] | None = None) -> str:
        """Request a thumbnail URL for this image."""
        thumb_id = transport.get_thumb_id(build_thumb_request(self, params))
        return transport.make_thumb_url(thumb_id)


def _check_selectors(selectors: Sequence[Any]) -> None:
    for selector in selectors:
        if not (is_string(selector) or is_number(selector) or isinstance(selector, ComputedObject)):
            msg = f"Illegal argument to select(): {selector!r}"
            raise ArgumentError(msg)
