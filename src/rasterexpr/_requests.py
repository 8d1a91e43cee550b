"""Request payloads for the remote endpoints, and the transport that sends them.

Building a request is pure: it validates the parameters and attaches the
serialized graph. Sending it is the job of a ``Transport``, supplied by the
caller (the network and authentication layer lives outside this package).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Annotated, Any, Literal, Protocol, TypeVar

from annotated_types import Ge, Gt, Le, Len
from pydantic import BaseModel, BeforeValidator, ConfigDict, ValidationError, field_validator

from ._errors import ArgumentError

if TYPE_CHECKING:
    from ._computed import ComputedObject

# Affine transform from a CRS: xScale, yShearing, xShearing, yScale, xTranslation, yTranslation
CrsTransform = Annotated[list[float], Len(6, 6)]
Dimensions = Annotated[list[Annotated[int, Gt(0)]], Len(2, 2)]


class Transport(Protocol):
    """The external RPC layer that evaluates serialized graphs."""

    def compute_value(self, serialized: str) -> Any: ...

    def get_map_id(self, request: Mapping[str, Any]) -> Mapping[str, Any]: ...

    def get_download_id(self, request: Mapping[str, Any]) -> Mapping[str, Any]: ...

    def get_thumb_id(self, request: Mapping[str, Any]) -> Mapping[str, Any]: ...

    def make_download_url(self, download_id: Mapping[str, Any]) -> str: ...

    def make_thumb_url(self, thumb_id: Mapping[str, Any]) -> str: ...


def _region_to_geo_json(value: Any) -> Any:
    # Geometries (and shapely objects) travel as their GeoJSON
    if hasattr(value, "__geo_interface__"):
        return value.__geo_interface__
    return value


# Region as GeoJSON or a list of coordinates, forwarded as-is otherwise
Region = Annotated[Any, BeforeValidator(_region_to_geo_json)]


class _Params(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    def to_request(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class VisParams(_Params):
    """Visualization parameters for map tiles."""

    bands: list[str] | None = None
    min: float | list[float] | None = None
    max: float | list[float] | None = None
    gain: float | list[float] | None = None
    bias: float | list[float] | None = None
    gamma: float | list[float] | None = None
    palette: list[str] | None = None
    opacity: Annotated[float, Ge(0), Le(1)] | None = None
    format: Literal["png", "jpg"] | None = None

    @field_validator("bands", "palette", mode="before")
    @classmethod
    def _split_comma_list(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [item.strip() for item in value.split(",")]
        return value


class DownloadBand(_Params):
    """Per-band download options."""

    id: str
    crs: str | None = None
    crs_transform: CrsTransform | None = None
    dimensions: Dimensions | None = None
    scale: Annotated[float, Gt(0)] | None = None


class DownloadParams(_Params):
    """Download options; band-level values override the defaults given here."""

    name: str | None = None
    bands: list[DownloadBand] | None = None
    crs: str | None = None
    crs_transform: CrsTransform | None = None
    dimensions: Dimensions | None = None
    scale: Annotated[float, Gt(0)] | None = None
    region: Region = None


class ThumbParams(VisParams):
    """Thumbnail options: visualization parameters plus size and region."""

    size: Annotated[int, Gt(0)] | Annotated[str, Len(1)] | None = None
    region: Region = None


P = TypeVar("P", bound="_Params")


def _validate(model: type[P], params: P | Mapping[str, Any] | None) -> P:
    if isinstance(params, model):
        return params
    try:
        return model.model_validate(dict(params or {}))
    except ValidationError as e:
        msg = f"Invalid {model.__name__}: {e}"
        raise ArgumentError(msg) from e


def _request(value: ComputedObject, params: _Params, key: str = "image") -> dict[str, Any]:
    request = params.to_request()
    request[key] = value.serialize()
    return request


def build_map_request(image: ComputedObject, params: VisParams | Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Build the map ID request for ``image``.

    Raises:
        ArgumentError: If the visualization parameters are invalid.

    """
    return _request(image, _validate(VisParams, params))


def build_download_request(
    image: ComputedObject,
    params: DownloadParams | Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Build the download ID request for ``image``.

    Raises:
        ArgumentError: If the download parameters are invalid.

    """
    return _request(image, _validate(DownloadParams, params))


def build_thumb_request(image: ComputedObject, params: ThumbParams | Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Build the thumbnail ID request for ``image``.

    Raises:
        ArgumentError: If the thumbnail parameters are invalid.

    """
    return _request(image, _validate(ThumbParams, params))
