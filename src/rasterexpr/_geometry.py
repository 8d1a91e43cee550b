"""Minimal geometry value: validated GeoJSON carried as a graph constant."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal, Self

from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

from ._computed import ComputedObject
from ._errors import ArgumentError
from ._ir import Node
from ._promote import register_value_type

GeometryType = Literal[
    "Point",
    "MultiPoint",
    "LineString",
    "MultiLineString",
    "Polygon",
    "MultiPolygon",
    "GeometryCollection",
]

# Nesting depth of the coordinates array for each geometry type
_COORDINATE_DEPTH: dict[str, int] = {
    "Point": 1,
    "MultiPoint": 2,
    "LineString": 2,
    "MultiLineString": 3,
    "Polygon": 3,
    "MultiPolygon": 4,
}


def _depth(value: Any) -> int:
    depth = 0
    while isinstance(value, (list, tuple)):
        depth += 1
        if not value:
            break
        value = value[0]
    return depth


class GeoJSON(BaseModel):
    """A GeoJSON geometry object.

    Extra members (e.g. ``geodesic``, ``crs``) are kept and forwarded.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    type: GeometryType
    coordinates: list[Any] | None = None
    geometries: list[GeoJSON] | None = None

    @model_validator(mode="after")
    def _check_shape(self) -> Self:
        if self.type == "GeometryCollection":
            if self.geometries is None:
                msg = "GeometryCollection requires 'geometries'"
                raise ValueError(msg)
            return self
        if self.coordinates is None:
            msg = f"{self.type} requires 'coordinates'"
            raise ValueError(msg)
        expected = _COORDINATE_DEPTH[self.type]
        actual = _depth(self.coordinates)
        if actual != expected:
            msg = f"{self.type} coordinates must be nested {expected} deep, got {actual}"
            raise ValueError(msg)
        return self

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


@register_value_type
class Geometry(ComputedObject):
    """A geometry usable as an operation argument.

    Accepts a GeoJSON mapping, an object exposing ``__geo_interface__`` (e.g.
    a shapely geometry), or a graph value computed remotely.

    Raises:
        ArgumentError: If the value is none of these, or is malformed GeoJSON.

    """

    _type_name = "Geometry"

    def __init__(self, geo_json: Any) -> None:
        if isinstance(geo_json, ComputedObject):
            super().__init__(geo_json.node)
            return
        if hasattr(geo_json, "__geo_interface__"):
            geo_json = geo_json.__geo_interface__
        if not isinstance(geo_json, Mapping):
            msg = f"Invalid GeoJSON geometry: {geo_json!r}"
            raise ArgumentError(msg)
        try:
            validated = GeoJSON.model_validate(dict(geo_json))
        except ValidationError as e:
            msg = f"Invalid GeoJSON geometry: {e}"
            raise ArgumentError(msg) from e
        super().__init__(Node.constant(validated))

    def to_geo_json(self) -> dict[str, Any]:
        """Get the GeoJSON of a client-side geometry.

        Raises:
            ArgumentError: If the geometry is computed remotely.

        """
        value = self.node.value
        if not isinstance(value, GeoJSON):
            msg = "Geometry is computed remotely; its GeoJSON is not known locally"
            raise ArgumentError(msg)
        return value.to_dict()

    @property
    def __geo_interface__(self) -> dict[str, Any]:
        return self.to_geo_json()
