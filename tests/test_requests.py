"""Tests for request payloads and the transport seam."""

import json
from collections.abc import Mapping
from typing import Any

import pytest

from rasterexpr import ArgumentError, DownloadParams, Geometry, Image, ThumbParams, VisParams
from rasterexpr._requests import build_download_request, build_map_request, build_thumb_request


class FakeTransport:
    """Records requests instead of sending them."""

    def __init__(self) -> None:
        self.requests: list[tuple[str, Any]] = []

    def compute_value(self, serialized: str) -> Any:
        self.requests.append(("compute_value", serialized))
        return {"type": "Image", "bands": []}

    def get_map_id(self, request: Mapping[str, Any]) -> Mapping[str, Any]:
        self.requests.append(("get_map_id", request))
        return {"mapid": "map-1", "token": "tok"}

    def get_download_id(self, request: Mapping[str, Any]) -> Mapping[str, Any]:
        self.requests.append(("get_download_id", request))
        return {"docid": "doc-1", "token": "tok"}

    def get_thumb_id(self, request: Mapping[str, Any]) -> Mapping[str, Any]:
        self.requests.append(("get_thumb_id", request))
        return {"thumbid": "thumb-1", "token": "tok"}

    def make_download_url(self, download_id: Mapping[str, Any]) -> str:
        return f"https://example.test/download?docid={download_id['docid']}"

    def make_thumb_url(self, thumb_id: Mapping[str, Any]) -> str:
        return f"https://example.test/thumb?thumbid={thumb_id['thumbid']}"


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


class TestVisParams:
    def test_comma_separated_lists(self) -> None:
        params = VisParams.model_validate({"bands": "B4, B3,B2", "palette": "000000,ffffff"})
        assert params.bands == ["B4", "B3", "B2"]
        assert params.palette == ["000000", "ffffff"]

    def test_unset_fields_are_left_out(self) -> None:
        assert VisParams(min=0, max=3000).to_request() == {"min": 0.0, "max": 3000.0}

    def test_per_band_values(self) -> None:
        assert VisParams(gain=[1, 2, 3]).to_request() == {"gain": [1.0, 2.0, 3.0]}


class TestBuildRequests:
    def test_map_request(self) -> None:
        image = Image("abc")

        request = build_map_request(image, {"bands": ["B1"], "min": 0, "max": 1})

        assert request["bands"] == ["B1"]
        assert json.loads(request["image"]) == image.encode()

    def test_invalid_opacity(self) -> None:
        with pytest.raises(ArgumentError, match="Invalid VisParams"):
            build_map_request(Image(1), {"opacity": 2})

    def test_unknown_parameter(self) -> None:
        with pytest.raises(ArgumentError, match="Invalid VisParams"):
            build_map_request(Image(1), {"contrast": 2})

    def test_download_request(self) -> None:
        request = build_download_request(
            Image(1),
            DownloadParams(name="scene", scale=30, bands=[{"id": "B1", "crs": "EPSG:4326"}]),
        )

        assert request["name"] == "scene"
        assert request["bands"] == [{"id": "B1", "crs": "EPSG:4326"}]

    def test_download_crs_transform_length(self) -> None:
        with pytest.raises(ArgumentError, match="Invalid DownloadParams"):
            build_download_request(Image(1), {"crs_transform": [1, 0, 0]})

    def test_thumb_region_from_geometry(self) -> None:
        region = Geometry({"type": "Point", "coordinates": [1, 2]})

        request = build_thumb_request(Image(1), ThumbParams(size=256, region=region))

        assert request["size"] == 256
        assert request["region"] == {"type": "Point", "coordinates": [1, 2]}

    def test_thumb_size_must_be_positive(self) -> None:
        with pytest.raises(ArgumentError, match="Invalid ThumbParams"):
            build_thumb_request(Image(1), {"size": 0})


class TestImageRequests:
    def test_get_info(self, transport: FakeTransport) -> None:
        image = Image("abc")

        info = image.get_info(transport)

        assert info == {"type": "Image", "bands": []}
        assert transport.requests == [("compute_value", image.serialize())]

    def test_get_map(self, transport: FakeTransport) -> None:
        image = Image("abc")

        response = image.get_map(transport, {"bands": "B4,B3,B2"})

        assert response == {"mapid": "map-1", "token": "tok", "image": image}
        [(name, request)] = transport.requests
        assert name == "get_map_id"
        assert request["bands"] == ["B4", "B3", "B2"]

    def test_get_download_url(self, transport: FakeTransport) -> None:
        url = Image("abc").get_download_url(transport, {"scale": 10})
        assert url == "https://example.test/download?docid=doc-1"

    def test_get_thumb_url(self, transport: FakeTransport) -> None:
        url = Image("abc").get_thumb_url(transport)

        assert url == "https://example.test/thumb?thumbid=thumb-1"
        [(_, request)] = transport.requests
        assert set(request) == {"image"}
