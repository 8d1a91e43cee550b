"""Shared fixtures: a small signature registry installed around every test."""

import json
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest

import rasterexpr as rx

REGISTRY_DATA: dict[str, dict[str, Any]] = {
    "Image.constant": {
        "description": "Generates an image containing a constant value everywhere.",
        "args": [{"name": "value", "type": "Object"}],
        "returns": "Image",
    },
    "Image.load": {
        "description": "Returns the image given its ID.",
        "args": [
            {"name": "id", "type": "String"},
            {"name": "version", "type": "Long", "optional": True},
        ],
        "returns": "Image",
    },
    "Image.mask": {
        "args": [
            {"name": "image", "type": "Image"},
            {"name": "mask", "type": "Image", "optional": True},
        ],
        "returns": "Image",
    },
    "Image.addBands": {
        "args": [
            {"name": "dstImg", "type": "Image"},
            {"name": "srcImg", "type": "Image"},
            {"name": "names", "type": "List", "optional": True},
            {"name": "overwrite", "type": "Boolean", "optional": True},
        ],
        "returns": "Image",
    },
    "Image.select": {
        "args": [
            {"name": "input", "type": "Image"},
            {"name": "bandSelectors", "type": "List"},
            {"name": "newNames", "type": "List", "optional": True},
        ],
        "returns": "Image",
    },
    "Image.parseExpression": {
        "args": [
            {"name": "expression", "type": "String"},
            {"name": "argName", "type": "String", "optional": True},
            {"name": "vars", "type": "List", "optional": True},
        ],
        "returns": "Algorithm",
    },
    "Image.clip": {
        "args": [
            {"name": "input", "type": "Image"},
            {"name": "geometry", "type": "Object"},
        ],
        "returns": "Image",
    },
    "Image.add": {
        "description": "Adds the second value to the first for each matched pair of bands.",
        "args": [
            {"name": "image1", "type": "Image"},
            {"name": "image2", "type": "Image"},
        ],
        "returns": "Image",
    },
    "Image.pixelLonLat": {"args": [], "returns": "Image"},
    "Window.max": {
        "args": [
            {"name": "image", "type": "Image"},
            {"name": "radius", "type": "Float", "optional": True, "default": 1.5},
        ],
        "returns": "Image",
    },
    "Array.identity": {
        "args": [{"name": "size", "type": "Integer"}],
        "returns": "Array",
    },
    "Collection.map": {
        "args": [
            {"name": "collection", "type": "Object"},
            {"name": "baseAlgorithm", "type": "Algorithm"},
        ],
        "returns": "Object",
    },
}


@pytest.fixture
def registry_data() -> dict[str, dict[str, Any]]:
    return json.loads(json.dumps(REGISTRY_DATA))


@pytest.fixture
def registry() -> rx.SignatureRegistry:
    return rx.SignatureRegistry.from_mapping(REGISTRY_DATA)


@pytest.fixture
def registry_file(tmp_path: Path) -> Path:
    path = tmp_path / "algorithms.json"
    path.write_text(json.dumps(REGISTRY_DATA), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def installed_registry(registry: rx.SignatureRegistry) -> Iterator[rx.SignatureRegistry]:
    """Install the test registry for the duration of each test."""
    rx.initialize(registry)
    yield registry
    rx.reset()
