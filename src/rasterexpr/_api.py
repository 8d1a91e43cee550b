"""Process-wide state: the signature registry that graph construction resolves against."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from ._errors import RegistryError
from ._registry import SignatureRegistry

logger = logging.getLogger(__name__)

_registry: SignatureRegistry | None = None


def _coerce_registry(source: SignatureRegistry | Mapping[str, Any] | Path | str) -> SignatureRegistry:
    match source:
        case SignatureRegistry():
            return source
        case Path() | str():
            return SignatureRegistry.load(Path(source))
        case Mapping():
            return SignatureRegistry.from_mapping(source)
        case _:
            msg = f"Cannot build a signature registry from {type(source).__name__}"
            raise RegistryError(msg)


def initialize(source: SignatureRegistry | Mapping[str, Any] | Path | str) -> SignatureRegistry:
    """Install the signature registry and bind the value types to it.

    Any previous binding is discarded first, so calling this again with a new
    registry picks up its operations.

    Args:
        source: A registry, a ``{name: signature}`` payload, or a path to a JSON/TOML file.

    Returns:
        The installed registry.

    """
    from ._binder import bind_lock  # noqa: PLC0415
    from ._image import Image  # noqa: PLC0415

    registry = _coerce_registry(source)
    global _registry  # noqa: PLW0603
    # Same lock as Image.initialize, so no caller can bind the old registry in between
    with bind_lock:
        Image.reset()
        _registry = registry
        Image.initialize()
    logger.debug(f"Initialized with {len(registry)} operations")
    return registry


def reset() -> None:
    """Unbind the value types and forget the installed registry."""
    from ._binder import bind_lock  # noqa: PLC0415
    from ._image import Image  # noqa: PLC0415

    global _registry  # noqa: PLW0603
    with bind_lock:
        Image.reset()
        _registry = None


def get_registry() -> SignatureRegistry:
    """Get the installed registry.

    Raises:
        RegistryError: If ``initialize`` has not been called.

    """
    registry = _registry
    if registry is None:
        msg = "No signature registry installed. Call rasterexpr.initialize() first."
        raise RegistryError(msg)
    return registry
