"""Registry of remote operation signatures."""

from __future__ import annotations

import json
import logging
import tomllib
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

import tomli_w
from pydantic import ValidationError

from ._errors import RegistryError
from ._ir import Signature

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SignatureRegistry:
    """Signatures of the operations the remote evaluator offers.

    The registry is supplied from outside (normally the evaluator's "list
    algorithms" endpoint) and is never mutated once built.

    Example:
        >>> registry = SignatureRegistry.from_mapping({
        ...     "Image.constant": {"args": [{"name": "value", "type": "Object"}], "returns": "Image"},
        ... })
        >>> [sig.name for sig in registry.list_operations("Image")]
        ['Image.constant']

    """

    signatures: Mapping[str, Signature] = field(default_factory=dict)

    @classmethod
    def from_signatures(cls, signatures: Iterable[Signature]) -> SignatureRegistry:
        return cls(signatures={sig.name: sig for sig in signatures})

    @classmethod
    def from_mapping(cls, data: Mapping[str, Mapping[str, Any]]) -> SignatureRegistry:
        """Build a registry from a ``{name: {"args": [...], "returns": ...}}`` payload.

        Raises:
            RegistryError: If an entry does not describe a valid signature.

        """
        signatures: dict[str, Signature] = {}
        for name, entry in data.items():
            try:
                signatures[name] = Signature.model_validate({**entry, "name": name})
            except ValidationError as e:
                msg = f"Invalid signature for '{name}': {e}"
                raise RegistryError(msg) from e
        return cls(signatures=signatures)

    @classmethod
    def load(cls, path: Path) -> SignatureRegistry:
        """Load a registry from a JSON or TOML file.

        Raises:
            RegistryError: If the file cannot be parsed or holds invalid signatures.

        """
        logger.debug(f"Loading signature registry from {path}")
        try:
            if path.suffix == ".toml":
                with path.open("rb") as f:
                    data = tomllib.load(f)
            else:
                with path.open(encoding="utf-8") as f:
                    data = json.load(f)
        except (tomllib.TOMLDecodeError, json.JSONDecodeError) as e:
            msg = f"Invalid registry file {path}: {e}"
            raise RegistryError(msg) from e
        if not isinstance(data, dict):
            msg = f"Invalid registry file {path}: expected a table of operations"
            raise RegistryError(msg)
        registry = cls.from_mapping(data)
        logger.debug(f"Loaded {len(registry)} signatures")
        return registry

    def to_mapping(self) -> dict[str, dict[str, Any]]:
        """Convert back to the ``{name: {...}}`` payload shape."""
        return {
            name: sig.model_dump(mode="json", by_alias=True, exclude={"name"}, exclude_none=True)
            for name, sig in self.signatures.items()
        }

    def dump(self, path: Path) -> None:
        """Write the registry as TOML or JSON depending on the file suffix."""
        data = self.to_mapping()
        if path.suffix == ".toml":
            with path.open("wb") as f:
                tomli_w.dump(data, f)
        else:
            path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")

    def get(self, name: str) -> Signature:
        """Get the signature of an operation.

        Raises:
            RegistryError: If the operation is unknown.

        """
        try:
            return self.signatures[name]
        except KeyError:
            msg = f"Unknown operation: {name}"
            raise RegistryError(msg) from None

    def list_operations(self, namespace: str) -> list[Signature]:
        """Get the signatures directly under ``namespace``, in registry order."""
        return [sig for sig in self.signatures.values() if sig.namespace == namespace]

    def namespaces(self) -> list[str]:
        """Get the distinct namespaces, sorted."""
        return sorted({sig.namespace for sig in self.signatures.values()})

    def __len__(self) -> int:
        return len(self.signatures)

    def __contains__(self, name: object) -> bool:
        return name in self.signatures

    def __iter__(self) -> Iterator[Signature]:
        return iter(self.signatures.values())
