"""Declared shape of a remote operation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from rasterexpr._errors import ArgumentError, ArityError

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence


class Parameter(BaseModel):
    """One declared parameter of an operation.

    Registry payloads use the key ``type`` for the declared type; both
    ``type`` and ``declared_type`` are accepted.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    declared_type: str = Field(default="Object", alias="type")
    optional: bool = False
    default: Any = None
    description: str = ""


class Signature(BaseModel):
    """Parameter list and return type of one operation.

    Attributes:
        name: Fully qualified operation name, e.g. ``Image.select``. Empty for
            synthesized signatures that have no registry entry.
        args: Declared parameters in positional order.
        return_type: Declared type of the result (payload key ``returns``).
        description: Human readable documentation from the registry.

    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = ""
    args: tuple[Parameter, ...] = ()
    return_type: str = Field(default="Object", alias="returns")
    description: str = ""

    @property
    def namespace(self) -> str:
        """The part of the name before the last dot (``Image`` for ``Image.select``)."""
        return self.name.rpartition(".")[0]

    @property
    def member_name(self) -> str:
        """The part of the name after the last dot (``select`` for ``Image.select``)."""
        return self.name.rpartition(".")[2]

    @property
    def arity(self) -> int:
        return len(self.args)

    def parameter(self, name: str) -> Parameter:
        """Get a parameter by name.

        Raises:
            KeyError: If the signature has no such parameter.

        """
        for param in self.args:
            if param.name == name:
                return param
        msg = f"'{self.name}' has no parameter '{name}'"
        raise KeyError(msg)

    def name_args(self, args: Sequence[Any], kwargs: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Map positional and keyword arguments onto parameter names.

        Positional arguments fill parameters in declared order. Keyword
        arguments are merged afterwards.

        Raises:
            ArityError: If more positional arguments are given than declared.
            ArgumentError: If a parameter is given both positionally and by keyword.

        """
        if len(args) > len(self.args):
            msg = f"Too many ({len(args)}) arguments for function: {self.name or '<anonymous>'}"
            raise ArityError(msg)
        named = {param.name: value for param, value in zip(self.args, args, strict=False)}
        for key, value in (kwargs or {}).items():
            if key in named:
                msg = f"Argument '{key}' specified as both positional and keyword to function: {self.name}"
                raise ArgumentError(msg)
            named[key] = value
        return named

    def describe(self) -> str:
        """Render a one-line description, e.g. ``Image.clip(input: Image, geometry: Object) -> Image``."""
        params = ", ".join(
            f"{param.name}: {param.declared_type}{'?' if param.optional else ''}" for param in self.args
        )
        return f"{self.name}({params}) -> {self.return_type}"
