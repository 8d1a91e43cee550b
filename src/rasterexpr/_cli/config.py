"""The ``[tool.rasterexpr]`` table of pyproject.toml.

Example::

    [tool.rasterexpr]
    registry = "examples/algorithms.json"
    value = { script = "examples/ndvi.py", name = "ndvi" }
    output = "build/ndvi.json"

``value`` may also be a plain string, either a script path or
``"package.module:variable"``. Relative paths are resolved from the directory
holding pyproject.toml.
"""

import tomllib
from dataclasses import dataclass
from pathlib import Path

KNOWN_KEYS = frozenset({"registry", "value", "output"})


class ConfigError(Exception):
    """Invalid ``[tool.rasterexpr]`` settings or value reference."""


@dataclass(slots=True, frozen=True)
class ScriptSource:
    """A Python file that builds the value. Without a name, its first graph value is used."""

    script: Path
    name: str | None = None

    def __str__(self) -> str:
        return str(self.script) if self.name is None else f"{self.script} ({self.name})"


@dataclass(slots=True, frozen=True)
class ModuleSource:
    """An importable module and the variable holding the value."""

    module: str
    variable: str

    def __str__(self) -> str:
        return f"{self.module}:{self.variable}"


ValueSource = ScriptSource | ModuleSource


@dataclass(slots=True, frozen=True)
class RasterExprConfig:
    registry: Path | None = None
    value: ValueSource | None = None
    output: Path | None = None
    project_root: Path | None = None


def _resolve(base: Path | None, raw: str) -> Path:
    path = Path(raw)
    if base is None or path.is_absolute():
        return path
    return base / path


def parse_value_source(raw: str, name: str | None = None, *, base: Path | None = None) -> ValueSource:
    """Interpret a value reference: ``path/to/script.py`` or ``package.module:variable``.

    Args:
        raw: The reference as written on the command line or in pyproject.toml.
        name: Variable to take from a script. A module reference names its own
            variable, so giving one there is an error.
        base: Directory that relative script paths are resolved against.

    Raises:
        ConfigError: If ``raw`` is neither form.

    """
    module, colon, variable = raw.partition(":")
    if colon:
        if not (module and variable.isidentifier()):
            msg = f"Invalid module reference '{raw}'. Expected 'package.module:variable'"
            raise ConfigError(msg)
        if name is not None:
            msg = f"A variable name can't be combined with the module reference '{raw}'"
            raise ConfigError(msg)
        return ModuleSource(module=module, variable=variable)

    if Path(raw).suffix != ".py":
        msg = f"Invalid value reference '{raw}'. Expected a .py script or 'package.module:variable'"
        raise ConfigError(msg)
    return ScriptSource(script=_resolve(base, raw), name=name)


def _path_setting(section: dict[str, object], key: str, root: Path) -> Path | None:
    match section.get(key):
        case None:
            return None
        case str() as raw:
            return _resolve(root, raw)
        case other:
            msg = f"[tool.rasterexpr].{key}: expected a path string, got {type(other).__name__}"
            raise ConfigError(msg)


def _value_setting(section: dict[str, object], root: Path) -> ValueSource | None:
    match section.get("value"):
        case None:
            return None
        case str() as raw:
            return parse_value_source(raw, base=root)
        case {"script": str() as script, **rest} if set(rest) <= {"name"}:
            name = rest.get("name")
            if name is not None and not isinstance(name, str):
                msg = f"[tool.rasterexpr].value.name: expected a string, got {type(name).__name__}"
                raise ConfigError(msg)
            return parse_value_source(script, name, base=root)
        case _:
            msg = (
                "[tool.rasterexpr].value: expected 'package.module:variable', a script path, "
                "or a table { script = ..., name = ... }"
            )
            raise ConfigError(msg)


def load_config(pyproject_path: Path) -> RasterExprConfig:
    """Read ``[tool.rasterexpr]`` from a pyproject.toml.

    Raises:
        ConfigError: If the file is not valid TOML, the table has unknown keys,
            or a setting has the wrong shape.

    """
    root = pyproject_path.parent
    try:
        data = tomllib.loads(pyproject_path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {pyproject_path}: {e}"
        raise ConfigError(msg) from e

    section = data.get("tool", {}).get("rasterexpr", {})
    if not isinstance(section, dict):
        msg = "[tool.rasterexpr] must be a table"
        raise ConfigError(msg)
    unknown = sorted(set(section) - KNOWN_KEYS)
    if unknown:
        msg = f"Unknown [tool.rasterexpr] settings: {', '.join(unknown)}"
        raise ConfigError(msg)

    return RasterExprConfig(
        registry=_path_setting(section, "registry", root),
        value=_value_setting(section, root),
        output=_path_setting(section, "output", root),
        project_root=root,
    )


def find_pyproject_toml(start_dir: Path | None = None) -> Path | None:
    """Find the nearest pyproject.toml in ``start_dir`` (default: cwd) or its parents."""
    start = (start_dir or Path.cwd()).resolve()
    for directory in (start, *start.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    return None


def get_config() -> RasterExprConfig:
    """Get the settings that apply in the current directory (empty if there are none)."""
    pyproject_path = find_pyproject_toml()
    if pyproject_path is None:
        return RasterExprConfig()
    return load_config(pyproject_path)
