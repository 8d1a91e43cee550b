"""Loading the graph value a CLI command works on."""

import hashlib
import importlib
import importlib.util
import logging
import sys
from pathlib import Path
from types import ModuleType

from rasterexpr._computed import ComputedObject

from .config import ModuleSource, ScriptSource, ValueSource

logger = logging.getLogger(__name__)


def run_script(script: Path) -> ModuleType:
    """Execute a Python file as a new module and return it.

    The script's directory is put on ``sys.path`` so it can import modules
    next to it, as ``python script.py`` would allow.

    Raises:
        FileNotFoundError: If the script does not exist.

    """
    path = script.resolve()
    if not path.is_file():
        msg = f"Script not found: {script}"
        raise FileNotFoundError(msg)
    if str(path.parent) not in sys.path:
        sys.path.insert(0, str(path.parent))

    # Keyed by path so two scripts with the same file name don't collide
    module_name = f"_rasterexpr_script_{hashlib.sha256(str(path).encode()).hexdigest()[:12]}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        msg = f"Cannot load {script} as a Python module"
        raise ImportError(msg)
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception:
        del sys.modules[module_name]
        raise
    logger.debug(f"Ran {path} as {module_name}")
    return module


def pick_value(module: ModuleType, name: str | None, where: str) -> ComputedObject:
    """Get the graph value called ``name``, or the first one defined if ``name`` is None.

    Raises:
        ValueError: If there is no such variable, or no graph value at all.
        TypeError: If the variable holds something other than a graph value.

    """
    namespace = vars(module)
    if name is None:
        for var, obj in namespace.items():
            if isinstance(obj, ComputedObject):
                logger.debug(f"Using '{var}' from {where}")
                return obj
        msg = f"Could not find a graph value in {where}, try using --var"
        raise ValueError(msg)

    if name not in namespace:
        msg = f"Could not find '{name}' in {where}"
        raise ValueError(msg)
    value = namespace[name]
    if not isinstance(value, ComputedObject):
        msg = f"'{name}' in {where} is not a graph value (got {type(value).__name__})"
        raise TypeError(msg)
    return value


def load_value_from_source(source: ValueSource) -> ComputedObject:
    match source:
        case ScriptSource(script=script, name=name):
            return pick_value(run_script(script), name, str(script))
        case ModuleSource(module=module, variable=variable):
            return pick_value(importlib.import_module(module), variable, module)
