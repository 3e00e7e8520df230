"""Locating the App a CLI command works on.

Targets are either import strings (``"module:attribute"``) or paths to
a Python file (``examples/birds/app.py``), optionally followed by
``:attribute``. The attribute defaults to ``app``.
"""

import importlib
import importlib.util
from pathlib import Path
from types import ModuleType

from perch.app import App


def is_file_target(target: str) -> bool:
    """Whether *target* names a ``.py`` file rather than a module."""
    return target.partition(":")[0].endswith(".py")


def _load_file(path: str) -> ModuleType:
    file_path = Path(path)
    if not file_path.is_file():
        msg = f"No such file: {path}"
        raise ModuleNotFoundError(msg)
    spec = importlib.util.spec_from_file_location(f"_perch_target_{file_path.stem}", file_path)
    if spec is None or spec.loader is None:
        msg = f"Cannot import {path}"
        raise ModuleNotFoundError(msg)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def resolve_app(target: str) -> App:
    """Resolve *target* to a perch App instance.

    A callable that is not an App is treated as an app factory and
    called with no arguments.

    Raises:
        ModuleNotFoundError: If the module or file cannot be found.
        AttributeError: If the attribute does not exist on the module.
        TypeError: If the object (or what the factory returns) is not an ``App``.
    """
    location, _, attr_name = target.partition(":")
    module = _load_file(location) if is_file_target(target) else importlib.import_module(location)
    obj = getattr(module, attr_name or "app")

    if callable(obj) and not isinstance(obj, App):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"Factory function {target!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if not isinstance(obj, App):
        msg = f"{target!r} resolved to {type(obj).__name__}, not a perch.App instance"
        raise TypeError(msg)

    return obj
