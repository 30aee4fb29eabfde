"""Locate the App a CLI command should inspect."""

import importlib
from typing import Any

from perch.app import App


def resolve_app(import_string: str) -> App:
    """Resolve ``"package.module:attribute"`` to a perch App.

    The attribute defaults to ``app`` and may be dotted
    (``"myproj.web:api.app"``). A callable that is not an App is treated
    as a factory and called with no arguments.

    Raises:
        ModuleNotFoundError: The module part cannot be imported.
        AttributeError: The attribute path does not exist.
        TypeError: The result is not an App, or a factory failed.
    """
    module_path, _, attr_path = import_string.partition(":")
    obj: Any = importlib.import_module(module_path)
    for attr in (attr_path or "app").split("."):
        obj = getattr(obj, attr)

    if not isinstance(obj, App) and callable(obj):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"App factory {import_string!r} failed: {exc}"
            raise TypeError(msg) from exc

    if not isinstance(obj, App):
        msg = f"{import_string!r} resolved to {type(obj).__name__}, not a perch.App"
        raise TypeError(msg)
    return obj
