"""Import-string lookup for the ``perch`` command.

``perch myapp:app greet`` imports ``myapp`` and runs ``greet`` on the
object bound to ``app``.  The target may be:

- an ``Application``, used as-is
- a ``Module``, mounted on a fresh ``Application`` (its ``default_route``
  becomes the application's default route)
- a zero-argument factory returning either of the above

Every lookup failure is a ``ConsoleError`` so the CLI can print it the
same way the application prints its own errors.
"""

import importlib
from typing import Any

from perch.app import Application
from perch.errors import ConsoleError
from perch.module import Module

DEFAULT_ATTRIBUTES = ("app", "application", "create_app")


def resolve_app(import_string: str) -> Application:
    """Resolve ``"module[:attribute]"`` to an ``Application``.

    Without ``:attribute``, the first of ``DEFAULT_ATTRIBUTES`` that the
    module defines is used.
    """
    module_path, _, attr_name = import_string.partition(":")
    if not module_path:
        msg = f'Invalid import string "{import_string}": expected "module[:attribute]".'
        raise ConsoleError(msg)

    try:
        target = importlib.import_module(module_path)
    except ModuleNotFoundError as exc:
        # Only the target itself missing is a lookup failure
        if exc.name is None or not module_path.startswith(exc.name):
            raise
        msg = f'Cannot import "{module_path}": no such module.'
        raise ConsoleError(msg) from exc

    names = (attr_name,) if attr_name else DEFAULT_ATTRIBUTES
    for name in names:
        if hasattr(target, name):
            return _as_application(getattr(target, name), f"{module_path}:{name}")

    msg = f'"{module_path}" defines none of: {", ".join(names)}.'
    raise ConsoleError(msg)


def _as_application(obj: Any, label: str, *, called: bool = False) -> Application:
    match obj:
        case Application():
            return obj
        case Module():
            return _mount(obj)
        case _ if callable(obj) and not called:
            try:
                produced = obj()
            except Exception as exc:
                msg = f'Factory "{label}" failed: {type(exc).__name__}: {exc}'
                raise ConsoleError(msg) from exc
            return _as_application(produced, label, called=True)
    msg = f'"{label}" is a {type(obj).__name__}, not a perch Application or Module.'
    raise ConsoleError(msg)


def _mount(module: Module) -> Application:
    """Wrap *module* in an Application that keeps the built-in ``help``."""
    app = Application({"default_route": module.default_route} if module.default_route else None)
    for controller_id, factory in module.controller_map.items():
        app.add_controller(controller_id, factory)
    for child_id, child in list(module.modules.items()):
        app.add_module(child_id, child)
    return app
