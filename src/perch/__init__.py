"""Perch — the console-application layer.

Resolves a command-line route (``module/controller/action``) to a
controller action, runs it, and turns its result into an exit status.

Basic usage::

    import sys

    from perch import Application

    app = Application({"name": "acme"})

    @app.command("greet")
    def greet(name: str = "world") -> int:
        print(f"Hello, {name}!")
        return 0

    if __name__ == "__main__":
        sys.exit(app.run())

Then::

    $ python acme.py greet --name=Ada
    Hello, Ada!
    $ python acme.py --appconfig=@app/config/prod.toml greet
"""

__version__ = "0.1.0"
__all__ = [
    "Application",
    "CommandResolver",
    "ConfigurationError",
    "ConsoleConfig",
    "ConsoleError",
    "Controller",
    "InvalidRouteError",
    "Module",
    "ParamSet",
    "PerchError",
    "Request",
    "Resolved",
    "Response",
    "Route",
    "Streams",
    "UnknownCommandError",
    "Unroutable",
    "get_config",
    "get_requested_route",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import perch`` fast while providing a clean top-level API.
    """
    if name == "Application":
        from perch.app import Application

        return Application

    if name == "ConsoleConfig":
        from perch.config import ConsoleConfig

        return ConsoleConfig

    if name == "Controller":
        from perch.controller import Controller

        return Controller

    if name == "Module":
        from perch.module import Module

        return Module

    if name in ("Request", "Response", "Streams"):
        from perch.console import request as _req
        from perch.console import response as _resp
        from perch.console import streams as _streams

        return getattr({"Request": _req, "Response": _resp, "Streams": _streams}[name], name)

    if name in ("Route", "ParamSet"):
        from perch.routing import route as _route

        return getattr(_route, name)

    if name in ("CommandResolver", "Resolved", "Unroutable"):
        from perch.routing import resolver as _resolver

        return getattr(_resolver, name)

    if name in ("get_config", "get_requested_route"):
        from perch import context as _ctx

        return getattr(_ctx, name)

    if name in (
        "ConfigurationError",
        "ConsoleError",
        "InvalidRouteError",
        "PerchError",
        "UnknownCommandError",
    ):
        from perch import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
