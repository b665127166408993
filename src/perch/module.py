"""Modules — named groups of controllers and nested modules.

A route is walked one segment at a time: a segment naming a child
module descends into it, a segment naming a controller selects it and
the remaining segments form the action id::

    admin/users/create-user
    ^     ^     ^
    |     |     action of UsersController
    |     controller registered on the "admin" module
    module registered on the application
"""

from __future__ import annotations

import functools
from collections.abc import Callable
from typing import Any

from perch._internal.types import CommandHandler, ControllerFactory
from perch.console.streams import Streams
from perch.controller import Controller, FunctionController
from perch.routing.route import Route


class Module:
    """A registry of controllers and child modules.

    Mutable during setup (decorators at import time); read-only once
    commands start running.
    """

    __slots__ = ("controller_map", "default_route", "id", "modules", "parent")

    def __init__(self, id: str = "", *, default_route: str = "") -> None:
        self.id = id
        self.default_route = default_route
        self.parent: Module | None = None
        self.controller_map: dict[str, ControllerFactory] = {}
        self.modules: dict[str, Module] = {}

    @property
    def unique_id(self) -> str:
        """Slash-joined ids from the root (the root module's id is empty)."""
        if self.parent is None:
            return self.id
        prefix = self.parent.unique_id
        return f"{prefix}/{self.id}" if prefix else self.id

    # -- Registration --

    def add_controller(self, id: str, factory: ControllerFactory) -> None:
        """Register a controller class (or factory) under *id*."""
        self.controller_map[id] = factory

    def controller(self, id: str) -> Callable[[type[Controller]], type[Controller]]:
        """Register a controller class via decorator.

        Usage::

            @app.controller("migrate")
            class MigrateController(Controller):
                def action_up(self) -> int: ...
        """

        def decorator(cls: type[Controller]) -> type[Controller]:
            self.add_controller(id, cls)
            return cls

        return decorator

    def command(self, id: str | None = None) -> Callable[[CommandHandler], CommandHandler]:
        """Register a plain function as a single-action command.

        The id defaults to the function name in kebab-case.

        Usage::

            @app.command("greet")
            def greet(name: str = "world") -> int:
                print(f"Hello, {name}!")
                return 0
        """

        def decorator(func: CommandHandler) -> CommandHandler:
            command_id = id or func.__name__.replace("_", "-")
            self.add_controller(command_id, functools.partial(FunctionController, func))
            return func

        return decorator

    def add_module(self, id: str, module: Module) -> Module:
        """Mount *module* under *id* and return it."""
        module.id = id
        module.parent = self
        self.modules[id] = module
        return module

    # -- Lookup --

    def create_controller(
        self, route: Route, streams: Streams | None = None
    ) -> tuple[Controller, str] | None:
        """Resolve *route* to ``(controller, action_id)``.

        An empty route falls back to this module's ``default_route``.
        Returns None when no module or controller matches.
        """
        segments = route.segments
        if not segments and self.default_route:
            segments = Route.parse(self.default_route).segments
        if not segments:
            return None

        head, rest = segments[0], "/".join(segments[1:])
        if head in self.modules:
            return self.modules[head].create_controller(Route.parse(rest), streams)

        factory = self.controller_map.get(head)
        if factory is None:
            return None
        controller: Any = factory(head, self, streams)
        return controller, rest

    def controller_routes(self) -> list[str]:
        """Routes of every controller in this module tree, sorted."""
        routes: list[str] = []
        for controller_id in self.controller_map:
            routes.append(self._route_for(controller_id))
        for module in self.modules.values():
            routes.extend(module.controller_routes())
        return sorted(routes)

    def _route_for(self, controller_id: str) -> str:
        prefix = self.unique_id
        return f"{prefix}/{controller_id}" if prefix else controller_id
