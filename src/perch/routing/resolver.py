"""Command resolution — map a Route onto a controller action and run it.

The resolver reports its outcome as a tagged value: ``Resolved`` with the
action's return value, or ``Unroutable`` when the route names no module,
controller, or action.  The dispatcher matches on the tag to translate
the unroutable case; every other failure (bad arguments, errors raised
by the action itself) propagates as an exception, untouched.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, TypeAlias, runtime_checkable

from perch.console.streams import Streams
from perch.errors import InvalidRouteError
from perch.module import Module
from perch.routing.route import ParamSet, Route


@dataclass(frozen=True, slots=True)
class Resolved:
    """The route ran; ``value`` is what the action returned."""

    value: Any


@dataclass(frozen=True, slots=True)
class Unroutable:
    """No handler exists for the route; ``cause`` says why."""

    cause: InvalidRouteError


Resolution: TypeAlias = Resolved | Unroutable


@runtime_checkable
class CommandResolver(Protocol):
    """Maps a route and its parameters to an action result."""

    def resolve(self, route: Route, params: ParamSet) -> Resolution: ...


class ModuleResolver:
    """Default resolver backed by a ``Module`` tree.

    Usage::

        resolver = ModuleResolver(module)
        match resolver.resolve(Route.parse("migrate/up"), ParamSet.empty()):
            case Resolved(value=code): ...
            case Unroutable(cause=err): ...
    """

    __slots__ = ("module", "streams")

    def __init__(self, module: Module, streams: Streams | None = None) -> None:
        self.module = module
        self.streams = streams

    def resolve(self, route: Route, params: ParamSet) -> Resolution:
        try:
            controller, action_id = self._locate(route)
        except InvalidRouteError as exc:
            return Unroutable(exc)
        return Resolved(controller.run_action(action_id, params))

    def _locate(self, route: Route) -> tuple[Any, str]:
        found = self.module.create_controller(route, self.streams)
        if found is None:
            raise InvalidRouteError(route.path)
        controller, action_id = found
        action_id, _ = controller.resolve_action(action_id)
        return controller, action_id

    def command_names(self) -> list[str]:
        """Every routable ``controller`` and ``controller/action`` name."""
        names: list[str] = []
        for controller_route in self.module.controller_routes():
            found = self.module.create_controller(Route.parse(controller_route), self.streams)
            if found is None:
                continue
            controller, _ = found
            names.append(controller_route)
            names.extend(f"{controller_route}/{action}" for action in controller.actions())
        return names
