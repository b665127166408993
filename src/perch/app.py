"""Perch console application.

Composes the collaborators of a console run — config loader, route
parser, command resolver, standard streams — and dispatches one route
per process::

    app <route> [--name=value ...] [argument ...]

where ``<route>`` has the form ``module/controller/action`` (e.g.
``migrate/up``) and ``--name=value`` options bind to controller options
or action parameters.  ``--appconfig=<path>`` replaces the configuration
before anything else is parsed.  The ``help`` command is registered by
default and is the default route.
"""

from __future__ import annotations

import difflib
import logging
import sys
from collections.abc import Callable, Mapping, Sequence
from dataclasses import asdict
from typing import Any

from perch._internal.log import configure_logging
from perch.config import ConsoleConfig, load_config
from perch.console.error_handler import render_exception
from perch.console.request import Request
from perch.console.response import Response
from perch.console.streams import Streams
from perch.context import current_config, requested_route
from perch.controller import EXIT_CODE_ERROR, EXIT_CODE_NORMAL
from perch.controllers.help import HelpController
from perch.errors import ConsoleError, UnknownCommandError
from perch.module import Module
from perch.routing.resolver import CommandResolver, ModuleResolver, Resolved, Unroutable
from perch.routing.route import ParamSet, Route

logger = logging.getLogger("perch.console")

_MAX_SUGGESTIONS = 5


def normalize_result(value: Any) -> int | Response:
    """Reduce an action's return value to an exit code or a Response.

    - ``Response`` passes through unchanged
    - ``None`` means success (``0``)
    - ``int`` passes through; ``bool`` and other ``int()``-able values
      (``"3"``, ``2.0``) are converted

    Raises ``ConsoleError`` for anything ``int()`` rejects.
    """
    if isinstance(value, Response):
        return value
    if value is None:
        return EXIT_CODE_NORMAL
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    try:
        return int(value)
    except (TypeError, ValueError):
        msg = f"Action returned {type(value).__name__} {value!r}, which is not an exit code."
        raise ConsoleError(msg) from None


class Application:
    """The perch console application.

    Collaborators are supplied at construction, none are inherited:

    - *config*: the default configuration mapping (or a ``ConsoleConfig``)
    - *resolver*: maps routes to actions; defaults to a ``ModuleResolver``
      over ``app.module``
    - *streams*: stdin/stdout/stderr; defaults to the ``sys`` streams at
      the time of each call
    - *path_resolver*: resolves the ``--appconfig`` path; defaults to an
      ``AliasResolver`` over the configured ``aliases``

    Usage::

        app = Application({"name": "acme"})

        @app.command("greet")
        def greet(name: str = "world") -> int:
            print(f"Hello, {name}!")
            return 0

        if __name__ == "__main__":
            sys.exit(app.run())
    """

    __slots__ = (
        "_default_config",
        "_path_resolver",
        "_resolver",
        "_streams",
        "config",
        "module",
        "requested_route",
    )

    def __init__(
        self,
        config: Mapping[str, Any] | ConsoleConfig | None = None,
        *,
        resolver: CommandResolver | None = None,
        streams: Streams | None = None,
        path_resolver: Callable[[str], str | None] | None = None,
    ) -> None:
        if isinstance(config, ConsoleConfig):
            config = asdict(config)
        self._default_config: Mapping[str, Any] = dict(config or {})
        self.config: ConsoleConfig = ConsoleConfig.from_mapping(self._default_config)
        self._resolver = resolver
        self._streams = streams
        self._path_resolver = path_resolver
        self.requested_route: Route | None = None

        self.module = Module()
        self.module.add_controller("help", HelpController)

    @property
    def streams(self) -> Streams:
        return self._streams or Streams.system()

    @property
    def resolver(self) -> CommandResolver:
        if self._resolver is not None:
            return self._resolver
        return ModuleResolver(self.module, self.streams)

    # -- Registration (delegates to the root module) --

    def command(self, id: str | None = None) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a function as a command. See ``Module.command``."""
        return self.module.command(id)

    def controller(self, id: str) -> Callable[[type], type]:
        """Register a controller class. See ``Module.controller``."""
        return self.module.controller(id)

    def add_controller(self, id: str, factory: Callable[..., Any]) -> None:
        self.module.add_controller(id, factory)

    def add_module(self, id: str, module: Module) -> Module:
        return self.module.add_module(id, module)

    # -- Dispatch --

    def bootstrap(self, argv: Sequence[str]) -> ConsoleConfig:
        """Load the configuration for this run and set up logging.

        A ``--appconfig`` file replaces the default configuration
        wholesale; a missing one ends the process (``SystemExit(1)``).
        """
        streams = self.streams
        mapping = load_config(
            argv,
            self._default_config,
            resolve_path=self._path_resolver,
            stderr=streams.stderr,
        )
        self.config = ConsoleConfig.from_mapping(mapping)
        configure_logging(self.config.log_level, streams.stderr)
        return self.config

    def dispatch(self, argv: Sequence[str]) -> int | Response:
        """Run the command named by *argv* (program name excluded).

        Returns the action's exit code, or the ``Response`` it returned.

        Raises ``UnknownCommandError`` when the route resolves to nothing;
        every other error propagates unchanged.
        """
        config = self.bootstrap(argv)
        route, params = Request(argv).resolve(config.default_route)
        return self.run_action(route, params)

    def handle_request(self, request: Request) -> Response:
        """Handle *request* with the current configuration.

        Integer results are written onto a new ``Response``; a
        ``Response`` returned by the action is passed through.
        """
        route, params = request.resolve(self.config.default_route)
        result = self.run_action(route, params)
        if isinstance(result, Response):
            return result
        return Response(exit_status=result)

    def run_action(self, route: Route | str, params: ParamSet | None = None) -> int | Response:
        """Run the action named by *route*.

        An empty route runs the configured default route.  For example,
        to run ``def action_test(self, a, b)`` of the ``controller``
        command with an option::

            app.run_action("controller/test", ParamSet.build({"option": "value"}, ["a", "b"]))
        """
        if isinstance(route, str):
            route = Route.parse(route)
        if route.is_empty:
            route = Route.parse(self.config.default_route)
        params = params or ParamSet.empty()

        self.requested_route = route
        route_token = requested_route.set(route)
        config_token = current_config.set(self.config)
        try:
            logger.debug("Dispatching route %r", route.path)
            match self.resolver.resolve(route, params):
                case Unroutable(cause=cause):
                    command = route.raw or route.path
                    raise UnknownCommandError(
                        command, cause, self._suggest(route.path)
                    ) from cause
                case Resolved(value=value):
                    return normalize_result(value)
                case other:
                    msg = f"Resolver returned {type(other).__name__}, expected Resolved or Unroutable."
                    raise TypeError(msg)
        finally:
            current_config.reset(config_token)
            requested_route.reset(route_token)

    def run(self, argv: Sequence[str] | None = None) -> int:
        """Run the application and return the process exit status.

        Uses ``sys.argv[1:]`` when *argv* is None.  ``ConsoleError``
        (including unknown commands) is rendered to stderr and its
        ``exit_code`` returned; any other exception is logged, rendered,
        and turned into exit code 1, or re-raised when ``debug`` is on.
        """
        if argv is None:
            argv = sys.argv[1:]
        streams = self.streams

        try:
            self.bootstrap(argv)
            response = self.handle_request(Request(argv))
        except ConsoleError as exc:
            render_exception(exc, streams.stderr, debug=self.config.debug)
            return exc.exit_code
        except Exception as exc:
            # Traceback only in debug mode
            logger.error(
                "Unhandled exception while running %r",
                self._route_label(),
                exc_info=self.config.debug,
            )
            if self.config.debug:
                raise
            render_exception(exc, streams.stderr)
            return EXIT_CODE_ERROR
        return response.exit_status

    # -- Internal --

    def _route_label(self) -> str:
        return self.requested_route.path if self.requested_route is not None else ""

    def _suggest(self, command: str) -> tuple[str, ...]:
        """Registered command names close to *command*."""
        names_fn = getattr(self.resolver, "command_names", None)
        if names_fn is None:
            return ()
        names = list(names_fn())
        prefixed = [n for n in names if command and n.startswith(command)]
        close = difflib.get_close_matches(command, names, n=_MAX_SUGGESTIONS, cutoff=0.6)
        suggestions = list(dict.fromkeys([*prefixed, *close]))
        return tuple(suggestions[:_MAX_SUGGESTIONS])
