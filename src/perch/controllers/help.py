"""``help`` — lists commands, and describes one command's actions.

The default route of every application.  Output is rendered with kida
templates; its layout is for humans and is not a stable format.  Use
``help/list`` for a machine-readable list of routes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from kida import Environment

from perch.context import current_config
from perch.controller import EXIT_CODE_NORMAL, Controller
from perch.errors import ConsoleError
from perch.routing.route import Route

if TYPE_CHECKING:
    from perch.module import Module

INDEX_TEMPLATE = """\
{{ name }} (version {{ version }})

Usage: <command> [--option=value ...] [argument ...]

The following commands are available:

{% for row in rows %}
- {{ row.route }}{% if row.summary %}  {{ row.summary }}{% endif %}

{% for action in row.actions %}
    {{ action.route }}{% if action.summary %}  {{ action.summary }}{% endif %}

{% endfor %}
{% endfor %}

To see the help of each command, enter:

  help <command-name>
"""

COMMAND_TEMPLATE = """\
{% if summary %}
{{ summary }}

{% endif %}
{% for action in actions %}
Usage: {{ action.usage }}
{% if action.summary %}
    {{ action.summary }}
{% endif %}
{% for option in action.options %}
    {{ option }}
{% endfor %}

{% endfor %}
"""


@dataclass(frozen=True, slots=True)
class _ActionRow:
    route: str
    summary: str
    usage: str = ""
    options: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class _CommandRow:
    route: str
    summary: str
    actions: tuple[_ActionRow, ...]


def _environment() -> Environment:
    return Environment(autoescape=False, trim_blocks=True, lstrip_blocks=True)


class HelpController(Controller):
    """Provides help information about console commands."""

    def action_index(self, command: str | None = None) -> int:
        """Displays available commands or the detailed information about a command."""
        if command is None:
            self.streams.stdout.write(self.render_index())
        else:
            self.streams.stdout.write(self.render_command(command))
        return EXIT_CODE_NORMAL

    def action_list(self) -> int:
        """Lists all available routes, one per line."""
        for route in self._root_routes():
            self.echo(route)
        return EXIT_CODE_NORMAL

    # -- Rendering --

    def render_index(self) -> str:
        config = current_config.get(None)
        rows = []
        for route in self._root().controller_routes():
            controller = self._controller_for(route)
            if controller is None:
                continue
            action_ids = controller.actions()
            actions: tuple[_ActionRow, ...] = ()
            # Single-action commands are listed by their controller route alone
            if len(action_ids) > 1:
                actions = tuple(
                    _ActionRow(
                        route=f"{route}/{action}"
                        + (" (default)" if action == controller.default_action else ""),
                        summary=controller.get_action_summary(action),
                    )
                    for action in action_ids
                )
            rows.append(_CommandRow(route, controller.help_summary(), actions))

        return _environment().from_string(INDEX_TEMPLATE).render(
            {
                "name": config.name if config else "Console Application",
                "version": config.version if config else "1.0",
                "rows": rows,
            }
        )

    def render_command(self, command: str) -> str:
        found = self._root().create_controller(Route.parse(command), self.streams)
        if found is None:
            msg = f'No help for unknown command "{command}".'
            raise ConsoleError(msg)
        controller, action_id = found
        if action_id:
            if controller.get_action(action_id) is None:
                msg = f'No help for unknown sub-command "{command}".'
                raise ConsoleError(msg)
            action_ids = [action_id]
        else:
            action_ids = controller.actions()

        aliases = {option: alias for alias, option in controller.option_aliases().items()}
        actions = []
        for action in action_ids:
            route = f"{controller.unique_id}/{action}"
            args = [
                f"<{name}>" if required else f"[{name}]"
                for name, required in controller.get_action_arguments(action)
            ]
            options = tuple(
                "--" + option.replace("_", "-")
                + (f", -{aliases[option]}" if option in aliases else "")
                for option in controller.options(action)
            )
            actions.append(
                _ActionRow(
                    route=route,
                    summary=controller.get_action_summary(action),
                    usage=" ".join([route, *args]),
                    options=options,
                )
            )

        return _environment().from_string(COMMAND_TEMPLATE).render(
            {"summary": controller.help_summary(), "actions": actions}
        )

    # -- Lookup --

    def _root(self) -> Module:
        module = self.module
        while module is not None and module.parent is not None:
            module = module.parent
        if module is None:
            msg = "The help command is not attached to a module."
            raise ConsoleError(msg)
        return module

    def _controller_for(self, route: str) -> Controller | None:
        found = self._root().create_controller(Route.parse(route), self.streams)
        return found[0] if found else None

    def _root_routes(self) -> list[str]:
        routes: list[str] = []
        for route in self._root().controller_routes():
            controller = self._controller_for(route)
            if controller is None:
                continue
            routes.append(route)
            actions = controller.actions()
            if len(actions) > 1:
                routes.extend(f"{route}/{action}" for action in actions)
        return routes
