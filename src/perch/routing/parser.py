"""Command-line parsing — raw arguments to a Route and a ParamSet.

Recognized forms::

    greet                 route (first non-flag argument)
    --name=Ada            option "name" = "Ada" (last occurrence wins)
    --force               option "force" = True
    -v  /  -o=out.txt     short alias "v" = True, "o" = "out.txt"
    -1                    positional (negative numbers are not aliases)
    --                    end of options; the rest is positional
    anything else         positional, in order

``--appconfig=...`` belongs to the config loader and is dropped here.
No validation against the target action happens at this stage.
"""

import re
from collections.abc import Sequence

from perch.config import OPTION_APPCONFIG
from perch.errors import ConsoleError
from perch.routing.route import ParamSet, Route

_LONG_OPTION = re.compile(r"^--([\w-]+)(?:=(.*))?$", re.DOTALL)
_SHORT_OPTION = re.compile(r"^-([\w-]+)(?:=(.*))?$", re.DOTALL)
_NUMBER = re.compile(r"^-\d+(?:\.\d+)?$")


def parse_args(args: Sequence[str], default_route: str) -> tuple[Route, ParamSet]:
    """Split *args* (program name excluded) into a Route and a ParamSet.

    When no route is present, *default_route* is used.

    Raises ``ConsoleError`` for option names that start with a digit.
    """
    route: str | None = None
    options: dict[str, str | bool] = {}
    aliases: dict[str, str | bool] = {}
    arguments: list[str] = []
    end_of_options = False

    for arg in args:
        if end_of_options:
            if route is None:
                route = arg
            else:
                arguments.append(arg)
            continue

        if arg == "--":
            end_of_options = True
            continue

        if m := _LONG_OPTION.match(arg):
            name, value = m.group(1), m.group(2)
            if name[0].isdigit():
                msg = f'Parameter "{name}" is not valid.'
                raise ConsoleError(msg)
            if name != OPTION_APPCONFIG:
                options[name] = True if value is None else value
            continue

        if not _NUMBER.match(arg) and (m := _SHORT_OPTION.match(arg)):
            name, value = m.group(1), m.group(2)
            aliases[name] = True if value is None else value
            continue

        if route is None:
            route = arg
        else:
            arguments.append(arg)

    parsed = Route.parse(route if route is not None else "")
    if parsed.is_empty:
        parsed = Route.parse(default_route)
    return parsed, ParamSet.build(options, arguments, aliases)
