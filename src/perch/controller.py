"""Controllers — groups of actions addressed by ``controller/action`` routes.

A controller is a class whose ``action_<name>`` methods are its actions.
Action ids are kebab-case on the command line: ``create-user`` runs
``action_create_user``.  Plain functions registered with
``@app.command`` are wrapped in a ``FunctionController`` with a single
``index`` action.

Argument binding for an action, in order:

1. Short aliases (``-v``) are mapped through ``option_aliases()``
2. Named options listed by ``options(action_id)`` become controller
   attributes, coerced to the attribute's current type
3. Remaining named options bind to action parameters by name
4. Positional arguments fill the remaining positional parameters in
   order; ``*args`` absorbs the rest
"""

from __future__ import annotations

import inspect
import re
import types
import typing
from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from perch._internal.invoke import invoke
from perch.console.streams import Streams
from perch.errors import ConsoleError, InvalidRouteError
from perch.routing.route import ParamSet

if TYPE_CHECKING:
    from perch.module import Module

EXIT_CODE_NORMAL = 0
EXIT_CODE_ERROR = 1

_ACTION_ID = re.compile(r"^(?:[a-z0-9_]+-)*[a-z0-9_]+$")
_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off", ""})


def summary(doc: str | None) -> str:
    """First line of a docstring, or ``""``."""
    if not doc:
        return ""
    return inspect.cleandoc(doc).partition("\n")[0].strip()


class Controller:
    """Base class for console controllers.

    Usage::

        class MigrateController(Controller):
            \"\"\"Manages database migrations.\"\"\"

            dry_run: bool = False

            def options(self, action_id: str) -> list[str]:
                return ["dry_run"]

            def option_aliases(self) -> dict[str, str]:
                return {"n": "dry_run"}

            def action_up(self, limit: int = 0) -> int:
                ...
                return EXIT_CODE_NORMAL
    """

    default_action: str = "index"

    def __init__(self, id: str, module: Module | None = None, streams: Streams | None = None) -> None:
        self.id = id
        self.module = module
        self.streams = streams or Streams.system()

    @property
    def unique_id(self) -> str:
        """The controller route including parent module ids."""
        prefix = self.module.unique_id if self.module is not None else ""
        return f"{prefix}/{self.id}" if prefix else self.id

    # -- Introspection --

    def options(self, action_id: str) -> list[str]:
        """Attribute names settable as ``--name=value`` for *action_id*."""
        return []

    def option_aliases(self) -> dict[str, str]:
        """Short flag → option name, e.g. ``{"v": "verbose"}``."""
        return {}

    def actions(self) -> list[str]:
        """All action ids this controller defines, sorted."""
        ids = []
        for name in dir(type(self)):
            if name.startswith("action_") and callable(getattr(self, name, None)):
                ids.append(name[len("action_") :].replace("_", "-"))
        return sorted(ids)

    def help_summary(self) -> str:
        return summary(type(self).__doc__)

    def get_action_summary(self, action_id: str) -> str:
        method = self.get_action(action_id)
        return summary(method.__doc__) if method is not None else ""

    def get_action_arguments(self, action_id: str) -> list[tuple[str, bool]]:
        """``(name, required)`` for each positional parameter of an action."""
        method = self.get_action(action_id)
        if method is None:
            return []
        result = []
        for name, param in inspect.signature(method, eval_str=True).parameters.items():
            if param.annotation is Streams:
                continue
            if param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD):
                result.append((name, param.default is param.empty))
        return result

    # -- Running actions --

    def get_action(self, action_id: str) -> Callable[..., Any] | None:
        """Return the bound method for *action_id*, or None."""
        if not _ACTION_ID.match(action_id):
            return None
        method = getattr(self, "action_" + action_id.replace("-", "_"), None)
        return method if callable(method) else None

    def resolve_action(self, action_id: str) -> tuple[str, Callable[..., Any]]:
        """Return ``(action_id, method)``, applying the default action.

        Raises ``InvalidRouteError`` when the controller has no such action.
        """
        action_id = action_id or self.default_action
        method = self.get_action(action_id)
        if method is None:
            raise InvalidRouteError(f"{self.unique_id}/{action_id}")
        return action_id, method

    def run_action(self, action_id: str, params: ParamSet) -> Any:
        """Bind *params* to the action and run it.

        Raises ``InvalidRouteError`` for an unknown action and
        ``ConsoleError`` when the arguments don't fit the action.
        """
        action_id, method = self.resolve_action(action_id)
        named = self._apply_options(action_id, params)
        args, kwargs = bind_arguments(method, params.arguments, named, {Streams: self.streams})
        return invoke(method, *args, **kwargs)

    def _apply_options(self, action_id: str, params: ParamSet) -> dict[str, str | bool]:
        named: dict[str, str | bool] = {}
        for name, value in params.options.items():
            named[name.replace("-", "_")] = value

        if params.aliases:
            aliases = self.option_aliases()
            for alias, value in params.aliases.items():
                if alias not in aliases:
                    msg = f"Unknown alias: -{alias}"
                    raise ConsoleError(msg)
                named[aliases[alias].replace("-", "_")] = value

        declared = set(self.options(action_id))
        remaining: dict[str, str | bool] = {}
        for name, value in named.items():
            if name in declared:
                setattr(self, name, coerce_option(getattr(self, name, None), value, name))
            else:
                remaining[name] = value
        return remaining

    # -- Output --

    def echo(self, text: str = "") -> None:
        """Write a line to stdout."""
        self.streams.stdout.write(text + "\n")

    def error(self, text: str) -> None:
        """Write a line to stderr."""
        self.streams.stderr.write(text + "\n")


class FunctionController(Controller):
    """A plain function exposed as a command with a single ``index`` action."""

    def __init__(
        self,
        func: Callable[..., Any],
        id: str,
        module: Module | None = None,
        streams: Streams | None = None,
    ) -> None:
        super().__init__(id, module, streams)
        self.func = func

    def actions(self) -> list[str]:
        return [self.default_action]

    def get_action(self, action_id: str) -> Callable[..., Any] | None:
        return self.func if action_id == self.default_action else None

    def help_summary(self) -> str:
        return summary(self.func.__doc__)


# -- Value coercion --


def _option_flag(name: str) -> str:
    return "--" + name.replace("_", "-")


def _parse_bool(value: str | bool, name: str) -> bool:
    if value is True:
        return True
    lowered = str(value).strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    msg = f'Invalid value for "{_option_flag(name)}": {value!r} is not a boolean.'
    raise ConsoleError(msg)


def _require_value(value: str | bool, name: str) -> str:
    if value is True:
        msg = f'Option "{_option_flag(name)}" requires a value.'
        raise ConsoleError(msg)
    return str(value)


def _convert(target: type, value: str | bool, name: str) -> Any:
    if target is bool:
        return _parse_bool(value, name)
    if target in (int, float):
        text = _require_value(value, name)
        try:
            return target(text)
        except ValueError:
            msg = f'Invalid value for "{_option_flag(name)}": {text!r} is not a valid {target.__name__}.'
            raise ConsoleError(msg) from None
    if target in (list, tuple):
        text = _require_value(value, name)
        items = [part.strip() for part in text.split(",")] if text.strip() else []
        return target(items)
    if target is str:
        return _require_value(value, name)
    return value


def coerce_option(current: Any, value: str | bool, name: str) -> Any:
    """Coerce a command-line *value* to the type of an option's *current* value."""
    if current is None:
        return value
    for target in (bool, int, float, list, tuple, str):
        if isinstance(current, target):
            return _convert(target, value, name)
    return value


def _annotation_target(annotation: Any) -> type | None:
    """Reduce ``int``, ``int | None``, ``list[str]`` to a convertible type."""
    if annotation is inspect.Parameter.empty:
        return None
    origin = typing.get_origin(annotation)
    if origin in (typing.Union, types.UnionType):
        args = [a for a in typing.get_args(annotation) if a is not type(None)]
        if len(args) != 1:
            return None
        return _annotation_target(args[0])
    if origin in (list, tuple):
        return origin
    if annotation in (bool, int, float, str, list, tuple):
        return annotation
    return None


def _coerce_argument(param: inspect.Parameter, value: str | bool) -> Any:
    target = _annotation_target(param.annotation)
    if target is None:
        return value
    return _convert(target, value, param.name)


def bind_arguments(
    handler: Callable[..., Any],
    arguments: Sequence[str],
    options: Mapping[str, str | bool],
    services: Mapping[type, Any] | None = None,
) -> tuple[list[Any], dict[str, Any]]:
    """Map positional *arguments* and named *options* onto *handler*'s signature.

    Parameters annotated with a type in *services* (e.g. ``Streams``)
    receive that service instead of a command-line value.

    Returns ``(args, kwargs)`` ready for ``handler(*args, **kwargs)``.
    Raises ``ConsoleError`` for missing required arguments, unknown
    options, surplus positional arguments, and values that fail coercion.
    """
    sig = inspect.signature(handler, eval_str=True)
    positional = list(arguments)
    remaining = dict(options)
    args: list[Any] = []
    kwargs: dict[str, Any] = {}
    missing: list[str] = []

    services = services or {}

    for name, param in sig.parameters.items():
        if param.annotation in services and param.kind not in (
            param.VAR_POSITIONAL,
            param.VAR_KEYWORD,
        ):
            if param.kind is param.KEYWORD_ONLY:
                kwargs[name] = services[param.annotation]
            else:
                args.append(services[param.annotation])
        elif param.kind is param.VAR_POSITIONAL:
            args.extend(_coerce_argument(param, value) for value in positional)
            positional = []
        elif param.kind is param.VAR_KEYWORD:
            kwargs.update(remaining)
            remaining = {}
        elif param.kind is param.KEYWORD_ONLY:
            if name in remaining:
                kwargs[name] = _coerce_argument(param, remaining.pop(name))
            elif param.default is param.empty:
                missing.append(name)
        elif name in remaining:
            args.append(_coerce_argument(param, remaining.pop(name)))
        elif positional:
            args.append(_coerce_argument(param, positional.pop(0)))
        elif param.default is not param.empty:
            args.append(param.default)
        else:
            missing.append(name)

    if remaining:
        unknown = ", ".join(_option_flag(n) for n in remaining)
        msg = f"Unknown option: {unknown}"
        raise ConsoleError(msg)
    if missing:
        msg = f"Missing required arguments: {', '.join(missing)}"
        raise ConsoleError(msg)
    if positional:
        msg = f"Unexpected arguments: {' '.join(positional)}"
        raise ConsoleError(msg)
    return args, kwargs
