"""Route and ParamSet frozen dataclasses."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


@dataclass(frozen=True, slots=True)
class Route:
    """A parsed command route such as ``module/controller/action``.

    ``path`` is the route with surrounding slashes stripped;
    ``segments`` are its ``/``-separated identifiers.  ``raw`` keeps the
    text exactly as typed, for error messages; it takes no part in
    equality.
    """

    path: str
    segments: tuple[str, ...] = ()
    raw: str = field(default="", compare=False)

    @classmethod
    def parse(cls, text: str) -> Route:
        path = text.strip("/")
        segments = tuple(s for s in path.split("/") if s)
        return cls(path=path, segments=segments, raw=text)

    @property
    def is_empty(self) -> bool:
        return not self.segments

    def __str__(self) -> str:
        return self.path


def _freeze(mapping: Mapping[str, str | bool] | None) -> Mapping[str, str | bool]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True, slots=True)
class ParamSet:
    """Named options and positional arguments for a single invocation.

    - ``options``: ``--name=value`` (str) and ``--name`` (True)
    - ``arguments``: positional values, in command-line order
    - ``aliases``: short flags (``-v``, ``-o=out``) keyed without the dash
    """

    options: Mapping[str, str | bool] = field(default_factory=lambda: _freeze(None))
    arguments: tuple[str, ...] = ()
    aliases: Mapping[str, str | bool] = field(default_factory=lambda: _freeze(None))

    @classmethod
    def build(
        cls,
        options: Mapping[str, str | bool] | None = None,
        arguments: tuple[str, ...] | list[str] = (),
        aliases: Mapping[str, str | bool] | None = None,
    ) -> ParamSet:
        return cls(
            options=_freeze(options),
            arguments=tuple(arguments),
            aliases=_freeze(aliases),
        )

    @classmethod
    def empty(cls) -> ParamSet:
        return cls()

    @property
    def is_empty(self) -> bool:
        return not (self.options or self.arguments or self.aliases)
