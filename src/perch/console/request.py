"""Console request — the argument vector of one process invocation."""

from collections.abc import Sequence

from perch.routing.parser import parse_args
from perch.routing.route import ParamSet, Route


class Request:
    """A console request.

    Holds the raw arguments (program name excluded) and resolves them
    into a ``Route`` and ``ParamSet`` on demand.  Created fresh for every
    invocation and never mutated.
    """

    __slots__ = ("argv",)

    def __init__(self, argv: Sequence[str]) -> None:
        self.argv: tuple[str, ...] = tuple(argv)

    def resolve(self, default_route: str) -> tuple[Route, ParamSet]:
        """Parse the arguments; *default_route* applies when none is given."""
        return parse_args(self.argv, default_route)

    def __repr__(self) -> str:
        return f"Request({list(self.argv)!r})"
