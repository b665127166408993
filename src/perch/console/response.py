"""Console response — the exit status handed to the process-exit layer.

Immutable by convention like every other value type here; use
``with_exit_status`` to derive a new one.
"""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True, slots=True)
class Response:
    """The outcome of a console request.

    Actions may return one directly instead of an integer exit code;
    it is then passed through to the caller untouched.
    """

    exit_status: int = 0

    def with_exit_status(self, exit_status: int) -> Response:
        """Return a new Response with a different exit status."""
        return replace(self, exit_status=exit_status)

    @property
    def ok(self) -> bool:
        return self.exit_status == 0
