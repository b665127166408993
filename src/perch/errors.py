"""Perch exception hierarchy.

Shared across the parser, resolver, controllers, and application so every
module raises and catches the same types.
"""


class PerchError(Exception):
    """Base for all perch-specific errors."""


class ConfigurationError(PerchError):
    """Raised when the application configuration is invalid.

    Covers unknown configuration keys and config files that exist but
    cannot be loaded.
    """


class ConsoleError(PerchError):
    """A user-facing command error.

    Rendered as ``Error: <message>`` by the error handler; ``exit_code``
    becomes the process exit status.
    """

    def __init__(self, message: str = "", exit_code: int = 1) -> None:
        super().__init__(message)
        self.exit_code = exit_code


class InvalidRouteError(PerchError):
    """A route names no module, controller, or action."""

    def __init__(self, route: str, detail: str = "") -> None:
        self.route = route
        self.detail = detail or f'Unable to resolve the request "{route}".'
        super().__init__(self.detail)


class UnknownCommandError(ConsoleError):
    """The user typed a command that doesn't exist.

    Raised by the dispatcher in place of the resolver's unroutable
    outcome.  ``command`` is the route exactly as requested and ``cause``
    is the resolver's original failure.
    """

    def __init__(
        self,
        command: str,
        cause: BaseException | None = None,
        suggestions: tuple[str, ...] = (),
    ) -> None:
        super().__init__(f'Unknown command "{command}".')
        self.command = command
        self.cause = cause
        self.suggestions = suggestions
