"""Invocation-scoped context via ContextVar.

Provides:
- ``requested_route``: the Route being dispatched.
- ``current_config``: the ConsoleConfig in effect for this dispatch.

Both are set by the application before the resolver runs and reset
afterwards.  Accessing them outside a dispatch raises ``LookupError``.
"""

from contextvars import ContextVar

from perch.config import ConsoleConfig
from perch.routing.route import Route

requested_route: ContextVar[Route] = ContextVar("perch_requested_route")
"""The route of the command being run. Set by ``Application.run_action``."""

current_config: ContextVar[ConsoleConfig] = ContextVar("perch_config")
"""The configuration in effect. Set by ``Application.run_action``."""


def get_requested_route() -> Route:
    """Return the route being dispatched.

    Raises ``LookupError`` if called outside a dispatch.
    """
    return requested_route.get()


def get_config() -> ConsoleConfig:
    """Return the configuration of the running application.

    Raises ``LookupError`` if called outside a dispatch.
    """
    return current_config.get()
