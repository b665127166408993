"""Shared type aliases used across perch modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Command function — user-defined function with variable signature
CommandHandler: TypeAlias = Callable[..., Any]

# Controller factory — called with (id, module, streams), returns a Controller
ControllerFactory: TypeAlias = Callable[..., Any]
