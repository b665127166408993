"""Error rendering for the process-exit layer.

Maps exceptions that escape a command to the one-or-two line messages a
terminal user sees on stderr.
"""

import traceback
from typing import TextIO

from perch.errors import ConsoleError, UnknownCommandError


def format_exception(exc: BaseException, *, debug: bool = False) -> str:
    """Render *exc* as terminal text, newline-terminated.

    - ``ConsoleError`` → ``Error: <message>`` (user mistakes)
    - ``UnknownCommandError`` additionally suggests close matches
    - anything else → ``Exception (<TypeName>): <message>``

    In debug mode the traceback is appended.
    """
    if isinstance(exc, ConsoleError):
        lines = [f"Error: {exc}"]
    else:
        lines = [f"Exception ({type(exc).__name__}): {exc}"]

    if isinstance(exc, UnknownCommandError) and exc.suggestions:
        if len(exc.suggestions) == 1:
            lines.append(f'Did you mean "{exc.suggestions[0]}"?')
        else:
            lines.append("Did you mean one of these?")
            lines.extend(f"    - {name}" for name in exc.suggestions)

    if debug:
        lines.append("".join(traceback.format_exception(exc)).rstrip("\n"))
    return "\n".join(lines) + "\n"


def render_exception(exc: BaseException, stream: TextIO, *, debug: bool = False) -> None:
    """Write ``format_exception(exc)`` to *stream*."""
    stream.write(format_exception(exc, debug=debug))
    stream.flush()
