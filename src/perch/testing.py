"""Test utilities for perch applications.

Runs commands against in-memory streams and returns what they printed,
using the same ``Application.run`` path as production::

    from perch.testing import CommandTester

    result = CommandTester(app).run(["greet", "--name=Ada"])
    assert result.exit_code == 0
    assert "Ada" in result.stdout
"""

import io
from collections.abc import Sequence
from dataclasses import dataclass

from perch.app import Application
from perch.console.streams import Streams


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Exit status and captured output of one command run."""

    exit_code: int
    stdout: str
    stderr: str


class CommandTester:
    """Runs an application's commands with captured streams.

    The application's own streams are swapped for ``StringIO`` buffers
    for the duration of each run and restored afterwards.
    """

    __test__ = False  # Tell pytest this is not a test class

    __slots__ = ("app",)

    def __init__(self, app: Application) -> None:
        self.app = app

    def run(self, argv: Sequence[str], *, stdin: str = "") -> CommandResult:
        """Run *argv* and capture stdout/stderr.

        ``SystemExit`` (e.g. a missing ``--appconfig`` file) is turned
        into the result's exit code.
        """
        streams = Streams(io.StringIO(stdin), io.StringIO(), io.StringIO())
        previous = self.app._streams
        self.app._streams = streams
        try:
            exit_code = self.app.run(list(argv))
        except SystemExit as exc:
            exit_code = exc.code if isinstance(exc.code, int) else 1
        finally:
            self.app._streams = previous
        return CommandResult(
            exit_code=exit_code,
            stdout=streams.stdout.getvalue(),
            stderr=streams.stderr.getvalue(),
        )
