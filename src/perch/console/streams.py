"""Standard streams handed to the application and its controllers.

Passing streams explicitly keeps commands testable without patching
``sys``: tests hand in ``io.StringIO`` objects, production uses
``Streams.system()``.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import TextIO


@dataclass(frozen=True, slots=True)
class Streams:
    """The stdin/stdout/stderr triple for a single invocation."""

    stdin: TextIO
    stdout: TextIO
    stderr: TextIO

    @classmethod
    def system(cls) -> Streams:
        """Bind the interpreter's current ``sys`` streams.

        Read at call time, so stream replacement (pytest's ``capsys``,
        ``contextlib.redirect_stdout``) is honoured.
        """
        return cls(stdin=sys.stdin, stdout=sys.stdout, stderr=sys.stderr)
