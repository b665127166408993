"""Logging setup for the ``perch`` logger tree.

Modules log through named children (``perch.console``, ``perch.config``);
the application attaches a single stream handler to the ``perch`` logger
at bootstrap, writing to the injected stderr stream.
"""

import logging
from typing import TextIO

from perch.errors import ConfigurationError

_HANDLER_NAME = "perch.stream"
_FORMAT = "%(levelname)s %(name)s: %(message)s"


def configure_logging(level: str, stream: TextIO) -> logging.Logger:
    """Set the ``perch`` logger level and point its handler at *stream*.

    Idempotent: repeated calls reuse the handler installed by the first.
    Raises ``ConfigurationError`` for unknown level names.
    """
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        msg = f"Unknown log level: {level!r}"
        raise ConfigurationError(msg)

    logger = logging.getLogger("perch")
    logger.setLevel(numeric)

    handler = next((h for h in logger.handlers if h.get_name() == _HANDLER_NAME), None)
    if handler is None:
        handler = logging.StreamHandler(stream)
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(handler)
    elif isinstance(handler, logging.StreamHandler):
        handler.setStream(stream)
    return logger
