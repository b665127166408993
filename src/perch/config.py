"""Application configuration.

ConsoleConfig is a frozen dataclass — immutable after creation,
IDE-autocompletable, built from a plain mapping so the mapping can come
from code or from a file named by ``--appconfig``.
"""

from __future__ import annotations

import json
import logging
import os
import runpy
import sys
import tomllib
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field, fields
from typing import Any, TextIO

from perch.aliases import AliasResolver
from perch.errors import ConfigurationError

logger = logging.getLogger("perch.config")

OPTION_APPCONFIG = "appconfig"
"""Command-line option naming a file that replaces the configuration."""


@dataclass(frozen=True, slots=True)
class ConsoleConfig:
    """Console application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = ConsoleConfig(name="acme", default_route="status")
        config = ConsoleConfig.from_mapping({"debug": True})
    """

    name: str = "Console Application"
    version: str = "1.0"

    # Route used when the command line names none
    default_route: str = "help"

    debug: bool = False
    log_level: str = "warning"

    # Path aliases (e.g. {"@app": "/srv/app"}) used to locate config files
    aliases: Mapping[str, str] = field(default_factory=dict)

    # Free-form application parameters, read by commands
    params: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> ConsoleConfig:
        """Build a config from *mapping*.

        Keys missing from *mapping* take the dataclass defaults.
        Raises ``ConfigurationError`` on keys that name no field.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(mapping) - known)
        if unknown:
            msg = f"Unknown configuration keys: {', '.join(unknown)}"
            raise ConfigurationError(msg)
        return cls(**dict(mapping))


def find_config_option(argv: Sequence[str]) -> str | None:
    """Return the path given via ``--appconfig=<path>``, or None."""
    prefix = f"--{OPTION_APPCONFIG}="
    for arg in argv:
        if arg.startswith(prefix):
            return arg[len(prefix) :]
    return None


def load_config(
    argv: Sequence[str],
    config: Mapping[str, Any],
    *,
    resolve_path: Callable[[str], str | None] | None = None,
    stderr: TextIO | None = None,
) -> Mapping[str, Any]:
    """Return the configuration mapping the application should use.

    When *argv* carries ``--appconfig=<path>`` and the path resolves to an
    existing file, that file's mapping is returned and *config* is
    discarded entirely.  When the option is absent, *config* is returned
    unchanged.

    A path that is empty or does not resolve to a file ends the process
    before anything is dispatched: the message
    ``The configuration file does not exist: <path>`` goes to *stderr*
    and ``SystemExit(1)`` is raised.
    """
    path = find_config_option(argv)
    if path is None:
        return config

    if resolve_path is None:
        resolve_path = AliasResolver(config.get("aliases"))

    file = resolve_path(path) if path else None
    if not file or not os.path.isfile(file):
        stream = stderr if stderr is not None else sys.stderr
        stream.write(f"The configuration file does not exist: {path}\n")
        stream.flush()
        raise SystemExit(1)

    logger.info("Loading configuration from %s", file)
    return read_config_file(file)


def read_config_file(file: str) -> Mapping[str, Any]:
    """Load a configuration mapping from a ``.py``, ``.toml`` or ``.json`` file.

    Python files are executed and must bind a module-level ``config``
    mapping.
    """
    _, ext = os.path.splitext(file)
    ext = ext.lower()

    if ext == ".py":
        namespace = runpy.run_path(file)
        data = namespace.get("config")
        if not isinstance(data, Mapping):
            msg = f"Configuration file {file!r} must define a 'config' mapping."
            raise ConfigurationError(msg)
        return data

    if ext == ".toml":
        with open(file, "rb") as fh:
            try:
                return tomllib.load(fh)
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in configuration file {file!r}: {exc}"
                raise ConfigurationError(msg) from exc

    if ext == ".json":
        with open(file, encoding="utf-8") as fh:
            try:
                data = json.load(fh)
            except json.JSONDecodeError as exc:
                msg = f"Invalid JSON in configuration file {file!r}: {exc}"
                raise ConfigurationError(msg) from exc
        if not isinstance(data, dict):
            msg = f"Configuration file {file!r} must contain a JSON object."
            raise ConfigurationError(msg)
        return data

    msg = f"Unsupported configuration file type {ext or '(none)'!r}: {file}"
    raise ConfigurationError(msg)
