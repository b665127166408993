"""Path aliases — ``@name/rest`` strings resolved to filesystem paths.

Used by the config loader to locate the file named by ``--appconfig``.
"""

import os
from collections.abc import Mapping


class AliasResolver:
    """Resolve ``@alias``-prefixed paths against a mapping of roots.

    Usage::

        resolve = AliasResolver({"@app": "/srv/app"})
        resolve("@app/config/console.py")  # "/srv/app/config/console.py"
        resolve("config.toml")              # "config.toml"
        resolve("@nope/x")                  # None

    ``@cwd`` always maps to the current working directory unless
    overridden.
    """

    __slots__ = ("_aliases",)

    def __init__(self, aliases: Mapping[str, str] | None = None) -> None:
        self._aliases: dict[str, str] = {}
        for name, path in (aliases or {}).items():
            key = name if name.startswith("@") else f"@{name}"
            self._aliases[key] = str(path).rstrip("/\\") or str(path)

    def __call__(self, path: str) -> str | None:
        if not path.startswith("@"):
            return path

        alias, sep, rest = path.partition("/")
        if alias == "@cwd" and alias not in self._aliases:
            root = os.getcwd()
        else:
            root = self._aliases.get(alias)
            if root is None:
                return None
        return os.path.join(root, rest) if sep else root

    def __contains__(self, alias: str) -> bool:
        return alias in self._aliases
