"""Tests for perch.aliases — @alias path resolution."""

import os

from perch.aliases import AliasResolver


class TestAliasResolver:
    def test_plain_path_unchanged(self) -> None:
        assert AliasResolver()("config/console.py") == "config/console.py"

    def test_alias_with_rest(self) -> None:
        resolve = AliasResolver({"@app": "/srv/app"})
        assert resolve("@app/config/console.py") == os.path.join("/srv/app", "config/console.py")

    def test_bare_alias(self) -> None:
        resolve = AliasResolver({"@app": "/srv/app"})
        assert resolve("@app") == "/srv/app"

    def test_key_without_at_sign(self) -> None:
        resolve = AliasResolver({"runtime": "/tmp/run"})
        assert resolve("@runtime/x.json") == os.path.join("/tmp/run", "x.json")
        assert "@runtime" in resolve

    def test_trailing_slash_stripped(self) -> None:
        resolve = AliasResolver({"@app": "/srv/app/"})
        assert resolve("@app/a.py") == os.path.join("/srv/app", "a.py")

    def test_unknown_alias(self) -> None:
        assert AliasResolver({"@app": "/srv/app"})("@vendor/a.py") is None

    def test_cwd_alias(self, tmp_path, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)
        assert AliasResolver()("@cwd/a.toml") == os.path.join(os.getcwd(), "a.toml")

    def test_cwd_alias_can_be_overridden(self) -> None:
        assert AliasResolver({"@cwd": "/elsewhere"})("@cwd/a") == os.path.join("/elsewhere", "a")
