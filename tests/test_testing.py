"""Tests for perch.testing — CommandTester."""

from perch.app import Application
from perch.console.streams import Streams
from perch.testing import CommandResult, CommandTester


class TestCommandTester:
    def test_captures_stdout(self) -> None:
        app = Application()

        @app.command("greet")
        def greet(streams: Streams, name: str = "world") -> int:
            streams.stdout.write(f"Hello, {name}!\n")
            return 0

        result = CommandTester(app).run(["greet", "--name=Ada"])
        assert result == CommandResult(exit_code=0, stdout="Hello, Ada!\n", stderr="")

    def test_stdin(self) -> None:
        app = Application()

        @app.command("echo")
        def echo(streams: Streams) -> int:
            streams.stdout.write(streams.stdin.read().upper())
            return 0

        result = CommandTester(app).run(["echo"], stdin="quiet")
        assert result.stdout == "QUIET"

    def test_system_exit_becomes_exit_code(self) -> None:
        result = CommandTester(Application()).run(["--appconfig=/nowhere/console.toml"])
        assert result.exit_code == 1
        assert "The configuration file does not exist: /nowhere/console.toml" in result.stderr

    def test_restores_streams(self) -> None:
        app = Application()
        CommandTester(app).run(["help/list"])
        assert app._streams is None
