"""Tests for perch.app — dispatch, result normalization, error translation."""

import io
import json
import logging

import pytest

from perch.app import Application, normalize_result
from perch.config import ConsoleConfig
from perch.console.request import Request
from perch.console.response import Response
from perch.console.streams import Streams
from perch.context import get_config, get_requested_route
from perch.controller import Controller
from perch.errors import ConsoleError, InvalidRouteError, UnknownCommandError
from perch.routing.resolver import Resolved, Unroutable
from perch.routing.route import ParamSet, Route


def _streams() -> Streams:
    return Streams(io.StringIO(), io.StringIO(), io.StringIO())


def _app(config=None, **kwargs) -> Application:
    kwargs.setdefault("streams", _streams())
    return Application(config, **kwargs)


class RecordingResolver:
    """Resolver double that records calls and replays a fixed outcome."""

    def __init__(self, outcome) -> None:
        self.outcome = outcome
        self.calls: list[tuple[Route, ParamSet]] = []

    def resolve(self, route: Route, params: ParamSet):
        self.calls.append((route, params))
        return self.outcome


class TestApplicationSetup:
    def test_default_config(self) -> None:
        app = _app()
        assert app.config == ConsoleConfig()

    def test_accepts_console_config(self) -> None:
        app = _app(ConsoleConfig(name="acme", default_route="status"))
        assert app.config.name == "acme"
        assert app.config.default_route == "status"

    def test_help_registered(self) -> None:
        assert "help" in _app().module.controller_map

    def test_command_registration(self) -> None:
        app = _app()

        @app.command("greet")
        def greet() -> int:
            return 0

        assert "greet" in app.module.controller_map

    def test_controller_registration(self) -> None:
        app = _app()

        @app.controller("users")
        class UsersController(Controller):
            def action_index(self) -> int:
                return 0

        assert app.module.controller_map["users"] is UsersController


class TestDispatch:
    def test_greet_scenario(self) -> None:
        app = _app()
        seen = {}

        @app.command("greet")
        def greet(name: str) -> int:
            seen["name"] = name
            return 0

        assert app.dispatch(["greet", "--name=Ada"]) == 0
        assert seen == {"name": "Ada"}

    def test_empty_argv_uses_default_route(self) -> None:
        resolver = RecordingResolver(Resolved(0))
        app = _app(resolver=resolver)

        app.dispatch([])

        route, params = resolver.calls[0]
        assert route == Route.parse("help")
        assert params.is_empty

    def test_configured_default_route(self) -> None:
        resolver = RecordingResolver(Resolved(0))
        app = _app({"default_route": "status"}, resolver=resolver)

        app.dispatch(["--verbose"])

        route, params = resolver.calls[0]
        assert route.path == "status"
        assert params.options["verbose"] is True

    def test_integer_returned_unchanged(self) -> None:
        app = _app(resolver=RecordingResolver(Resolved(3)))
        assert app.dispatch(["anything"]) == 3

    def test_none_is_zero(self) -> None:
        app = _app()

        @app.command("noop")
        def noop() -> None:
            pass

        assert app.dispatch(["noop"]) == 0

    def test_response_returned_unchanged(self) -> None:
        response = Response(exit_status=7)
        app = _app(resolver=RecordingResolver(Resolved(response)))
        assert app.dispatch(["anything"]) is response

    def test_unknown_command_translated(self) -> None:
        cause = InvalidRouteError("deploy")
        app = _app(resolver=RecordingResolver(Unroutable(cause)))

        with pytest.raises(UnknownCommandError) as exc_info:
            app.dispatch(["deploy", "--env=prod"])

        err = exc_info.value
        assert err.command == "deploy"
        assert err.cause is cause
        assert err.__cause__ is cause
        assert str(err) == 'Unknown command "deploy".'

    def test_unknown_command_keeps_route_as_typed(self) -> None:
        app = _app()

        with pytest.raises(UnknownCommandError) as exc_info:
            app.dispatch(["/deploy/"])

        assert exc_info.value.command == "/deploy/"
        assert str(exc_info.value) == 'Unknown command "/deploy/".'

    def test_unknown_nested_route_keeps_input(self) -> None:
        app = _app()

        with pytest.raises(UnknownCommandError) as exc_info:
            app.dispatch(["help/missing-action"])

        assert exc_info.value.command == "help/missing-action"
        assert isinstance(exc_info.value.cause, InvalidRouteError)

    def test_unknown_command_suggestions(self) -> None:
        app = _app()

        @app.command("greet")
        def greet() -> int:
            return 0

        with pytest.raises(UnknownCommandError) as exc_info:
            app.dispatch(["gret"])

        assert "greet" in exc_info.value.suggestions

    def test_other_errors_propagate_unchanged(self) -> None:
        app = _app()

        @app.command("boom")
        def boom() -> int:
            raise RuntimeError("kaboom")

        with pytest.raises(RuntimeError, match="kaboom"):
            app.dispatch(["boom"])

    def test_argument_errors_are_not_unknown_command(self) -> None:
        app = _app()

        @app.command("greet")
        def greet(name: str) -> int:
            return 0

        with pytest.raises(ConsoleError) as exc_info:
            app.dispatch(["greet"])

        assert not isinstance(exc_info.value, UnknownCommandError)

    def test_missing_config_file_exits_before_dispatch(self) -> None:
        streams = _streams()
        resolver = RecordingResolver(Resolved(0))
        app = Application(resolver=resolver, streams=streams)

        with pytest.raises(SystemExit) as exc_info:
            app.dispatch(["--appconfig=/missing/path.py"])

        assert exc_info.value.code == 1
        assert streams.stderr.getvalue() == (
            "The configuration file does not exist: /missing/path.py\n"
        )
        assert resolver.calls == []

    def test_config_file_replaces_defaults(self, tmp_path) -> None:
        path = tmp_path / "console.json"
        path.write_text(json.dumps({"name": "from-file"}))
        resolver = RecordingResolver(Resolved(0))
        app = _app({"name": "default", "default_route": "status"}, resolver=resolver)

        app.dispatch([f"--appconfig={path}"])

        assert app.config.name == "from-file"
        # not merged: default_route falls back to the built-in default
        assert app.config.default_route == "help"
        assert resolver.calls[0][0].path == "help"

    def test_requested_route_recorded(self) -> None:
        app = _app()
        seen = {}

        @app.command("where")
        def where() -> int:
            seen["route"] = get_requested_route()
            seen["config"] = get_config()
            return 0

        app.dispatch(["where"])

        assert seen["route"] == Route.parse("where")
        assert seen["config"] is app.config
        assert app.requested_route == Route.parse("where")

    def test_context_reset_after_dispatch(self) -> None:
        app = _app(resolver=RecordingResolver(Resolved(0)))
        app.dispatch(["anything"])

        with pytest.raises(LookupError):
            get_requested_route()

    def test_route_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        app = _app({"log_level": "debug"}, resolver=RecordingResolver(Resolved(0)))

        with caplog.at_level(logging.DEBUG, logger="perch"):
            app.dispatch(["status"])

        assert any("status" in r.getMessage() for r in caplog.records)

    def test_rejects_unknown_resolution(self) -> None:
        app = _app(resolver=RecordingResolver("not-a-resolution"))
        with pytest.raises(TypeError, match="Resolved or Unroutable"):
            app.dispatch(["anything"])


class TestRunAction:
    def test_string_route(self) -> None:
        resolver = RecordingResolver(Resolved(None))
        app = _app(resolver=resolver)

        assert app.run_action("controller/test", ParamSet.build({"option": "value"}, ["a"])) == 0

        route, params = resolver.calls[0]
        assert route.segments == ("controller", "test")
        assert params.arguments == ("a",)

    def test_empty_route_uses_default(self) -> None:
        resolver = RecordingResolver(Resolved(0))
        _app(resolver=resolver).run_action("")
        assert resolver.calls[0][0].path == "help"


class TestHandleRequest:
    def test_integer_written_onto_response(self) -> None:
        app = _app(resolver=RecordingResolver(Resolved(4)))
        response = app.handle_request(Request(["anything"]))
        assert isinstance(response, Response)
        assert response.exit_status == 4

    def test_response_passthrough(self) -> None:
        returned = Response(exit_status=2)
        app = _app(resolver=RecordingResolver(Resolved(returned)))
        assert app.handle_request(Request(["anything"])) is returned


class TestRun:
    def test_exit_status(self) -> None:
        app = _app(resolver=RecordingResolver(Resolved(5)))
        assert app.run(["anything"]) == 5

    def test_response_exit_status(self) -> None:
        app = _app(resolver=RecordingResolver(Resolved(Response(exit_status=9))))
        assert app.run(["anything"]) == 9

    def test_unknown_command_rendered(self) -> None:
        streams = _streams()
        app = Application(streams=streams)

        assert app.run(["nope"]) == 1
        assert 'Error: Unknown command "nope".' in streams.stderr.getvalue()

    def test_console_error_exit_code(self) -> None:
        streams = _streams()
        app = Application(streams=streams)

        @app.command("fail")
        def fail() -> int:
            raise ConsoleError("disk full", exit_code=3)

        assert app.run(["fail"]) == 3
        assert "Error: disk full" in streams.stderr.getvalue()

    def test_unexpected_exception(self) -> None:
        streams = _streams()
        app = Application(streams=streams)

        @app.command("boom")
        def boom() -> int:
            raise RuntimeError("kaboom")

        assert app.run(["boom"]) == 1
        assert "Exception (RuntimeError): kaboom" in streams.stderr.getvalue()

    def test_no_traceback_without_debug(self) -> None:
        streams = _streams()
        app = Application(streams=streams)

        @app.command("boom")
        def boom() -> int:
            raise RuntimeError("kaboom")

        assert app.run(["boom"]) == 1
        stderr = streams.stderr.getvalue()
        assert "Traceback" not in stderr
        assert "ERROR perch.console: Unhandled exception while running 'boom'" in stderr

    def test_traceback_logged_in_debug(self) -> None:
        streams = _streams()
        app = Application({"debug": True}, streams=streams)

        @app.command("boom")
        def boom() -> int:
            raise RuntimeError("kaboom")

        with pytest.raises(RuntimeError):
            app.run(["boom"])
        assert "Traceback (most recent call last)" in streams.stderr.getvalue()

    def test_unexpected_exception_reraised_in_debug(self) -> None:
        app = _app({"debug": True})

        @app.command("boom")
        def boom() -> int:
            raise RuntimeError("kaboom")

        with pytest.raises(RuntimeError):
            app.run(["boom"])

    def test_uses_sys_argv(self, monkeypatch: pytest.MonkeyPatch) -> None:
        resolver = RecordingResolver(Resolved(0))
        app = _app(resolver=resolver)
        monkeypatch.setattr("sys.argv", ["prog", "status", "--all"])

        app.run()

        route, params = resolver.calls[0]
        assert route.path == "status"
        assert params.options["all"] is True


class TestNormalizeResult:
    def test_int(self) -> None:
        assert normalize_result(0) == 0
        assert normalize_result(2) == 2

    def test_none(self) -> None:
        assert normalize_result(None) == 0

    def test_bool(self) -> None:
        assert normalize_result(True) == 1
        assert normalize_result(False) == 0

    def test_numeric_string(self) -> None:
        assert normalize_result("3") == 3

    def test_float_truncated(self) -> None:
        assert normalize_result(2.9) == 2

    def test_response(self) -> None:
        response = Response()
        assert normalize_result(response) is response

    def test_not_an_exit_code(self) -> None:
        with pytest.raises(ConsoleError, match="not an exit code"):
            normalize_result("done")
