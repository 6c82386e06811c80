"""Tests for console rendering.

Covers format resolution, colour switches, the stdout/stderr split, quiet
and verbose rules, body rendering per format, and the output file.
"""

from __future__ import annotations

import json

import pytest

from yafetch import output as output_module
from yafetch.output import OutputFormat, OutputManager, get_output, reset_output, set_output


@pytest.fixture()
def non_tty(monkeypatch):
    """Pretend stdout is not a terminal."""
    monkeypatch.setattr("yafetch.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    """Pretend stdout is a terminal with colour allowed."""
    monkeypatch.setattr("yafetch.output._is_tty", lambda: True)
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.delenv("TERM", raising=False)


def _plain(**kwargs) -> OutputManager:
    return OutputManager(format=OutputFormat.PLAIN, no_color=True, **kwargs)


# ------------------------------------------------------------------ #
# Format resolution
# ------------------------------------------------------------------ #


class TestFormatResolution:
    def test_auto_without_tty_is_plain(self, non_tty) -> None:
        assert OutputManager().format == OutputFormat.PLAIN

    def test_auto_on_tty_is_rich(self, tty) -> None:
        assert OutputManager().format == OutputFormat.RICH

    def test_auto_on_tty_without_color_is_plain(self, tty) -> None:
        assert OutputManager(no_color=True).format == OutputFormat.PLAIN

    def test_no_color_env(self, tty, monkeypatch) -> None:
        monkeypatch.setenv("NO_COLOR", "")
        assert OutputManager().format == OutputFormat.PLAIN

    def test_dumb_terminal(self, tty, monkeypatch) -> None:
        monkeypatch.setenv("TERM", "dumb")
        assert OutputManager().format == OutputFormat.PLAIN

    def test_explicit_format_wins(self, non_tty) -> None:
        assert OutputManager(format=OutputFormat.JSON).format == OutputFormat.JSON


# ------------------------------------------------------------------ #
# Body rendering
# ------------------------------------------------------------------ #


class TestBody:
    def test_plain_text_goes_to_stdout(self, capsys) -> None:
        _plain().body("hello")
        captured = capsys.readouterr()
        assert captured.out == "hello\n"
        assert captured.err == ""

    def test_plain_dict_is_compact_json(self, capsys) -> None:
        _plain().body({"a": 1})
        assert capsys.readouterr().out == '{"a": 1}\n'

    def test_bytes_are_decoded(self, capsys) -> None:
        _plain().body(b"caf\xc3\xa9")
        assert capsys.readouterr().out == "café\n"

    def test_json_format_pretty_prints(self, capsys) -> None:
        OutputManager(format=OutputFormat.JSON, no_color=True).body('{"a":1,"b":[1,2]}')
        assert json.loads(capsys.readouterr().out) == {"a": 1, "b": [1, 2]}

    def test_json_format_passes_non_json_through(self, capsys) -> None:
        OutputManager(format=OutputFormat.JSON, no_color=True).body("not json")
        assert capsys.readouterr().out == "not json\n"

    def test_rich_text_body(self, capsys) -> None:
        OutputManager(format=OutputFormat.RICH, no_color=True).body("[bold]raw[/bold]")
        assert "[bold]raw[/bold]" in capsys.readouterr().out

    def test_rich_json_body(self, capsys) -> None:
        OutputManager(format=OutputFormat.RICH, no_color=True).body(
            '{"key": "value"}', "application/json"
        )
        out = capsys.readouterr().out
        assert '"key"' in out
        assert '"value"' in out

    def test_output_file(self, tmp_path, capsys) -> None:
        target = tmp_path / "body.json"
        _plain(output_file=str(target)).body({"a": 1})

        assert json.loads(target.read_text()) == {"a": 1}
        assert target.read_text().endswith("\n")
        assert capsys.readouterr().out == ""


# ------------------------------------------------------------------ #
# Status line, headers and diagnostics
# ------------------------------------------------------------------ #


class TestDiagnostics:
    def test_status_line_on_stderr(self, capsys) -> None:
        _plain().status_line(404, "Not Found")
        captured = capsys.readouterr()
        assert captured.err == "HTTP 404 Not Found\n"
        assert captured.out == ""

    def test_status_line_without_reason(self, capsys) -> None:
        _plain().status_line(299)
        assert capsys.readouterr().err == "HTTP 299\n"

    def test_headers_only_when_included(self, capsys) -> None:
        _plain().headers([("a", "1")])
        assert capsys.readouterr().err == ""

        _plain(include_headers=True).headers([("a", "1"), ("b", "2")])
        assert capsys.readouterr().err == "a: 1\nb: 2\n"

    def test_quiet_hides_status_headers_and_info(self, capsys) -> None:
        manager = _plain(quiet=True, include_headers=True)
        manager.status_line(200, "OK")
        manager.headers([("a", "1")])
        manager.info("note")
        assert capsys.readouterr().err == ""

    def test_quiet_keeps_warnings_and_errors(self, capsys) -> None:
        manager = _plain(quiet=True)
        manager.warning("careful")
        manager.error("broken")
        assert capsys.readouterr().err == "Warning: careful\nError: broken\n"

    def test_debug_requires_verbose(self, capsys) -> None:
        _plain().debug("hidden")
        _plain(verbose=True).debug("shown")
        assert capsys.readouterr().err == "[debug] shown\n"

    def test_markup_in_messages_is_not_interpreted(self, capsys, tty) -> None:
        OutputManager(format=OutputFormat.PLAIN, verbose=True).debug("[bold]x[/bold]")
        assert "[bold]x[/bold]" in capsys.readouterr().err


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #


class TestGlobalInstance:
    def test_get_output_creates_default(self) -> None:
        reset_output()
        assert isinstance(get_output(), OutputManager)
        assert get_output() is get_output()

    def test_set_and_reset(self) -> None:
        manager = _plain()
        set_output(manager)
        assert get_output() is manager
        reset_output()
        assert get_output() is not manager

    def test_module_helpers_forward(self, capsys) -> None:
        set_output(_plain(include_headers=True))
        output_module.status_line(200, "OK")
        output_module.headers([("k", "v")])
        output_module.body("payload")
        output_module.info("info")
        captured = capsys.readouterr()
        assert captured.out == "payload\n"
        assert captured.err == "HTTP 200 OK\nk: v\ninfo\n"
