"""Tests for the output formatting system.

Covers:
- OutputFormat resolution (auto -> rich/plain based on TTY)
- NO_COLOR / TERM=dumb color disabling
- stdout vs stderr discipline
- Quiet and verbose modes
- print_json and print_table in all three modes
- Library log routing via configure_logging
- Global instance management
"""

from __future__ import annotations

import json
import logging

import pytest

from mcpgen import output as output_module
from mcpgen.output import (
    OutputFormat,
    OutputManager,
    _should_disable_color,
    configure_logging,
    get_output,
    reset_output,
    set_output,
)


# ------------------------------------------------------------------ #
# Fixtures
# ------------------------------------------------------------------ #


@pytest.fixture()
def non_tty(monkeypatch):
    """Patch stdout.isatty() to return False."""
    monkeypatch.setattr("mcpgen.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    """Patch stdout.isatty() to return True."""
    monkeypatch.setattr("mcpgen.output._is_tty", lambda: True)


@pytest.fixture()
def color_env(monkeypatch):
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.delenv("TERM", raising=False)


# ------------------------------------------------------------------ #
# OutputFormat resolution
# ------------------------------------------------------------------ #


class TestOutputFormatResolution:
    """Test that AUTO format resolves correctly based on environment."""

    def test_auto_resolves_to_plain_when_not_tty(self, non_tty):
        assert OutputManager(format=OutputFormat.AUTO).format == OutputFormat.PLAIN

    def test_auto_resolves_to_rich_when_tty(self, tty, color_env):
        assert OutputManager(format=OutputFormat.AUTO).format == OutputFormat.RICH

    def test_auto_resolves_to_plain_when_tty_but_no_color(self, tty, color_env):
        assert OutputManager(format=OutputFormat.AUTO, no_color=True).format == OutputFormat.PLAIN

    def test_explicit_json_stays_json(self, tty, color_env):
        assert OutputManager(format=OutputFormat.JSON).format == OutputFormat.JSON


class TestColorDisabling:
    """Test that NO_COLOR and TERM=dumb are respected."""

    def test_no_color_env_any_value(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb_disables_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_normal_term_keeps_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert _should_disable_color() is False

    def test_env_sets_no_color_property(self, monkeypatch, non_tty):
        monkeypatch.setenv("NO_COLOR", "1")
        assert OutputManager().no_color is True


# ------------------------------------------------------------------ #
# stdout vs stderr discipline
# ------------------------------------------------------------------ #


class TestStdoutStderrDiscipline:
    """Data goes to stdout, diagnostics go to stderr."""

    def test_print_data_goes_to_stdout(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.print_data("hello world")
        captured = capfd.readouterr()
        assert captured.out == "hello world\n"
        assert captured.err == ""

    @pytest.mark.parametrize("method", ["info", "success", "warning", "error", "suggest"])
    def test_diagnostics_go_to_stderr(self, capfd, non_tty, method):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        getattr(mgr, method)("diagnostic text")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "diagnostic text" in captured.err

    def test_prefixes_without_color(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.warning("w")
        mgr.error("e")
        mgr.suggest("s")
        err = capfd.readouterr().err
        assert "Warning: w" in err
        assert "Error: e" in err
        assert "→ s" in err

    def test_rich_error_goes_to_stderr(self, capfd, non_tty, color_env):
        mgr = OutputManager(format=OutputFormat.RICH)
        mgr.error("bad thing")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "bad thing" in captured.err


class TestQuietMode:
    """--quiet suppresses info/success/suggest but not warning/error."""

    @pytest.mark.parametrize("method", ["info", "success", "suggest"])
    def test_quiet_suppresses(self, capfd, non_tty, method):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        getattr(mgr, method)("should not appear")
        assert capfd.readouterr().err == ""

    @pytest.mark.parametrize("method", ["warning", "error"])
    def test_quiet_keeps(self, capfd, non_tty, method):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        getattr(mgr, method)("important")
        assert "important" in capfd.readouterr().err

    def test_quiet_does_not_suppress_stdout_data(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        mgr.print_data("important data")
        assert "important data" in capfd.readouterr().out


class TestVerboseMode:
    def test_debug_hidden_by_default(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).debug("hidden")
        assert capfd.readouterr().err == ""

    def test_debug_shown_with_verbose(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True, verbose=True).debug("details")
        assert "[debug] details" in capfd.readouterr().err


# ------------------------------------------------------------------ #
# Data output
# ------------------------------------------------------------------ #


class TestPrintJson:
    def test_indented_and_unicode(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON, no_color=True)
        mgr.print_json([{"name": "café"}])
        out = capfd.readouterr().out
        assert json.loads(out) == [{"name": "café"}]
        assert "café" in out
        assert "\n  " in out


class TestPrintTable:
    """print_table in all three output modes."""

    HEADERS = ["name", "method", "path"]
    ROWS = [["listPets", "GET", "/pets"], ["createPet", "POST", "/pets"]]

    def test_json_mode(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON, no_color=True).print_table(self.HEADERS, self.ROWS)
        parsed = json.loads(capfd.readouterr().out)
        assert parsed[1] == {"name": "createPet", "method": "POST", "path": "/pets"}

    def test_plain_mode(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).print_table(
            self.HEADERS, self.ROWS, title="ignored"
        )
        lines = capfd.readouterr().out.strip().split("\n")
        assert lines == ["name\tmethod\tpath", "listPets\tGET\t/pets", "createPet\tPOST\t/pets"]

    def test_rich_mode(self, capfd, non_tty):
        OutputManager(format=OutputFormat.RICH, no_color=True).print_table(
            self.HEADERS, self.ROWS, title="2 tools"
        )
        out = capfd.readouterr().out
        for text in ("2 tools", "name", "listPets", "/pets"):
            assert text in out

    def test_empty_rows_json(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON, no_color=True).print_table(self.HEADERS, [])
        assert json.loads(capfd.readouterr().out) == []


# ------------------------------------------------------------------ #
# Logging
# ------------------------------------------------------------------ #


class TestConfigureLogging:
    """Library log records are routed to stderr through the output manager."""

    def test_warnings_shown_by_default(self, capfd, non_tty):
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True))
        configure_logging(verbose=False)
        log = logging.getLogger("mcpgen.compiler.tools")
        log.warning("name collision")
        log.debug("hidden detail")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "WARNING mcpgen.compiler.tools: name collision" in captured.err
        assert "hidden detail" not in captured.err

    def test_verbose_shows_debug(self, capfd, non_tty):
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True))
        configure_logging(verbose=True)
        logging.getLogger("mcpgen.parser").debug("walking paths")
        assert "walking paths" in capfd.readouterr().err

    def test_reconfigure_replaces_handler(self, non_tty):
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True))
        configure_logging()
        configure_logging(verbose=True)
        logger = logging.getLogger("mcpgen")
        assert len(logger.handlers) == 1
        assert logger.level == logging.DEBUG
        assert logger.propagate is False

    def test_rich_handler_with_color(self, non_tty, color_env):
        from rich.logging import RichHandler

        set_output(OutputManager(format=OutputFormat.PLAIN))
        configure_logging()
        assert isinstance(logging.getLogger("mcpgen").handlers[0], RichHandler)


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #


class TestGlobalInstance:
    def test_get_output_creates_default(self):
        reset_output()
        mgr = get_output()
        assert isinstance(mgr, OutputManager)
        assert get_output() is mgr

    def test_set_output_replaces(self):
        custom = OutputManager(format=OutputFormat.JSON)
        set_output(custom)
        assert get_output() is custom

    def test_convenience_functions_delegate(self, capfd, non_tty):
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True))
        output_module.print_data("data line")
        output_module.info("info line")
        output_module.warning("careful")
        captured = capfd.readouterr()
        assert captured.out == "data line\n"
        assert "info line" in captured.err
        assert "Warning: careful" in captured.err
