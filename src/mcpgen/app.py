"""Typer application and CLI entry point for mcpgen.

Commands:

* ``mcpgen generate`` -- compile a document and write ``server.py``.
* ``mcpgen tools`` -- compile a document and list the tools it would yield.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. Known failures (:class:`~mcpgen.exceptions.McpgenError`)
exit with their own code; anything else is written to a crash log under the
data directory.

See Also:
    :mod:`mcpgen.config`: Option resolution for ``generate``.
    :mod:`mcpgen.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, NoReturn, Optional

import typer

from mcpgen import __version__
from mcpgen.exceptions import InvalidUsageError, McpgenError
from mcpgen.exit_codes import EXIT_GENERIC_FAILURE
from mcpgen.models import HeaderMode, HTTPMethod, QuoteStyle, Transport


app = typer.Typer(
    name="mcpgen",
    help="Generate MCP servers from OpenAPI 3.x documents.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"mcpgen {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~mcpgen.output.OutputManager` and the
    library log handler, and keeps ``verbose`` in ``ctx.obj``.
    """
    from mcpgen.output import OutputFormat, OutputManager, configure_logging, set_output

    output = OutputManager(
        format=OutputFormat.JSON if json_output else OutputFormat.AUTO,
        no_color=no_color,
        quiet=quiet,
        verbose=verbose,
    )
    set_output(output)
    configure_logging(verbose)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #


@app.command("generate")
def generate_command(
    source: str = typer.Option(
        ..., "--input", "-i", help="OpenAPI document: file path, URL, or '-' for stdin."
    ),
    out: Path = typer.Option(..., "--out", "-o", help="Output directory for server.py."),
    name: Optional[str] = typer.Option(
        None, "--name", "-n", help="Server name (default: from info.title)."
    ),
    transport: Optional[Transport] = typer.Option(
        None, "--transport", case_sensitive=False, help="Transport bootstrap."
    ),
    header_mode: Optional[HeaderMode] = typer.Option(
        None,
        "--header-mode",
        case_sensitive=False,
        help="heuristic: guess headers from argument names; declared: use 'in: header'.",
    ),
    dedupe_names: Optional[bool] = typer.Option(
        None, "--dedupe-names/--no-dedupe-names", help="Suffix colliding tool names."
    ),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Default API base URL baked into the server."
    ),
    indent: Optional[int] = typer.Option(None, "--indent", help="Indent width: 2, 4 or 8."),
    quote: Optional[QuoteStyle] = typer.Option(
        None, "--quote", case_sensitive=False, help="Quote style for string literals."
    ),
    methods: Optional[str] = typer.Option(
        None, "--methods", help="Comma-separated HTTP verbs to compile (default: get,post,put,patch,delete)."
    ),
    port: Optional[int] = typer.Option(None, "--port", help="Port for the http transport."),
) -> None:
    """Compile an OpenAPI document into a standalone MCP server module.

    Example:
        ::

            mcpgen generate --input petstore.yaml --out ./petstore-mcp
            mcpgen generate -i https://example.com/openapi.json -o ./out --transport http
    """
    from mcpgen.config import resolve_options
    from mcpgen.output import info, success, suggest, warning
    from mcpgen.pipeline import generate_server

    try:
        _check_usage(indent, methods)
        options = resolve_options(
            {
                "transport": transport,
                "header_mode": header_mode,
                "dedupe_names": dedupe_names,
                "default_base_url": base_url,
                "indent_size": indent,
                "quote_style": quote,
                "methods": methods,
                "http_port": port,
            }
        )
        info(f"Loading {source}")
        result = generate_server(source, out, name=name, options=options)
    except McpgenError as exc:
        _fail(exc)

    for problem in result.warnings:
        warning(problem)
    if not result.tools:
        warning("No operations found; the server exposes no tools.")

    success(f"Generated {result.name} with {len(result.tools)} tools: {result.out_path}")
    suggest(f"Run it with: python {result.out_path}")


@app.command("tools")
def tools_command(
    source: str = typer.Option(
        ..., "--input", "-i", help="OpenAPI document: file path, URL, or '-' for stdin."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print full descriptors as JSON."),
    dedupe_names: Optional[bool] = typer.Option(
        None, "--dedupe-names/--no-dedupe-names", help="Suffix colliding tool names."
    ),
) -> None:
    """List the tools a document compiles to, without writing anything.

    Example:
        ::

            mcpgen tools --input petstore.yaml
            mcpgen tools --input petstore.yaml --json | jq '.[].name'
    """
    from mcpgen.config import resolve_options
    from mcpgen.output import get_output, print_json, print_table, warning
    from mcpgen.pipeline import load_and_compile

    try:
        options = resolve_options({"dedupe_names": dedupe_names})
        _document, tools, warnings = load_and_compile(source, options)
    except McpgenError as exc:
        _fail(exc)

    for problem in warnings:
        warning(problem)

    if as_json:
        print_json([tool.model_dump(mode="json", by_alias=True, exclude_none=True) for tool in tools])
        return

    rows = [[t.name, t.http_method, t.path_pattern, t.title] for t in tools]
    title = None if get_output().is_quiet else f"{len(tools)} tools"
    print_table(["name", "method", "path", "title"], rows, title=title)


def _check_usage(indent: Optional[int], methods: Optional[str]) -> None:
    if indent is not None and indent not in (2, 4, 8):
        raise InvalidUsageError(f"--indent must be 2, 4 or 8 (got {indent})")
    if methods is not None:
        known = {m.value for m in HTTPMethod}
        requested = [m.strip().lower() for m in methods.split(",") if m.strip()]
        unknown = [m for m in requested if m not in known]
        if unknown or not requested:
            raise InvalidUsageError(f"--methods: unknown or empty verb list: {methods!r}")


def _fail(exc: McpgenError) -> NoReturn:
    from mcpgen.output import error

    error(str(exc))
    raise typer.Exit(code=exc.exit_code) from None


# ------------------------------------------------------------------ #
# Entry point
# ------------------------------------------------------------------ #


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from mcpgen.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(
        "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
        encoding="utf-8",
    )
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``mcpgen`` console script.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from mcpgen.output import error

        if isinstance(exc, McpgenError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
