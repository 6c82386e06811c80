"""Typer application and entry point for the ``yafetch`` console script.

``yafetch URL`` sends one request through the same pipeline as
:func:`yafetch.send`: the configuration from :func:`~yafetch.config.load_config`
is applied to the global options, entry-point plugins are discovered, and the
command-line flags become per-call options (including an optional retry
plugin). The status line goes to stderr and the body to stdout.

:func:`main` is the console-script entry point declared in
``pyproject.toml``.
"""

from __future__ import annotations

import asyncio
import json
import logging
import signal
import sys
from typing import Any, Optional

import typer

from yafetch import __version__
from yafetch.exceptions import InvalidUsageError, YafetchError
from yafetch.models import HTTPMethod

app = typer.Typer(
    name="yafetch",
    help="Send an HTTP request through the yafetch plugin pipeline.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


class _OutputHandler(logging.Handler):
    """Forward ``yafetch`` log records to the global output manager."""

    def emit(self, record: logging.LogRecord) -> None:
        from yafetch import output

        message = self.format(record)
        if record.levelno >= logging.ERROR:
            output.error(message)
        elif record.levelno >= logging.WARNING:
            output.warning(message)
        elif record.levelno >= logging.INFO:
            output.info(message)
        else:
            output.debug(message)


def _configure_logging(verbose: bool, quiet: bool) -> None:
    logger = logging.getLogger("yafetch")
    for handler in list(logger.handlers):
        if isinstance(handler, _OutputHandler):
            logger.removeHandler(handler)
    logger.addHandler(_OutputHandler())
    if verbose:
        logger.setLevel(logging.DEBUG)
    elif quiet:
        logger.setLevel(logging.ERROR)
    else:
        logger.setLevel(logging.WARNING)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"yafetch {__version__}")
        raise typer.Exit()


def _parse_headers(values: list[str]) -> dict[str, str]:
    """Parse ``Name: value`` strings into a dict."""
    headers: dict[str, str] = {}
    for raw in values:
        name, sep, value = raw.partition(":")
        if not sep or not name.strip():
            raise InvalidUsageError(f"Invalid header '{raw}'. Expected 'Name: value'.")
        headers[name.strip()] = value.strip()
    return headers


def _parse_body(body: Optional[str]) -> Any:
    """Parse *body* as JSON if possible, returning the raw string on failure."""
    if body is None:
        return None
    try:
        return json.loads(body)
    except (json.JSONDecodeError, TypeError):
        return body


def _build_options(
    method: Optional[HTTPMethod],
    headers: list[str],
    data: Optional[str],
    base_url: Optional[str],
    retries: Optional[int],
    retry_delay: Optional[float],
    retry_mode: str,
    verbose: bool,
) -> dict[str, Any]:
    from yafetch.plugins.log import RequestLogPlugin, ResponseLogPlugin
    from yafetch.plugins.retry import create_retry_plugin

    options: dict[str, Any] = {"headers": _parse_headers(headers)}
    if method is not None:
        options["method"] = method.value
    if data is not None:
        options["body"] = _parse_body(data)
    if base_url:
        options["base_url"] = base_url

    plugins: dict[str, list[Any]] = {"before": [], "wrap": [], "after": []}
    if retries is not None:
        retry_options: dict[str, Any] = {"max_retries": retries, "mode": retry_mode}
        if retry_delay is not None:
            retry_options["delay"] = retry_delay
        plugins["wrap"].append(create_retry_plugin(retry_options))
    if verbose:
        plugins["before"].append(RequestLogPlugin(level=logging.DEBUG))
        plugins["after"].append(ResponseLogPlugin(level=logging.DEBUG))
    options["plugins"] = plugins
    return options


def _render(result: Any) -> None:
    from yafetch import output
    from yafetch.client.response import Response

    if isinstance(result, Response):
        output.status_line(result.status, result.status_text or "")
        output.headers(result.headers.items())
        if result.body is not None:
            output.body(result.raw.text, result.headers.get("content-type", "text/plain"))
    elif result is not None:
        output.body(result, "application/json")


@app.command()
def fetch(
    url: str = typer.Argument(..., help="Absolute URL, or a path starting with / plus --base-url."),
    method: Optional[HTTPMethod] = typer.Option(
        None, "--method", "-X", case_sensitive=False, help="HTTP method."
    ),
    header: Optional[list[str]] = typer.Option(
        None, "--header", "-H", help="Request header as 'Name: value'. Repeatable."
    ),
    data: Optional[str] = typer.Option(
        None, "--data", "-d", help="Request body. JSON is sent as JSON, anything else as text."
    ),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="Base URL for relative paths."),
    retries: Optional[int] = typer.Option(
        None, "--retries", min=0, help="Enable the retry plugin with this many retries."
    ),
    retry_delay: Optional[float] = typer.Option(
        None, "--retry-delay", min=0, help="Seconds between retries (manual mode)."
    ),
    retry_mode: str = typer.Option(
        "header", "--retry-mode", help="Retry delay source: 'manual' or 'header'."
    ),
    return_as: Optional[str] = typer.Option(
        None, "--as", help="Decode the body as text, json, blob, formData or arrayBuffer."
    ),
    config_path: Optional[str] = typer.Option(
        None, "--config", help="JSON config file (default: ./yafetch.json)."
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    include: bool = typer.Option(
        False, "--include", "-i", help="Print response headers after the status line."
    ),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
    output_file: Optional[str] = typer.Option(None, "-o", "--output", help="Write the body to a file."),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit."
    ),
) -> None:
    """Send a request and print the response body."""
    from yafetch.client.send import send
    from yafetch.config import apply_config, load_config
    from yafetch.output import OutputFormat, OutputManager, error, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(
        OutputManager(
            format=fmt,
            no_color=no_color,
            quiet=quiet,
            verbose=verbose,
            output_file=output_file,
            include_headers=include,
        )
    )
    _configure_logging(verbose, quiet)

    try:
        if retry_mode not in ("manual", "header"):
            raise InvalidUsageError(f"Invalid --retry-mode '{retry_mode}'. Use 'manual' or 'header'.")
        options = _build_options(
            method, header or [], data, base_url, retries, retry_delay, retry_mode, verbose
        )
        apply_config(load_config(config_path))
        result = asyncio.run(send(url, options, return_as))  # type: ignore[arg-type]
    except YafetchError as exc:
        error(str(exc))
        raise typer.Exit(exc.exit_code)

    _render(result)


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """Console-script entry point."""
    _setup_signal_handlers()
    app()
