"""Console rendering for the ``yafetch`` script.

Only the response body is written to stdout, so ``yafetch URL > out.json``
captures exactly the payload. The status line, response headers (with
``--include``) and log records go to stderr.

Colour is used when stdout is a terminal, unless ``NO_COLOR`` is set,
``TERM=dumb`` or ``--no-color`` is given. The script installs one
:class:`OutputManager` with :func:`set_output`; the module-level functions
forward to it.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Iterable, Optional

from rich.console import Console
from rich.syntax import Syntax
from rich.text import Text


class OutputFormat(str, Enum):
    """How the response body is printed.

    ``AUTO`` becomes ``RICH`` on a colour terminal and ``PLAIN`` otherwise.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


_STATUS_STYLES = {2: "green", 3: "cyan", 4: "yellow", 5: "red"}

_DIAGNOSTIC_LABELS = {
    "warning": ("Warning:", "yellow"),
    "error": ("Error:", "bold red"),
    "debug": ("[debug]", "dim"),
}


class OutputManager:
    """Writes response bodies to stdout and diagnostics to stderr.

    Args:
        format: Body format; ``AUTO`` is resolved from the terminal.
        no_color: Never emit colour or markup.
        quiet: Hide the status line, headers and info messages.
        verbose: Show debug messages.
        output_file: Save the body to this path instead of printing it.
        include_headers: Print response headers after the status line.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
        output_file: Optional[str] = None,
        include_headers: bool = False,
    ) -> None:
        self._no_color = no_color or _color_disabled_by_env()
        self._quiet = quiet
        self._verbose = verbose
        self._output_file = output_file
        self._include_headers = include_headers
        self._format = _resolve_format(format, self._no_color)

        rich_body = self._format == OutputFormat.RICH
        self._out = Console(file=sys.stdout, no_color=self._no_color, force_terminal=rich_body)
        self._err = Console(file=sys.stderr, no_color=self._no_color, stderr=True, highlight=False)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # -- response --------------------------------------------------------

    def status_line(self, status: int, reason: str = "") -> None:
        """Print ``HTTP <status> <reason>`` to stderr."""
        if self._quiet:
            return
        self._diagnostic(f"HTTP {status} {reason}".rstrip(), _STATUS_STYLES.get(status // 100))

    def headers(self, headers: Iterable[tuple[str, str]]) -> None:
        """Print ``name: value`` lines to stderr when headers were requested."""
        if self._quiet or not self._include_headers:
            return
        for name, value in headers:
            self._diagnostic(f"{name}: {value}")

    def body(self, data: Any, content_type: str = "text/plain") -> None:
        """Print a response body, or save it to the output file.

        Args:
            data: ``str``, ``bytes`` or any JSON-serialisable value.
            content_type: Response MIME type; JSON is highlighted in rich
                mode.
        """
        if isinstance(data, (bytes, bytearray)):
            data = bytes(data).decode("utf-8", errors="replace")

        if self._output_file:
            self._save(data)
        elif self._format == OutputFormat.JSON:
            self._emit_json(data)
        elif self._format == OutputFormat.PLAIN:
            self._emit(data if isinstance(data, str) else _dump(data, indent=None))
        else:
            self._emit_rich(data, content_type)

    # -- diagnostics -----------------------------------------------------

    def info(self, message: str) -> None:
        """Print *message* to stderr unless quiet."""
        if not self._quiet:
            self._diagnostic(message)

    def warning(self, message: str) -> None:
        self._labelled("warning", message)

    def error(self, message: str) -> None:
        self._labelled("error", message)

    def debug(self, message: str) -> None:
        if self._verbose:
            self._labelled("debug", message)

    # -- internals -------------------------------------------------------

    def _labelled(self, kind: str, message: str) -> None:
        label, style = _DIAGNOSTIC_LABELS[kind]
        self._diagnostic(message, style, label)

    def _diagnostic(
        self, message: str, style: Optional[str] = None, label: Optional[str] = None
    ) -> None:
        if self._no_color:
            print(f"{label} {message}" if label else message, file=sys.stderr, flush=True)
        elif label:
            self._err.print(Text.assemble((label, style or ""), " ", message))
        else:
            self._err.print(Text(message, style=style or ""))

    def _emit(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    def _emit_json(self, data: Any) -> None:
        parsed = _try_json(data)
        if parsed is _NOT_JSON:
            self._emit(data)
        else:
            self._emit(_dump(parsed))

    def _emit_rich(self, data: Any, content_type: str) -> None:
        if isinstance(data, str):
            parsed = _try_json(data) if "json" in content_type else _NOT_JSON
            if parsed is _NOT_JSON:
                self._out.print(data, markup=False, highlight=False)
                return
            data = parsed
        self._out.print(Syntax(_dump(data), "json", theme="monokai", word_wrap=True))

    def _save(self, data: Any) -> None:
        content = data if isinstance(data, str) else _dump(data)
        if not content.endswith("\n"):
            content += "\n"
        with open(self._output_file, "w", encoding="utf-8") as f:
            f.write(content)


_NOT_JSON = object()


def _try_json(data: Any) -> Any:
    if not isinstance(data, str):
        return data
    try:
        return json.loads(data)
    except (json.JSONDecodeError, TypeError):
        return _NOT_JSON


def _dump(data: Any, indent: Optional[int] = 2) -> str:
    return json.dumps(data, indent=indent, ensure_ascii=False, default=str)


def _resolve_format(requested: OutputFormat, no_color: bool) -> OutputFormat:
    if requested != OutputFormat.AUTO:
        return requested
    return OutputFormat.RICH if _is_tty() and not no_color else OutputFormat.PLAIN


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _color_disabled_by_env() -> bool:
    """``NO_COLOR`` (any value) or ``TERM=dumb``."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, creating a default one."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager so the next call builds a fresh one."""
    global _output
    _output = None


def status_line(status: int, reason: str = "") -> None:
    get_output().status_line(status, reason)


def headers(items: Iterable[tuple[str, str]]) -> None:
    get_output().headers(items)


def body(data: Any, content_type: str = "text/plain") -> None:
    get_output().body(data, content_type)


def info(message: str) -> None:
    get_output().info(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)
