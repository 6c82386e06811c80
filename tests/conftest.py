"""Shared test fixtures for yafetch.

Resets the process-wide options and output manager around every test and
provides fake transports and responses so tests never touch the network.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
import pytest

from yafetch.client.response import Response
from yafetch.config import reset_global_options
from yafetch.output import reset_output


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_global_state() -> None:
    """Restore default global options, the output manager and logging."""
    logger = logging.getLogger("yafetch")
    handlers, level = list(logger.handlers), logger.level
    reset_global_options()
    yield
    reset_global_options()
    reset_output()
    logger.handlers = handlers
    logger.setLevel(level)


# ---------------------------------------------------------------------------
# Responses and transports
# ---------------------------------------------------------------------------


def _make_response(
    status: int = 200,
    text: str = "",
    headers: Optional[dict[str, str]] = None,
) -> Response:
    """Build a buffered :class:`Response` without a network round trip."""
    return Response(httpx.Response(status, text=text, headers=headers or {}))


class FakeTransport:
    """Transport that replays queued outcomes and records every call.

    Each outcome is a response (returned) or an exception (raised). The last
    outcome repeats once the queue is exhausted.
    """

    def __init__(self, *outcomes: Any) -> None:
        self.outcomes = list(outcomes) or [_make_response()]
        self.calls: list[tuple[Any, Any]] = []

    async def __call__(self, request: Any, options: Any = None) -> Any:
        self.calls.append((request, options))
        index = min(len(self.calls) - 1, len(self.outcomes) - 1)
        outcome = self.outcomes[index]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


@pytest.fixture
def fake_transport() -> FakeTransport:
    """A transport that always answers ``200 ok``."""
    return FakeTransport(_make_response(200, "ok"))


@pytest.fixture
def sleeps(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    """Make retry delays instant and record the requested durations."""
    recorded: list[float] = []

    async def _fake_sleep(delay: float) -> None:
        recorded.append(delay)

    monkeypatch.setattr("yafetch.plugins.retry.plugin.asyncio.sleep", _fake_sleep)
    return recorded


@pytest.fixture
def make_response():
    """Factory fixture: ``make_response(status, text, headers)``."""
    return _make_response


@pytest.fixture
def transport_factory():
    """Factory fixture: ``transport_factory(*outcomes)`` -> :class:`FakeTransport`."""
    return FakeTransport


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner capturing stdout and stderr."""
    from typer.testing import CliRunner

    return CliRunner()
