"""Retry wrap plugin with manual and ``Retry-After`` driven delays.

Instead of calling ``next()`` once, :class:`RetryPlugin` drives a small
state machine per call::

    ATTEMPTING -> AWAITING_DECISION -> DELAYING -> ATTEMPTING -> ...
         \\                \\
          -> SETTLED        -> SETTLED

* **ATTEMPTING** -- await ``next()``. A fatal error propagates at once.
  With no retries left the outcome settles as is.
* **AWAITING_DECISION** -- ask ``on_retry(attempt, error, response)``;
  ``False`` settles with the last response or error.
* **DELAYING** -- sleep for the computed delay, bump ``attempt``.

The loop is iterative, so ``max_retries`` does not bound stack depth.
"""

from __future__ import annotations

import asyncio
import copy
import enum
import logging
import math
import time
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Optional, Union

import httpx

from yafetch.exceptions import AbortError, UnescapedPathError
from yafetch.headers import find_header
from yafetch.models import RetryOptions
from yafetch.plugins.base import Next, WrapPlugin, maybe_await
from yafetch.plugins.context import PluginContext

logger = logging.getLogger(__name__)

PLUGIN_NAME = "YafetchPluginRetry"

DEFAULT_DELAY = 10.0
"""Seconds to wait when no usable delay can be computed."""

UNESCAPED_PATH_MESSAGE = "Request path contains unescaped characters"


class RetryState(str, enum.Enum):
    """Phases of one call's retry loop."""

    ATTEMPTING = "attempting"
    AWAITING_DECISION = "awaiting_decision"
    DELAYING = "delaying"
    SETTLED = "settled"


def is_fatal_error(error: BaseException) -> bool:
    """Return ``True`` for errors that must never be retried.

    Cancellations and malformed request paths are fatal. Besides the
    yafetch exception types, errors from custom transports are recognised
    by the ``name``, ``type``, ``code`` or message conventions fetch-style
    clients use.
    """
    if isinstance(error, (AbortError, UnescapedPathError, asyncio.CancelledError, httpx.InvalidURL)):
        return True
    if getattr(error, "name", None) == "AbortError":
        return True
    if getattr(error, "type", None) == "aborted":
        return True
    if getattr(error, "code", None) == "ERR_UNESCAPED_CHARACTERS":
        return True
    return str(error) == UNESCAPED_PATH_MESSAGE


def _parse_http_date(value: str) -> Optional[datetime]:
    """Parse an RFC 7231 HTTP-date, falling back to ISO 8601."""
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        # HTTP-dates without a zone are GMT; ISO strings without one are local.
        if "GMT" in value or "UTC" in value:
            parsed = parsed.replace(tzinfo=timezone.utc)
        else:
            parsed = parsed.astimezone()
    return parsed


def get_retry_after_seconds(response: Any) -> Optional[Union[int, float]]:
    """Read the ``Retry-After`` header of *response* in seconds.

    The header is looked up case-insensitively in any supported header shape.
    A numeric value is returned as is. A date is turned into the whole
    number of seconds from now until then, rounded up and never negative.

    Args:
        response: Any object with a ``headers`` attribute.

    Returns:
        Seconds to wait, or ``None`` when the header is missing or invalid
        (a warning is logged in both cases).
    """
    headers = getattr(response, "headers", None)
    value = find_header(headers, "Retry-After")

    if not value:
        logger.warning('No "Retry-After" header was found on the response: %r', headers)
        return None

    try:
        seconds = float(value)
    except ValueError:
        seconds = math.nan
    if math.isfinite(seconds):
        return int(seconds) if seconds.is_integer() else seconds

    retry_at = _parse_http_date(value.strip())
    if retry_at is None:
        logger.warning('Invalid "Retry-After" value in the response headers: %s', value)
        return None

    delay = retry_at.timestamp() - time.time()
    return max(0, math.ceil(delay))


def clone_response(response: Any) -> Any:
    """Copy *response* so later attempts cannot disturb it.

    Uses ``clone()`` when available, a shallow copy otherwise; ``None``
    stays ``None``.
    """
    if response is None:
        return None
    clone = getattr(response, "clone", None)
    if callable(clone):
        return clone()
    return copy.copy(response)


def _default_on_retry(attempt: int, error: Optional[BaseException], response: Any) -> bool:
    return response is None or not getattr(response, "ok", False)


class RetryPlugin(WrapPlugin):
    """Wrap plugin that retries the inner chain.

    Args:
        options: Retry settings. Each call starts a fresh attempt counter,
            so one instance can be shared by concurrent calls.

    Example::

        await send(
            "https://api.example.com/flaky",
            {"plugins": {"wrap": [create_retry_plugin({"max_retries": 5})]}},
        )
    """

    name = PLUGIN_NAME

    def __init__(self, options: Optional[RetryOptions] = None) -> None:
        self.options = options or RetryOptions()

    async def run(self, next: Next, context: PluginContext) -> Any:
        opts = self.options
        on_retry = opts.on_retry or _default_on_retry
        attempt = 0
        error: Optional[Exception] = None
        response: Any = None
        state = RetryState.ATTEMPTING

        while state is not RetryState.SETTLED:
            if state is RetryState.ATTEMPTING:
                error, response = None, None
                try:
                    result = await next()
                except Exception as exc:
                    if is_fatal_error(exc):
                        logger.debug("Attempt %d failed with a fatal error: %s", attempt, exc)
                        raise
                    error = exc
                else:
                    response = clone_response(result)
                if attempt >= opts.max_retries:
                    state = RetryState.SETTLED
                else:
                    state = RetryState.AWAITING_DECISION

            elif state is RetryState.AWAITING_DECISION:
                should_retry = await maybe_await(on_retry(attempt, error, response))
                state = RetryState.DELAYING if should_retry else RetryState.SETTLED

            elif state is RetryState.DELAYING:
                delay = self._compute_delay(attempt, error, response)
                logger.debug(
                    "Retrying in %ss (attempt %d/%d)", delay, attempt + 1, opts.max_retries
                )
                await asyncio.sleep(delay)
                attempt += 1
                state = RetryState.ATTEMPTING

        if error is not None:
            raise error
        return response

    def _compute_delay(
        self, attempt: int, error: Optional[Exception], response: Any
    ) -> float:
        opts = self.options
        if opts.mode == "header" and response is not None:
            delay = get_retry_after_seconds(response)
        elif callable(opts.delay):
            delay = opts.delay(attempt, error, response)
        else:
            delay = opts.delay

        if not delay:
            logger.warning(
                'Delay is undefined under the "%s" mode. Either switch to another mode '
                "or provide a delay number/function. Falling back to default %s seconds.",
                opts.mode, DEFAULT_DELAY,
            )
            delay = DEFAULT_DELAY
        return delay


def create_retry_plugin(
    options: Union[RetryOptions, dict[str, Any], None] = None
) -> RetryPlugin:
    """Create a :class:`RetryPlugin` named ``YafetchPluginRetry``.

    Args:
        options: :class:`~yafetch.models.RetryOptions` or a dict of its
            fields (``mode``, ``max_retries``, ``delay``, ``on_retry``).
    """
    if isinstance(options, dict):
        options = RetryOptions.model_validate(options)
    return RetryPlugin(options)
