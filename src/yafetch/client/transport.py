"""Default transport backed by :class:`httpx.AsyncClient`.

A transport is any async callable ``(request, options) -> response``. The
pipeline calls it as the innermost step of the wrap chain. This module
provides :class:`HttpxTransport` and the shared :data:`httpx_transport`
instance used when neither the call nor the global options name one.

Transport contract, which custom transports should follow too:

* network failures raise (here: :class:`~yafetch.exceptions.TransportError`);
* cancellation raises a distinguishable error
  (:class:`~yafetch.exceptions.AbortError`);
* HTTP error statuses are returned, not raised.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, Optional

import httpx

from yafetch.client.response import Response
from yafetch.exceptions import AbortError, TransportError, UnescapedPathError
from yafetch.models import Options

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

# Characters allowed verbatim in a request path: printable ASCII and Latin-1.
_INVALID_PATH_CHARS = re.compile(r"[^\u0021-\u00ff]")


def _request_path(url: str) -> str:
    """Return everything after the authority part of *url*."""
    _, sep, rest = url.partition("://")
    if not sep:
        rest = url
    slash = rest.find("/")
    return rest[slash:] if slash >= 0 else ""


def check_request_path(url: str) -> None:
    """Reject URLs whose path holds characters that must be percent-encoded.

    Raises:
        UnescapedPathError: On whitespace, control or non-Latin-1 characters.
    """
    if _INVALID_PATH_CHARS.search(_request_path(url)):
        raise UnescapedPathError()


class HttpxTransport:
    """Send requests with a short-lived :class:`httpx.AsyncClient`.

    Args:
        **client_kwargs: Extra keyword arguments for
            :class:`httpx.AsyncClient` (for example ``transport=`` to plug
            in an :class:`httpx.MockTransport`, or ``verify=False``).
            ``timeout`` and ``follow_redirects`` given here are the defaults
            for calls that do not set them.

    Per-call options used: ``method``, ``headers``, ``body``, ``timeout``,
    ``signal`` and the extra key ``follow_redirects`` (default ``True``).
    """

    def __init__(self, **client_kwargs: Any) -> None:
        self._client_kwargs = client_kwargs

    async def __call__(self, request: Any, options: Optional[Options] = None) -> Response:
        options = options or Options()
        signal = options.signal

        if not isinstance(request, httpx.Request):
            check_request_path(str(request))

        if signal is not None and signal.is_set():
            raise AbortError("The request was aborted")

        extra = options.model_extra or {}
        # Per-call options beat constructor kwargs, which beat the defaults.
        client_kwargs = {"timeout": DEFAULT_TIMEOUT, "follow_redirects": True, **self._client_kwargs}
        if options.timeout is not None:
            client_kwargs["timeout"] = options.timeout
        if "follow_redirects" in extra:
            client_kwargs["follow_redirects"] = extra["follow_redirects"]
        client = httpx.AsyncClient(**client_kwargs)
        async with client:
            send = self._send(client, request, options)
            try:
                if signal is None:
                    raw = await send
                else:
                    raw = await self._race(send, signal)
            except httpx.TransportError as exc:
                raise TransportError(f"Request to {self._describe(request)} failed: {exc}") from exc

        logger.debug("%s %s -> %s", options.method or "GET", self._describe(request), raw.status_code)
        return Response(raw)

    async def _send(
        self, client: httpx.AsyncClient, request: Any, options: Options
    ) -> httpx.Response:
        headers = options.headers or {}

        if isinstance(request, httpx.Request):
            request.headers.update(headers)
            return await client.send(request)

        kwargs: dict[str, Any] = {
            "method": options.method or "GET",
            "url": str(request),
            "headers": headers,
        }
        body = options.body
        if isinstance(body, (str, bytes)):
            kwargs["content"] = body
        elif body is not None:
            kwargs["json"] = body
        return await client.request(**kwargs)

    @staticmethod
    async def _race(send: Any, signal: asyncio.Event) -> httpx.Response:
        """Await *send* unless *signal* fires first."""
        send_task = asyncio.ensure_future(send)
        abort_task = asyncio.ensure_future(signal.wait())
        try:
            done, _ = await asyncio.wait(
                {send_task, abort_task}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            pending = [task for task in (send_task, abort_task) if not task.done()]
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        if send_task in done:
            return send_task.result()
        raise AbortError("The request was aborted")

    @staticmethod
    def _describe(request: Any) -> str:
        if isinstance(request, httpx.Request):
            return str(request.url)
        return str(request)


httpx_transport = HttpxTransport()
"""Transport used when no other is configured."""
