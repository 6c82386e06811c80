"""Response wrapper and return-format decoding.

:class:`Response` gives an :class:`httpx.Response` the small surface the
pipeline and plugins rely on: ``status``, ``ok``, ``headers``, ``clone()``
and awaitable body readers. The body is fully buffered when the transport
returns, so every clone can read it again; there is no single-use stream
to exhaust between retry attempts.

:func:`read_response` applies the ``return_as`` argument of
:func:`~yafetch.client.send.send` to whatever the pipeline produced.
"""

from __future__ import annotations

from typing import Any, Optional
from urllib.parse import parse_qs

import httpx

from yafetch.exceptions import InvalidUsageError
from yafetch.plugins.base import maybe_await

_READERS = {
    "text": "text",
    "json": "json",
    "blob": "blob",
    "formData": "form_data",
    "form_data": "form_data",
    "arrayBuffer": "array_buffer",
    "array_buffer": "array_buffer",
}


class Response:
    """A buffered HTTP response.

    Args:
        raw: The underlying :class:`httpx.Response`. Its body must already
            be read (the default transport always reads it).

    Example::

        response = await send("https://api.example.com/items")
        if response.ok:
            items = await response.json()
    """

    def __init__(self, raw: httpx.Response) -> None:
        self._raw = raw

    @property
    def raw(self) -> httpx.Response:
        """The wrapped :class:`httpx.Response`."""
        return self._raw

    @property
    def status(self) -> int:
        return self._raw.status_code

    @property
    def ok(self) -> bool:
        """``True`` for 2xx status codes."""
        return 200 <= self._raw.status_code < 300

    @property
    def status_text(self) -> str:
        return self._raw.reason_phrase

    @property
    def headers(self) -> httpx.Headers:
        return self._raw.headers

    @property
    def url(self) -> Optional[str]:
        """The final request URL, or ``None`` for detached responses."""
        try:
            return str(self._raw.url)
        except RuntimeError:
            return None

    @property
    def body(self) -> Optional[bytes]:
        """Raw body bytes, or ``None`` when the body is empty."""
        return self._raw.content or None

    def clone(self) -> Response:
        """Return an independent wrapper over the same buffered body."""
        return Response(self._raw)

    async def text(self) -> str:
        return self._raw.text

    async def json(self) -> Any:
        return self._raw.json()

    async def blob(self) -> bytes:
        return self._raw.content

    async def array_buffer(self) -> bytearray:
        return bytearray(self._raw.content)

    async def form_data(self) -> dict[str, list[str]]:
        """Parse an ``application/x-www-form-urlencoded`` body."""
        return parse_qs(self._raw.text, keep_blank_values=True)

    def __repr__(self) -> str:
        return f"<Response [{self.status} {self.status_text}]>"


async def read_response(result: Any, return_as: Optional[str]) -> Any:
    """Decode *result* according to *return_as*.

    Args:
        result: Whatever the pipeline returned, usually a :class:`Response`.
            Custom transports may return any object with the matching
            reader methods.
        return_as: One of ``text``, ``json``, ``blob``, ``formData``,
            ``arrayBuffer`` (or ``form_data`` / ``array_buffer``), or
            ``None`` to return *result* unchanged.

    Raises:
        InvalidUsageError: If *return_as* is unknown or *result* has no
            matching reader.
    """
    if return_as is None:
        return result

    attr = _READERS.get(return_as)
    if attr is None:
        raise InvalidUsageError(
            f"Unknown return format '{return_as}'. "
            f"Expected one of: {', '.join(sorted(_READERS))}"
        )

    reader = getattr(result, attr, None)
    if not callable(reader):
        raise InvalidUsageError(
            f"Cannot read result as '{return_as}': {type(result).__name__} has no {attr}()"
        )
    return await maybe_await(reader())
