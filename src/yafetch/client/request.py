"""Request target resolution and body/query preparation."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, Optional
from urllib.parse import urlencode

import httpx

from yafetch.config import get_global_options
from yafetch.exceptions import ConfigError
from yafetch.headers import find_header
from yafetch.models import Options

_BODY_METHODS = ("POST", "PUT", "PATCH")


def create_request(request: Any, base_url: Optional[str] = None) -> Any:
    """Resolve a relative URL (one starting with ``/``) against a base URL.

    The per-call *base_url* wins over the global one. Absolute URLs and
    ``httpx.Request`` objects are returned unchanged.

    Raises:
        ConfigError: For a relative URL when no base URL is configured.
    """
    if isinstance(request, str) and request.startswith("/"):
        base = base_url or get_global_options().base_url
        if not base:
            raise ConfigError(
                f"A relative url was seen without a base url in the options. {request}"
            )
        return base.rstrip("/") + request
    return request


def _append_query(request: Any, query: str) -> str:
    url = str(request.url) if isinstance(request, httpx.Request) else str(request)
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{query}"


def prepare_request(request: Any, options: Options) -> Any:
    """Encode the body of *options* for its method.

    * ``POST``/``PUT``/``PATCH``: a non-string body is JSON-encoded. Unless
      the caller set one, ``Content-Type`` becomes ``application/json``
      (``text/plain`` for string bodies).
    * ``DELETE``: the body is sent as is.
    * other methods: a non-empty mapping body moves into the query string
      and the body is dropped.

    *options* is updated in place.

    Returns:
        The request target to send, with the query string appended when the
        body moved into it.
    """
    method = (options.method or "GET").upper()
    body = options.body

    if method in _BODY_METHODS:
        if body:
            headers = options.headers if isinstance(options.headers, dict) else {}
            if find_header(headers, "Content-Type") is None:
                if isinstance(body, str):
                    headers["Content-Type"] = "text/plain"
                elif isinstance(body, bytes):
                    headers["Content-Type"] = "application/octet-stream"
                else:
                    headers["Content-Type"] = "application/json"
            options.headers = headers
            if not isinstance(body, (str, bytes)):
                options.body = json.dumps(body)
        return request

    if method == "DELETE":
        return request

    if isinstance(body, Mapping) and body:
        options.body = None
        return _append_query(request, urlencode(body, doseq=True))
    return request
