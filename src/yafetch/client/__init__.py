"""HTTP client module for yafetch.

Provides the :func:`send` entry point, the pipeline executor behind it,
the default httpx transport and the :class:`Response` wrapper.

Example::

    from yafetch.client import send

    response = await send("https://api.example.com/users")
    users = await response.json()
"""

from yafetch.client.pipeline import execute_call
from yafetch.client.response import Response, read_response
from yafetch.client.send import send
from yafetch.client.transport import HttpxTransport, httpx_transport

__all__ = [
    "HttpxTransport",
    "Response",
    "execute_call",
    "httpx_transport",
    "read_response",
    "send",
]
