"""The ``send`` entry point."""

from __future__ import annotations

import logging
from typing import Any, Optional, Union

from yafetch.client.pipeline import execute_call
from yafetch.client.request import create_request, prepare_request
from yafetch.client.response import read_response
from yafetch.config import coerce_options, merge_options
from yafetch.models import Options, ReturnAs

logger = logging.getLogger(__name__)


async def send(
    request: Any,
    options: Union[Options, dict[str, Any], None] = None,
    return_as: Optional[ReturnAs] = None,
) -> Any:
    """Send a request through the plugin pipeline.

    Args:
        request: An absolute URL, a path starting with ``/`` (resolved
            against ``base_url``), or an ``httpx.Request``.
        options: Per-call :class:`~yafetch.models.Options` or a dict of its
            fields. Merged over the global options.
        return_as: Decode the result as ``text``, ``json``, ``blob``,
            ``formData`` or ``arrayBuffer``. ``None`` returns the result
            of the pipeline (normally a
            :class:`~yafetch.client.response.Response`).

    Returns:
        The response, the decoded body, or whatever the outermost wrap
        plugin returned.

    Raises:
        ConfigError: For a relative URL with no base URL anywhere.

    Example::

        todo = await send(
            "/todos/1",
            {"base_url": "https://jsonplaceholder.typicode.com"},
            "json",
        )
    """
    call_options = coerce_options(options)
    target = create_request(request, call_options.base_url)
    opts = merge_options(call_options)
    target = prepare_request(target, opts)

    logger.debug("send %s %s", opts.method, target)
    result = await execute_call(target, opts)
    return await read_response(result, return_as)
