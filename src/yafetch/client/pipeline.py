"""Pipeline executor: before plugins, wrap chain, transport, after plugins.

:func:`execute_call` runs one request through the plugin pipeline:

1. collect the before, wrap and after lists (global plugins first, minus
   the ones the call skips);
2. create the :class:`~yafetch.plugins.context.PluginContext` shared by
   the whole call;
3. run every before plugin concurrently and wait for all of them;
4. run the wrap chain, whose innermost step calls the transport;
5. store the chain's result on ``context.response``;
6. run every after plugin concurrently and wait for all of them;
7. return the chain's result.

An exception from any stage propagates to the caller unless an enclosing
wrap plugin handles it.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from yafetch.config import get_global_options
from yafetch.exceptions import ConfigError
from yafetch.models import Options
from yafetch.plugins.base import maybe_await
from yafetch.plugins.chain import build_wrap_chain, collect_plugins
from yafetch.plugins.context import PluginContext

logger = logging.getLogger(__name__)


async def call_transport(context: PluginContext) -> Any:
    """Invoke the transport for *context*; the innermost step of every chain.

    The transport comes from the call's options (wrap plugins may have
    replaced them) and otherwise from the global options.

    Raises:
        ConfigError: If neither provides a transport.
    """
    transport = getattr(context.request_options, "transport", None)
    if transport is None:
        transport = get_global_options().transport
    if transport is None:
        raise ConfigError(
            "Unable to find a transport. Set `transport` in the request options "
            "or in the global options."
        )
    return await maybe_await(transport(context.request, context.request_options))


async def _run_plugin(plugin: Any, context: PluginContext) -> None:
    await maybe_await(plugin.run(context))


async def _run_stage(plugins: list[Any], context: PluginContext) -> None:
    if plugins:
        await asyncio.gather(*(_run_plugin(plugin, context) for plugin in plugins))


async def execute_call(request: Any, options: Options) -> Any:
    """Run *request* through the plugin pipeline.

    Args:
        request: URL string or ``httpx.Request``.
        options: Merged options for this call. Its ``plugins`` are the
            per-call plugins; global plugins are read from the global
            options now.

    Returns:
        The result of the outermost wrap plugin, or the transport's
        response when there are no wrap plugins.
    """
    chain = collect_plugins(
        get_global_options().plugins, options.plugins, options.skip_plugins
    )
    logger.debug(
        "Executing call with %d before, %d wrap, %d after plugins",
        len(chain.before), len(chain.wrap), len(chain.after),
    )

    context = PluginContext(request=request, request_options=options)

    async def terminal() -> Any:
        return await call_transport(context)

    await _run_stage(chain.before, context)
    response = await build_wrap_chain(chain.wrap, terminal, context)()
    context.response = response
    await _run_stage(chain.after, context)

    return response
