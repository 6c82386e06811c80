"""Plugin collection and wrap-chain construction.

:func:`collect_plugins` merges the globally registered plugins with the ones
passed to a single call, honouring the call's skip directive.
:func:`build_wrap_chain` turns the ordered wrap list into nested
continuations ending in the transport call.

Ordering rules:

* every list is ``(global plugins not skipped) + (per-call plugins)``;
* order inside each source list is kept;
* skip directives only filter global plugins, never per-call ones;
* the first wrap plugin is the outermost one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence

from yafetch.models import PluginsConfig
from yafetch.plugins.base import Next, maybe_await
from yafetch.plugins.context import PluginContext

logger = logging.getLogger(__name__)

STAGES = ("before", "wrap", "after")


@dataclass
class PluginChain:
    """The three ordered plugin lists for one call."""

    before: list[Any] = field(default_factory=list)
    wrap: list[Any] = field(default_factory=list)
    after: list[Any] = field(default_factory=list)


def _filter_skipped(
    plugins: Sequence[Any], stage: str, skip: Mapping[str, str]
) -> list[Any]:
    """Drop the plugins whose name is skipped for *stage* or for ``all``."""
    if not skip:
        return list(plugins)

    kept = []
    for plugin in plugins:
        target = skip.get(plugin.name)
        if target == stage or target == "all":
            logger.debug("Skipping global %s plugin '%s'", stage, plugin.name)
            continue
        kept.append(plugin)
    return kept


def collect_plugins(
    global_plugins: Optional[PluginsConfig],
    call_plugins: Optional[PluginsConfig],
    skip: Optional[Mapping[str, str]] = None,
) -> PluginChain:
    """Build the before, wrap and after lists for a call.

    Args:
        global_plugins: Plugins registered in the global options.
        call_plugins: Plugins passed with this call.
        skip: Skip directive mapping a plugin name to ``before``, ``after``,
            ``wrap`` or ``all``.

    Returns:
        A :class:`PluginChain` where global entries precede per-call ones.
    """
    skip = skip or {}
    chain = PluginChain()
    for stage in STAGES:
        from_global = getattr(global_plugins, stage, None) or []
        from_call = getattr(call_plugins, stage, None) or []
        setattr(chain, stage, _filter_skipped(from_global, stage, skip) + list(from_call))
    return chain


def _bind(plugin: Any, inner: Next, context: PluginContext) -> Next:
    async def run() -> Any:
        return await maybe_await(plugin.run(inner, context))

    return run


def build_wrap_chain(
    wrap: Sequence[Any], terminal: Next, context: PluginContext
) -> Next:
    """Nest *wrap* plugins around *terminal* and return the outermost step.

    The chain is assembled from the tail so its depth does not grow the
    call stack at build time. Each plugin receives the step built before it
    as ``next``; the last plugin receives *terminal*. With no wrap plugins
    *terminal* is returned unchanged.

    Args:
        wrap: Wrap plugins, outermost first.
        terminal: Zero-argument coroutine function performing the actual
            transport call.
        context: Context handed to every wrap plugin.

    Returns:
        A zero-argument coroutine function running the whole chain.
    """
    step = terminal
    for plugin in reversed(wrap):
        step = _bind(plugin, step, context)
    return step
