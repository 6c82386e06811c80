"""Plugin system for yafetch -- plugin types, chain building and discovery.

Plugins come in three stages:

* ``before`` -- :class:`Plugin` instances run concurrently before the call;
* ``wrap`` -- :class:`WrapPlugin` instances nest around the transport call;
* ``after`` -- :class:`Plugin` instances run concurrently once the call
  resolved.

Key pieces:

* :class:`PluginContext` -- mutable state shared by one call's plugins.
* :func:`collect_plugins` / :func:`build_wrap_chain` -- ordering, skip rules
  and continuation nesting.
* :class:`PluginManager` -- entry-point discovery into the global options.
* :func:`create_retry_plugin` -- the bundled retry wrap plugin.

Example::

    from yafetch.config import get_global_options
    from yafetch.models import PluginsConfig
    from yafetch.plugins import FunctionPlugin

    get_global_options().plugins = PluginsConfig(
        before=[FunctionPlugin("trace", lambda ctx: ctx.data.setdefault("trace", []))]
    )
"""

from yafetch.plugins.base import FunctionPlugin, FunctionWrapPlugin, Plugin, WrapPlugin
from yafetch.plugins.chain import PluginChain, build_wrap_chain, collect_plugins
from yafetch.plugins.context import PluginContext
from yafetch.plugins.manager import PluginManager
from yafetch.plugins.retry import RetryPlugin, create_retry_plugin

__all__ = [
    "FunctionPlugin",
    "FunctionWrapPlugin",
    "Plugin",
    "PluginChain",
    "PluginContext",
    "PluginManager",
    "RetryPlugin",
    "WrapPlugin",
    "build_wrap_chain",
    "collect_plugins",
    "create_retry_plugin",
]
