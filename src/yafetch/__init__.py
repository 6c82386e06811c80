"""yafetch -- an async HTTP client built around a plugin pipeline.

Every call runs through three plugin stages:

* **before** plugins inspect or mutate the request context (concurrently);
* **wrap** plugins nest around the transport call and control whether,
  when and how often it runs (the bundled retry plugin is one);
* **after** plugins observe the final result (concurrently).

Plugins registered in the global options run for every call, ahead of the
call's own plugins, and can be skipped per call by name.

Example::

    from yafetch import create_retry_plugin, send

    body = await send(
        "https://api.example.com/items",
        {"plugins": {"wrap": [create_retry_plugin({"max_retries": 2})]}},
        "json",
    )

Modules:
    client: ``send``, the pipeline executor, the httpx transport and ``Response``.
    plugins: plugin base classes, chain building, discovery and bundled plugins.
    config: global options, option merging and configuration loading.
    headers: header normalisation.
    models: Pydantic models shared across the package.
    exceptions: exception hierarchy with exit-code mapping.
    app: the ``yafetch`` console script.
"""

__version__ = "0.3.0"

from yafetch.client import Response, send  # noqa: E402
from yafetch.config import (  # noqa: E402
    get_global_options,
    merge_options,
    reset_global_options,
    set_global_options,
)
from yafetch.models import Options, PluginsConfig, RetryOptions  # noqa: E402
from yafetch.plugins import (  # noqa: E402
    FunctionPlugin,
    FunctionWrapPlugin,
    Plugin,
    PluginContext,
    WrapPlugin,
    create_retry_plugin,
)

__all__ = [
    "FunctionPlugin",
    "FunctionWrapPlugin",
    "Options",
    "Plugin",
    "PluginContext",
    "PluginsConfig",
    "Response",
    "RetryOptions",
    "WrapPlugin",
    "__version__",
    "create_retry_plugin",
    "get_global_options",
    "merge_options",
    "reset_global_options",
    "send",
    "set_global_options",
]
