"""Retry wrap plugin.

Usage::

    from yafetch.plugins.retry import create_retry_plugin

    retry = create_retry_plugin({"mode": "manual", "delay": 2, "max_retries": 5})
    response = await send(url, {"plugins": {"wrap": [retry]}})
"""

from yafetch.plugins.retry.plugin import (
    DEFAULT_DELAY,
    PLUGIN_NAME,
    RetryPlugin,
    RetryState,
    create_retry_plugin,
    get_retry_after_seconds,
    is_fatal_error,
)

__all__ = [
    "DEFAULT_DELAY",
    "PLUGIN_NAME",
    "RetryPlugin",
    "RetryState",
    "create_retry_plugin",
    "get_retry_after_seconds",
    "is_fatal_error",
]
