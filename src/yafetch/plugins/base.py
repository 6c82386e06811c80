"""Base classes for yafetch plugins.

Two plugin kinds exist:

* :class:`Plugin` -- runs *before* the call or *after* it, receives the
  shared :class:`~yafetch.plugins.context.PluginContext` and may mutate it.
* :class:`WrapPlugin` -- surrounds the call. It receives a zero-argument
  ``next`` callable and decides whether, when and how often to invoke it.

The pipeline only relies on a ``name`` attribute and a ``run`` method, so
any object with that shape works. The base classes add the ``stage`` used
by entry-point discovery, and :class:`FunctionPlugin` /
:class:`FunctionWrapPlugin` adapt plain callables.

Example:
    A before-plugin that stamps a header::

        class RequestId(Plugin):
            name = "request-id"

            def run(self, context):
                context.request_options.headers["X-Request-Id"] = uuid4().hex

    A wrap plugin that upper-cases text results::

        async def shout(next, context):
            return (await next()).upper()

        FunctionWrapPlugin("shout", shout)
"""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, ClassVar, Literal

from yafetch.plugins.context import PluginContext

Next = Callable[[], Awaitable[Any]]
"""Continuation handed to a wrap plugin: runs the rest of the chain."""


async def maybe_await(value: Any) -> Any:
    """Await *value* if it is awaitable, otherwise return it unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value


class Plugin(ABC):
    """A plugin that runs before or after the request.

    Before-plugins of one call run concurrently, as do after-plugins, so a
    plugin must not depend on another plugin of the same stage having
    finished. ``run`` may return a value or an awaitable; the value is
    discarded.
    """

    name: str = ""
    stage: ClassVar[Literal["before", "after"]] = "before"

    @abstractmethod
    def run(self, context: PluginContext) -> Any:
        """Execute the plugin.

        Args:
            context: Context shared by every plugin of this call.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class WrapPlugin(ABC):
    """A plugin that wraps inner plugins and the transport call.

    The first wrap plugin of a call wraps the second, which wraps the third,
    and the last one wraps the transport::

        plugins=PluginsConfig(wrap=[outer, inner])
        # outer.run(next -> inner.run(next -> transport))
    """

    name: str = ""
    stage: ClassVar[Literal["wrap"]] = "wrap"

    @abstractmethod
    async def run(self, next: Next, context: PluginContext) -> Any:
        """Execute the plugin.

        Args:
            next: Runs the rest of the chain and returns its result. Must be
                awaited to take effect; may be called several times.
            context: Context shared by every plugin of this call.

        Returns:
            The value handed to the enclosing wrap plugin, or to the caller
            when this plugin is outermost.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class FunctionPlugin(Plugin):
    """Adapt a callable ``fn(context)`` into a :class:`Plugin`."""

    def __init__(
        self,
        name: str,
        fn: Callable[[PluginContext], Any],
        stage: Literal["before", "after"] = "before",
    ) -> None:
        self.name = name
        self.stage = stage  # type: ignore[misc]
        self._fn = fn

    def run(self, context: PluginContext) -> Any:
        return self._fn(context)


class FunctionWrapPlugin(WrapPlugin):
    """Adapt a callable ``fn(next, context)`` into a :class:`WrapPlugin`."""

    def __init__(self, name: str, fn: Callable[[Next, PluginContext], Any]) -> None:
        self.name = name
        self._fn = fn

    async def run(self, next: Next, context: PluginContext) -> Any:
        return await maybe_await(self._fn(next, context))
