"""Canonical Pydantic models shared across yafetch modules.

The models fall into two groups:

**Request models** -- built per call or held process-wide:
    :class:`HTTPMethod`, :class:`PluginsConfig`, :class:`Options` and
    :class:`RetryOptions`.

**Configuration models** -- loaded from the environment or a JSON file by
:mod:`yafetch.config`:
    :class:`PluginDiscoveryConfig` and :class:`ClientConfig`.

Request models carry live objects (plugins, transports, cancellation
events), so they allow arbitrary types and skip validation on assignment:
plugins mutate ``context.request_options`` in place while a call runs.
"""

from __future__ import annotations

import asyncio
import enum
from typing import Any, Callable, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

ReturnAs = Literal["text", "json", "blob", "formData", "arrayBuffer", "form_data", "array_buffer"]
"""Formats accepted by :func:`~yafetch.client.send.send` to decode the result."""

SkipTarget = Literal["before", "after", "wrap", "all"]
"""Which global plugin list a skip directive applies to."""


class HTTPMethod(str, enum.Enum):
    """HTTP methods accepted by :class:`Options`."""

    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    CONNECT = "CONNECT"
    OPTIONS = "OPTIONS"
    TRACE = "TRACE"


# --- Request models ---


class PluginsConfig(BaseModel):
    """Plugins to run, grouped by stage.

    Order inside each list is execution order. For ``wrap`` the first entry
    is the outermost wrapper.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    before: list[Any] = Field(default_factory=list)
    wrap: list[Any] = Field(default_factory=list)
    after: list[Any] = Field(default_factory=list)


class Options(BaseModel):
    """Options for one request, or the process-wide defaults.

    Unknown keys are kept (``extra="allow"``) and handed to the transport,
    so transport-specific settings such as ``follow_redirects`` can travel
    with the request.

    Example::

        Options(
            method="POST",
            base_url="https://api.example.com",
            headers={"Authorization": "Bearer abc"},
            body={"name": "widget"},
            skip_plugins={"RequestLog": "all"},
        )
    """

    model_config = ConfigDict(extra="allow", arbitrary_types_allowed=True)

    method: Optional[str] = Field(default=None, description="HTTP method, upper case")
    base_url: Optional[str] = Field(
        default=None,
        description="Base URL for relative targets; overrides the global base URL",
    )
    headers: Any = Field(
        default=None,
        description="Headers as a dict, a list of (name, value) pairs or a mapping with get()",
    )
    body: Any = None
    plugins: Optional[PluginsConfig] = None
    skip_plugins: dict[str, SkipTarget] = Field(
        default_factory=dict,
        description="Global plugins to skip for this call, by plugin name",
    )
    transport: Optional[Callable[..., Any]] = Field(
        default=None,
        description="Async callable (request, options) -> response; defaults to httpx",
    )
    signal: Optional[asyncio.Event] = Field(
        default=None, description="Cancellation signal; setting it aborts the request"
    )
    timeout: Optional[float] = Field(default=None, description="Transport timeout in seconds")


class RetryOptions(BaseModel):
    """Settings for :class:`~yafetch.plugins.retry.plugin.RetryPlugin`.

    ``manual`` mode uses :attr:`delay`; ``header`` mode reads the
    ``Retry-After`` header of the last response and only falls back to
    :attr:`delay` when the attempt failed without a response.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    mode: Literal["manual", "header"] = "header"
    max_retries: int = Field(default=3, ge=0, description="Retries after the first attempt")
    delay: Union[float, Callable[..., Any]] = Field(
        default=10.0,
        description="Seconds to wait, or a function (attempt, error, response) -> seconds",
    )
    on_retry: Optional[Callable[..., Any]] = Field(
        default=None,
        description="Hook (attempt, error, response) -> bool or awaitable bool",
    )


# --- Configuration models ---


class PluginDiscoveryConfig(BaseModel):
    """Allow/block lists for entry-point plugin discovery.

    When ``enabled`` is non-empty only those entry points load; otherwise
    every discovered entry point not in ``disabled`` loads.
    """

    enabled: list[str] = Field(default_factory=list)
    disabled: list[str] = Field(default_factory=list)


class ClientConfig(BaseModel):
    """Serialisable defaults applied to the global options.

    Example ``yafetch.json``::

        {
            "base_url": "https://api.example.com",
            "headers": {"Accept": "application/json"},
            "timeout": 15,
            "plugins": {"disabled": ["noisy-plugin"]}
        }
    """

    base_url: Optional[str] = None
    method: str = "GET"
    headers: dict[str, str] = Field(default_factory=dict)
    timeout: Optional[float] = None
    plugins: PluginDiscoveryConfig = Field(default_factory=PluginDiscoveryConfig)
