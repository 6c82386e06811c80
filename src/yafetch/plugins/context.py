"""The context object threaded through one call's plugins."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from yafetch.models import Options


@dataclass
class PluginContext:
    """Mutable state shared by reference across a single call.

    One instance is created per call and handed to every before-plugin,
    every wrap plugin and every after-plugin, in that order. Changes a
    plugin makes (for example to ``request_options`` or ``data``) are seen
    by every plugin that runs later, and by the transport.

    Attributes:
        request: The request target, a URL string or an ``httpx.Request``.
        request_options: Merged options for this call.
        response: The result of the wrap chain. Only set once the call has
            resolved, so only after-plugins observe it.
        data: Free-form storage for plugins to share values.
    """

    request: Any
    request_options: Optional[Options] = None
    response: Any = None
    data: dict[str, Any] = field(default_factory=dict)
