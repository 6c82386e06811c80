"""Header normalisation across the three header shapes yafetch accepts.

Callers and transports hand headers around as:

* a sequence of ``(name, value)`` pairs,
* a plain ``dict``,
* a mapping-like object exposing ``get`` (``httpx.Headers`` and friends).

:func:`classify_headers` tags a container once with its
:class:`HeaderShape`; the helpers below then dispatch on the tag instead of
probing the object again.
"""

from __future__ import annotations

import enum
from typing import Any, NamedTuple, Optional


class HeaderShape(str, enum.Enum):
    """The representation a header container uses."""

    EMPTY = "empty"
    PAIRS = "pairs"
    PLAIN = "plain"
    MAPPING = "mapping"


class HeaderView(NamedTuple):
    """A header container tagged with its shape."""

    shape: HeaderShape
    source: Any


def classify_headers(headers: Any) -> HeaderView:
    """Tag *headers* with its :class:`HeaderShape`.

    ``dict`` is checked before the generic ``get`` accessor because plain
    dicts expose ``get`` too but are matched by exact key.
    """
    if headers is None:
        return HeaderView(HeaderShape.EMPTY, None)
    if isinstance(headers, dict):
        return HeaderView(HeaderShape.PLAIN, headers)
    if isinstance(headers, (list, tuple)):
        if not headers:
            return HeaderView(HeaderShape.EMPTY, None)
        return HeaderView(HeaderShape.PAIRS, headers)
    if callable(getattr(headers, "get", None)):
        return HeaderView(HeaderShape.MAPPING, headers)
    raise TypeError(f"Unsupported headers type: {type(headers).__name__}")


def headers_to_dict(headers: Any) -> Optional[dict[str, str]]:
    """Convert *headers* into a plain ``dict``.

    Pairs and mapping shapes are copied (a later pair wins over an earlier
    one with the same name); a ``dict`` is returned as is and ``None``
    stays ``None``. A mapping without ``items()`` is iterated for its
    ``(name, value)`` entries.

    Raises:
        TypeError: If a mapping offers neither ``items()`` nor iteration,
            so only single lookups through ``get`` are possible.
    """
    view = classify_headers(headers)
    if view.shape is HeaderShape.EMPTY:
        return None if headers is None else {}
    if view.shape is HeaderShape.PLAIN:
        return view.source
    if view.shape is HeaderShape.PAIRS:
        return {str(name): value for name, value in view.source}

    items = getattr(view.source, "items", None)
    if callable(items):
        return dict(items())
    if hasattr(view.source, "__iter__"):
        return {str(name): value for name, value in view.source}
    raise TypeError(f"Cannot list the entries of {type(headers).__name__} headers")


def find_header(headers: Any, name: str) -> Optional[str]:
    """Return the value of header *name*, matched case-insensitively.

    Args:
        headers: Any supported header container.
        name: Header name, e.g. ``"Retry-After"``.

    Returns:
        The header value converted to ``str``, or ``None`` when absent.
    """
    view = classify_headers(headers)
    wanted = name.lower()

    if view.shape is HeaderShape.EMPTY:
        return None

    if view.shape is HeaderShape.MAPPING:
        value = view.source.get(name)
        if value is None:
            value = view.source.get(wanted)
        return None if value is None else str(value)

    items = view.source.items() if view.shape is HeaderShape.PLAIN else view.source
    for key, value in items:
        if str(key).lower() == wanted and value is not None:
            return str(value)
    return None
