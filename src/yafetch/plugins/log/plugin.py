"""Plugins that log each request and its response."""

from __future__ import annotations

import logging
from typing import Any

from yafetch.plugins.base import Plugin
from yafetch.plugins.context import PluginContext

logger = logging.getLogger("yafetch.requests")


def _target(context: PluginContext) -> str:
    url = getattr(context.request, "url", context.request)
    return str(url)


class RequestLogPlugin(Plugin):
    """Logs the method and URL before the call."""

    name = "RequestLog"
    stage = "before"

    def __init__(self, level: int = logging.INFO) -> None:
        self.level = level

    def run(self, context: PluginContext) -> None:
        method = getattr(context.request_options, "method", None) or "GET"
        logger.log(self.level, "--> %s %s", method, _target(context))


class ResponseLogPlugin(Plugin):
    """Logs the status of the final result after the call."""

    name = "ResponseLog"
    stage = "after"

    def __init__(self, level: int = logging.INFO) -> None:
        self.level = level

    def run(self, context: PluginContext) -> Any:
        status = getattr(context.response, "status", None)
        if status is None:
            logger.log(self.level, "<-- %s (no status)", _target(context))
        else:
            logger.log(self.level, "<-- %s %s", status, _target(context))
