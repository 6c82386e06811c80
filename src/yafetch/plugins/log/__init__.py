"""Request/response logging plugins."""

from yafetch.plugins.log.plugin import RequestLogPlugin, ResponseLogPlugin

__all__ = ["RequestLogPlugin", "ResponseLogPlugin"]
