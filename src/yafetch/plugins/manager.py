"""Entry-point discovery and registration of global plugins.

Third-party packages publish plugins under the ``yafetch.plugins``
entry-point group, pointing at a plugin class or a zero-argument factory::

    [project.entry-points."yafetch.plugins"]
    request-id = "my_package.plugins:RequestIdPlugin"

:class:`PluginManager` loads them, filters them through the
:class:`~yafetch.models.PluginDiscoveryConfig` allow/block lists and appends
each instance to the global plugin list named by its ``stage``. From then on
the plugin runs for every call unless the call skips it by name.
"""

from __future__ import annotations

import importlib.metadata
import logging
from typing import Any

from yafetch.config import get_global_options
from yafetch.exceptions import PluginError
from yafetch.models import PluginDiscoveryConfig, PluginsConfig
from yafetch.plugins.chain import STAGES

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "yafetch.plugins"


def _is_selected(name: str, config: PluginDiscoveryConfig) -> bool:
    if config.enabled and name not in config.enabled:
        logger.debug("Entry point '%s' is not enabled", name)
        return False
    if name in config.disabled:
        logger.debug("Entry point '%s' is disabled", name)
        return False
    return True


class PluginManager:
    """Tracks the plugins it put into the global options.

    Example::

        manager = PluginManager()
        manager.discover(PluginDiscoveryConfig(disabled=["noisy"]))
        manager.register("trace", FunctionPlugin("trace", record_call))
    """

    def __init__(self) -> None:
        self._registered: dict[str, Any] = {}

    def discover(self, config: PluginDiscoveryConfig) -> list[str]:
        """Instantiate and register the selected ``yafetch.plugins`` entry points.

        An entry point that cannot be imported, instantiated or registered
        is reported as a warning and skipped; discovery never aborts a call.

        Returns:
            The entry-point names that were registered, in discovery order.
        """
        registered: list[str] = []
        for ep in importlib.metadata.entry_points(group=ENTRY_POINT_GROUP):
            if not _is_selected(ep.name, config):
                continue
            try:
                self.register(ep.name, ep.load()())
            except Exception as exc:
                logger.warning("Failed to load plugin '%s': %s", ep.name, exc)
            else:
                registered.append(ep.name)
        return registered

    def register(self, name: str, plugin: Any) -> None:
        """Append *plugin* to the global list for its ``stage``.

        Raises:
            PluginError: If *name* is taken, or ``plugin.stage`` is not one
                of ``before``, ``wrap`` or ``after``.
        """
        if name in self._registered:
            raise PluginError(f"Plugin '{name}' is already loaded")
        stage = getattr(plugin, "stage", None)
        if stage not in STAGES:
            raise PluginError(f"Plugin '{name}' has an unknown stage: {stage!r}")

        options = get_global_options()
        if options.plugins is None:
            options.plugins = PluginsConfig()
        getattr(options.plugins, stage).append(plugin)
        self._registered[name] = plugin
        logger.info("Registered %s plugin '%s'", stage, name)

    def unregister(self, name: str) -> None:
        """Take a plugin registered here out of the global options.

        Raises:
            PluginError: If this manager never registered *name*.
        """
        plugin = self.get_plugin(name)
        del self._registered[name]

        stage_list = getattr(get_global_options().plugins, plugin.stage, None)
        if stage_list and plugin in stage_list:
            stage_list.remove(plugin)

    def get_plugin(self, name: str) -> Any:
        if name not in self._registered:
            raise PluginError(f"Plugin '{name}' is not loaded")
        return self._registered[name]

    def list_plugins(self) -> list[dict[str, str]]:
        """Describe registered plugins as ``name``, ``plugin`` and ``stage``."""
        return [
            {"name": name, "plugin": plugin.name, "stage": plugin.stage}
            for name, plugin in self._registered.items()
        ]

    def clear(self) -> None:
        for name in list(self._registered):
            self.unregister(name)
