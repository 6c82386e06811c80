"""Process-wide options, option merging, and config loading.

This module owns the one piece of global state in yafetch:

* **Global options** -- a single :class:`~yafetch.models.Options` instance
  holding default method, base URL, headers, transport and plugins. Read it
  with :func:`get_global_options`, replace it with
  :func:`set_global_options`, or mutate it in place. There is no locking
  and no snapshotting. A call reads the fields it needs at fixed points:

  1. :func:`merge_options` reads method, base URL, headers and transport
     when :func:`~yafetch.client.send.send` starts;
  2. the pipeline reads ``plugins`` when it builds the call's chain;
  3. the terminal step reads ``transport`` again if the call's own options
     lost theirs.

  A concurrent change is seen by calls that have not reached the relevant
  read yet and never by calls already past it.

* **Option merging** -- :func:`merge_options` combines the global options
  with per-call options, per-call values winning.

* **Config loading** -- :func:`load_config` resolves a
  :class:`~yafetch.models.ClientConfig` from environment variables and an
  optional JSON file; :func:`apply_config` installs it into the global
  options. Precedence, highest first:

  1. ``YAFETCH_BASE_URL``, ``YAFETCH_METHOD``, ``YAFETCH_TIMEOUT``
  2. the JSON file (explicit path, ``YAFETCH_CONFIG``, or ``./yafetch.json``)
  3. model defaults
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import ValidationError

from yafetch.exceptions import ConfigError
from yafetch.headers import headers_to_dict
from yafetch.models import ClientConfig, Options

logger = logging.getLogger(__name__)

_PROJECT_CONFIG_FILENAME = "yafetch.json"

_ENV_OVERRIDES = {
    "YAFETCH_BASE_URL": "base_url",
    "YAFETCH_METHOD": "method",
    "YAFETCH_TIMEOUT": "timeout",
}


# --- Global options ---


def _default_global_options() -> Options:
    return Options(method="GET")


_global_options: Options = _default_global_options()


def get_global_options() -> Options:
    """Return the process-wide :class:`~yafetch.models.Options` instance."""
    return _global_options


def set_global_options(options: Union[Options, dict[str, Any]]) -> Options:
    """Replace the process-wide options.

    Args:
        options: New options, as a model or a plain dict.

    Returns:
        The installed :class:`~yafetch.models.Options` instance.
    """
    global _global_options
    _global_options = coerce_options(options)
    return _global_options


def reset_global_options() -> Options:
    """Restore the defaults (``GET``, no base URL, no plugins). Used by tests."""
    global _global_options
    _global_options = _default_global_options()
    return _global_options


# --- Merging ---


def coerce_options(options: Union[Options, dict[str, Any], None]) -> Options:
    """Return *options* as an :class:`~yafetch.models.Options` model."""
    if options is None:
        return Options()
    if isinstance(options, Options):
        return options
    try:
        return Options.model_validate(options)
    except ValidationError as exc:
        raise ConfigError(f"Invalid request options: {exc}") from exc


def merge_options(options: Union[Options, dict[str, Any], None] = None) -> Options:
    """Merge per-call *options* over the global options.

    * every field the caller set explicitly wins, even when set to ``None``;
    * headers from both sides are normalised and merged key by key;
    * global ``plugins`` are left out (the pipeline reads them itself);
    * ``method`` falls back to the global method, then ``GET``;
    * ``transport`` falls back to the global transport, then httpx.

    Args:
        options: Per-call options.

    Returns:
        A new :class:`~yafetch.models.Options`; neither input is modified.
    """
    from yafetch.client.transport import httpx_transport

    global_opts = get_global_options()
    opts = coerce_options(options)

    data: dict[str, Any] = dict(global_opts)
    data.pop("plugins", None)

    explicit = set(opts.model_fields_set) | set((opts.model_extra or {}).keys())
    for name in explicit:
        data[name] = getattr(opts, name)

    headers = dict(headers_to_dict(global_opts.headers) or {})
    headers.update(headers_to_dict(opts.headers) or {})
    data["headers"] = headers

    data["method"] = (opts.method or global_opts.method or "GET").upper()
    data["transport"] = opts.transport or global_opts.transport or httpx_transport

    return Options(**data)


# --- Config loading ---


def _find_config_file(path: Optional[Union[str, Path]]) -> Optional[Path]:
    """Resolve the config file location, or ``None`` when there is none."""
    if path is not None:
        return Path(path)
    env_path = os.environ.get("YAFETCH_CONFIG")
    if env_path:
        return Path(env_path)
    local = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if local.is_file():
        return local
    return None


def load_config(path: Optional[Union[str, Path]] = None) -> ClientConfig:
    """Load the client configuration.

    Args:
        path: Explicit JSON config file. When omitted, ``YAFETCH_CONFIG`` is
            consulted, then ``./yafetch.json``.

    Returns:
        The resolved :class:`~yafetch.models.ClientConfig`.

    Raises:
        ConfigError: If an explicitly named file is missing, the file is not
            valid JSON, or the values fail validation.
    """
    data: dict[str, Any] = {}

    config_path = _find_config_file(path)
    if config_path is not None:
        try:
            data = json.loads(config_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            raise ConfigError(f"Config file not found: {config_path}") from None
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigError(f"Cannot read config file {config_path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {config_path} must contain a JSON object")
        logger.debug("Loaded config from %s", config_path)

    for env_var, key in _ENV_OVERRIDES.items():
        value = os.environ.get(env_var)
        if value:
            data[key] = value

    try:
        return ClientConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def apply_config(config: ClientConfig, discover_plugins: bool = True) -> Options:
    """Copy *config* onto the global options.

    Header values from *config* are added to the global headers, replacing
    entries with the same name. When *discover_plugins* is true, plugins
    registered under the ``yafetch.plugins`` entry-point group are loaded
    into the global plugin lists.

    Returns:
        The updated global :class:`~yafetch.models.Options`.
    """
    options = get_global_options()
    if config.base_url:
        options.base_url = config.base_url
    if "method" in config.model_fields_set:
        options.method = config.method.upper()
    if config.timeout is not None:
        options.timeout = config.timeout
    if config.headers:
        headers = dict(headers_to_dict(options.headers) or {})
        headers.update(config.headers)
        options.headers = headers

    if discover_plugins:
        from yafetch.plugins.manager import PluginManager

        PluginManager().discover(config.plugins)

    return options
