"""Numeric process exit codes for the ``yafetch`` console script.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~yafetch.exceptions.YafetchError` subclass.
Shell wrappers can inspect the exit code to tell a misconfiguration from a
network failure without parsing stderr.

Example::

    $ yafetch /users
    $ echo $?
    3   # EXIT_CONFIG_ERROR -- relative URL without a base URL
"""

EXIT_SUCCESS = 0
"""The request completed (any HTTP status)."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_CONFIG_ERROR = 3
"""Configuration is missing or invalid (base URL, transport, config file)."""

EXIT_TRANSPORT_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_ABORTED = 7
"""The request was cancelled or its URL was rejected before sending."""

EXIT_PLUGIN_ERROR = 10
"""A plugin failed to load or register."""
