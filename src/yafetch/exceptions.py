"""Exception hierarchy for yafetch.

All exceptions inherit from :class:`YafetchError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`yafetch.exit_codes`.
The console script catches ``YafetchError`` and exits with that code.

Subclass hierarchy::

    YafetchError (exit 1)
    +-- InvalidUsageError    (exit 2)
    +-- ConfigError          (exit 3)
    +-- TransportError       (exit 6)
    +-- AbortError           (exit 7)
    +-- UnescapedPathError   (exit 7)
    +-- PluginError          (exit 10)

Server error responses (non-2xx) are *not* exceptions: they resolve as a
:class:`~yafetch.client.response.Response` with ``ok`` set to ``False``.
"""

from yafetch.exit_codes import (
    EXIT_ABORTED,
    EXIT_CONFIG_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_PLUGIN_ERROR,
    EXIT_TRANSPORT_ERROR,
)


class YafetchError(Exception):
    """Base exception for all yafetch errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(YafetchError):
    """Raised for invalid CLI arguments (malformed header, unknown format)."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(YafetchError):
    """Raised when a relative URL has no base URL, no transport is available,
    or a config file cannot be read."""

    exit_code = EXIT_CONFIG_ERROR


class TransportError(YafetchError):
    """Raised by the default transport on network-level failures.

    Retryable: the retry plugin treats it like any other non-fatal error.
    """

    exit_code = EXIT_TRANSPORT_ERROR


class AbortError(YafetchError):
    """Raised when a request is cancelled through its ``signal``.

    Never retried.
    """

    exit_code = EXIT_ABORTED
    name = "AbortError"
    type = "aborted"


class UnescapedPathError(YafetchError):
    """Raised when the request path holds characters that must be escaped.

    Never retried.
    """

    exit_code = EXIT_ABORTED
    code = "ERR_UNESCAPED_CHARACTERS"

    def __init__(self, message: str = "Request path contains unescaped characters"):
        super().__init__(message)


class PluginError(YafetchError):
    """Raised when a plugin fails to load or is registered twice."""

    exit_code = EXIT_PLUGIN_ERROR
