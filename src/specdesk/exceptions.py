"""Exception hierarchy for specdesk.

All exceptions inherit from :class:`SpecdeskError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`specdesk.exit_codes`.
The top-level handler in :func:`specdesk.app.main` catches ``SpecdeskError``
and exits with that code; anything else produces a crash log.

Relay failures additionally carry the HTTP ``status_code`` the relay answers
with, so the FastAPI layer can turn any :class:`RelayError` into a response
without a lookup table.

Subclass hierarchy::

    SpecdeskError (exit 1)
    +-- InvalidUsageError      (exit 2)
    +-- NotFoundError          (exit 4)
    +-- RequestFailedError     (exit 6)
    +-- SpecParseError         (exit 7)
    +-- ConfigError            (exit 1)
    +-- RelayError             (exit 1, HTTP 502)
        +-- RelayPayloadError      (HTTP 400)
        +-- HostNotAllowedError    (HTTP 403)
        +-- MethodNotAllowedError  (HTTP 405)
        +-- UpstreamTimeoutError   (HTTP 504)
        +-- UpstreamFailedError    (HTTP 502)
"""

from specdesk.exit_codes import (
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SPEC_PARSE_ERROR,
)


class SpecdeskError(Exception):
    """Base exception for all specdesk errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SpecdeskError):
    """Raised for invalid CLI arguments (bad ``key=value`` pairs, unknown snippet language)."""

    exit_code = EXIT_INVALID_USAGE


class NotFoundError(SpecdeskError):
    """Raised when an operation id is not present in the catalog."""

    exit_code = EXIT_NOT_FOUND


class RequestFailedError(SpecdeskError):
    """Raised when an outbound request fails before a response arrives."""

    exit_code = EXIT_CONNECTION_ERROR


class SpecParseError(SpecdeskError):
    """Raised when the API document cannot be loaded or is not a usable document."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class ConfigError(SpecdeskError):
    """Raised for configuration problems (invalid JSON, bad credential sources)."""

    exit_code = EXIT_GENERIC_FAILURE


class RelayError(SpecdeskError):
    """Base class for relay rejections and upstream failures."""

    status_code: int = 502


class RelayPayloadError(RelayError):
    """The relay payload is not valid JSON or has no usable target URL."""

    status_code = 400


class HostNotAllowedError(RelayError):
    """The target is not HTTPS or its host is outside the allow-list."""

    status_code = 403


class MethodNotAllowedError(RelayError):
    """The requested HTTP method is not forwarded by the relay."""

    status_code = 405


class UpstreamTimeoutError(RelayError):
    """The upstream did not answer within the relay timeout."""

    status_code = 504


class UpstreamFailedError(RelayError):
    """Any other transport-level failure talking to the upstream."""

    status_code = 502
