"""Exception hierarchy for apitester.

All exceptions inherit from :class:`ApitesterError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`apitester.exit_codes`.
Command handlers in :mod:`apitester.app` catch ``ApitesterError``, print the
message and exit with the matching code, while unexpected exceptions produce
a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    ApitesterError (exit 1)
    +-- InvalidUsageError       (exit 2)
    |   +-- RequestBuildError   (exit 2)
    +-- NotFoundError           (exit 4)
    +-- ConnectionError_        (exit 6)
    |   +-- ResponseReadError   (exit 6)
    +-- StoreError              (exit 1)
"""

from apitester.exit_codes import (
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
)


class ApitesterError(Exception):
    """Base exception for all apitester errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`apitester.exit_codes`.

    Args:
        message: Human-readable error description printed to the terminal.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(ApitesterError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class RequestBuildError(InvalidUsageError):
    """Raised when a request cannot be constructed (bad method or URL)."""


class NotFoundError(ApitesterError):
    """Raised when a saved test name is not present in the store."""

    exit_code = EXIT_NOT_FOUND


class ConnectionError_(ApitesterError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused, TLS).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class ResponseReadError(ConnectionError_):
    """Raised when the connection drops while the response body is being read."""


class StoreError(ApitesterError):
    """Raised when the saved-test file cannot be read, parsed, or written."""

    exit_code = EXIT_GENERIC_FAILURE
