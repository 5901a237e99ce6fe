"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~apitester.exceptions.ApitesterError` subclass.
Shell scripts wrapping ``apitester`` can inspect the exit code to tell a
typo in the command line apart from an unreachable server.

Example::

    $ apitester run missing
    Error: No saved test named 'missing'
    $ echo $?
    4   # EXIT_NOT_FOUND -- no saved test with that name
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_NOT_FOUND = 4
"""The requested saved test does not exist."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused, dropped stream)."""

EXIT_INTERRUPTED = 130
"""The user pressed Ctrl-C."""
