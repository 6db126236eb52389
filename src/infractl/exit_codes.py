"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~infractl.exceptions.InfractlError` subclass.
Shell wrappers and build scripts can inspect the exit code to tell a
drifted API description apart from a rejected token without parsing
stderr.

Example::

    $ infractl disk delete data -o acme -p web
    $ echo $?
    2   # EXIT_INVALID_USAGE -- --confirm required when not running interactively
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid or missing arguments."""

EXIT_AUTH_FAILURE = 3
"""The API rejected the configured token (HTTP 401/403)."""

EXIT_NOT_FOUND = 4
"""The requested resource was not found (HTTP 404)."""

EXIT_SERVER_ERROR = 5
"""The remote API returned an HTTP 5xx server error."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_GENERATION_ERROR = 7
"""The API description could not be parsed or turned into commands."""

EXIT_CONFIG_ERROR = 10
"""The configuration file is unreadable or holds invalid values."""
