"""Exception hierarchy for infractl.

All exceptions inherit from :class:`InfractlError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`infractl.exit_codes`.
The top-level error handler in :func:`infractl.app.main` catches
``InfractlError``, prints its message as a single line and exits with the
matching code, while unexpected exceptions produce a crash log and exit
with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    InfractlError (exit 1)
    +-- GenerationError            (exit 7)
    |   +-- SpecParseError
    |   +-- UnresolvedReference
    |   +-- UnsupportedSchemaShape
    |   +-- UnsupportedFormat
    |   +-- InvalidFieldName
    +-- UsageError                 (exit 2)
    |   +-- MissingRequiredField
    |   +-- NothingToEdit
    |   +-- InvalidLimit
    |   +-- ConfirmationRequired
    |   +-- ConfirmationMismatch
    +-- ApiError                   (exit 1)
    |   +-- AuthError              (exit 3)
    |   +-- NotFoundError          (exit 4)
    |   +-- ServerError            (exit 5)
    +-- ConnectionError_           (exit 6)
    +-- ConfigError                (exit 10)

Generation errors abort a whole ``infractl generate`` pass: they mean the
API description and the generator have drifted apart, and an incomplete
command set is worse than a failed build.
"""

from __future__ import annotations

from infractl.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONFIG_ERROR,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERATION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SERVER_ERROR,
)


class InfractlError(Exception):
    """Base exception for all infractl errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`infractl.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


# ---------------------------------------------------------------------------
# Generation-time errors
# ---------------------------------------------------------------------------


class GenerationError(InfractlError):
    """Base class for failures while turning an API description into commands."""

    exit_code = EXIT_GENERATION_ERROR


class SpecParseError(GenerationError):
    """Raised when the API description cannot be read, parsed, or validated."""


class UnresolvedReference(GenerationError):
    """Raised when a ``$ref`` names a schema that does not exist or refers to itself."""


class UnsupportedSchemaShape(GenerationError):
    """Raised for schema shapes outside the supported subset.

    Examples are multi-member ``allOf`` compositions, reference chains
    longer than one hop plus one collapse, and nodes without a type.
    """


class UnsupportedFormat(GenerationError):
    """Raised when an integer, number, or string ``format`` has no type mapping."""


class InvalidFieldName(GenerationError):
    """Raised when a parameter or property name is too short to derive a flag from."""


# ---------------------------------------------------------------------------
# Execution-time (user-facing) errors
# ---------------------------------------------------------------------------


class UsageError(InfractlError):
    """Raised for invalid command-line input detected before any API call."""

    exit_code = EXIT_INVALID_USAGE


class MissingRequiredField(UsageError):
    """Raised in non-interactive mode when a required field has no value.

    Args:
        flag: The rendered flag (``-D|--description``) or positional
            (``[disk]``) naming the missing field.
    """

    def __init__(self, flag: str):
        super().__init__(f"{flag} required in non-interactive mode")
        self.flag = flag


class NothingToEdit(UsageError):
    """Raised when an edit command receives no new value at all."""

    def __init__(self, message: str = "nothing to edit: supply at least one new value"):
        super().__init__(message)


class InvalidLimit(UsageError):
    """Raised when ``--limit`` is smaller than one."""

    def __init__(self, message: str = "--limit must be greater than 0"):
        super().__init__(message)


class ConfirmationRequired(UsageError):
    """Raised when a delete runs non-interactively without ``--confirm``."""

    def __init__(self, message: str = "--confirm required when not running interactively"):
        super().__init__(message)


class ConfirmationMismatch(UsageError):
    """Raised when the re-typed name does not match the resource being deleted."""

    def __init__(self, message: str = "mismatched confirmation"):
        super().__init__(message)


# ---------------------------------------------------------------------------
# API and environment errors
# ---------------------------------------------------------------------------


class ApiError(InfractlError):
    """Raised when the API answers with an error the subclasses do not cover.

    The message carries the server's own error text verbatim.
    """

    def __init__(self, message: str, status_code: int | None = None, exit_code: int | None = None):
        super().__init__(message, exit_code=exit_code)
        self.status_code = status_code


class AuthError(ApiError):
    """Raised when the API rejects the token (HTTP 401/403)."""

    exit_code = EXIT_AUTH_FAILURE


class NotFoundError(ApiError):
    """Raised when the API returns HTTP 404 (resource not found)."""

    exit_code = EXIT_NOT_FOUND


class ServerError(ApiError):
    """Raised when the API returns an HTTP 5xx server error."""

    exit_code = EXIT_SERVER_ERROR


class ConnectionError_(InfractlError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class ConfigError(InfractlError):
    """Raised for configuration problems (invalid JSON, missing host or token)."""

    exit_code = EXIT_CONFIG_ERROR
