"""Exception hierarchy for postmangen.

All exceptions inherit from :class:`PostmangenError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`postmangen.exit_codes`.
The top-level error handler in :func:`postmangen.app.main` catches
``PostmangenError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    PostmangenError (exit 1)
    +-- InvalidSpecError        (exit 2)
    +-- BodySerializationError  (exit 1)
    +-- ConfigError             (exit 1)
    +-- TargetLoadError         (exit 7)
"""

from postmangen.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_SPEC,
    EXIT_TARGET_LOAD_ERROR,
)


class PostmangenError(Exception):
    """Base exception for all postmangen errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`postmangen.exit_codes`. The entry point catches
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


class InvalidSpecError(PostmangenError):
    """Raised when a route registration is malformed.

    Covers a missing method or path, a record type that is not a dataclass,
    pydantic model or TypedDict, an unmatched ``:variable`` under the strict
    path-variable policy, and any unexpected fault while walking the record
    type (chained as ``__cause__``).
    """

    exit_code = EXIT_INVALID_SPEC


class BodySerializationError(PostmangenError):
    """Raised when the JSON body of a compiled request cannot be encoded."""

    exit_code = EXIT_GENERIC_FAILURE


class ConfigError(PostmangenError):
    """Raised for configuration problems (unreadable file, invalid JSON/YAML, bad values)."""

    exit_code = EXIT_GENERIC_FAILURE


class TargetLoadError(PostmangenError):
    """Raised when the CLI cannot import the module or attribute declaring the routes."""

    exit_code = EXIT_TARGET_LOAD_ERROR
