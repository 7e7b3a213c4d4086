"""Exception hierarchy for mcpgen.

All exceptions inherit from :class:`McpgenError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`mcpgen.exit_codes`.
The top-level error handler in :func:`mcpgen.app.main` catches
``McpgenError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    McpgenError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- DocumentError       (exit 7)
    +-- ConfigError         (exit 1)

Incomplete schema nodes are never errors: the schema translator resolves them
with fallback typing. Failed HTTP calls inside a generated server are turned
into error content items by :func:`mcpgen.runtime.helpers.dispatch` and never
surface as exceptions either.
"""

from mcpgen.exit_codes import (
    EXIT_DOCUMENT_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
)


class McpgenError(Exception):
    """Base exception for all mcpgen errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(McpgenError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class DocumentError(McpgenError):
    """Raised when the OpenAPI document cannot be loaded, parsed, or dereferenced.

    This is fatal and always surfaces before compilation starts.
    """

    exit_code = EXIT_DOCUMENT_ERROR


class ConfigError(McpgenError):
    """Raised for configuration problems (invalid project config, bad option values)."""

    exit_code = EXIT_GENERIC_FAILURE
