"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~mcpgen.exceptions.McpgenError` subclass.
Shell wrappers and CI jobs can inspect the exit code to tell a broken
OpenAPI document apart from a bad flag without parsing stderr.

Example::

    $ mcpgen generate --input broken.yaml --out ./server
    $ echo $?
    7   # EXIT_DOCUMENT_ERROR -- the document could not be loaded
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_DOCUMENT_ERROR = 7
"""The OpenAPI document could not be read, parsed, or dereferenced."""
