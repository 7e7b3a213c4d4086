"""mcpgen -- Generate MCP servers from OpenAPI 3.x documents.

This package compiles every operation of an OpenAPI document into an MCP
*tool*: a name, a description, a JSON input schema, and the HTTP call it
performs. The tools are written out as one standalone Python module that
runs an MCP server over stdio or streamable HTTP.

Typical workflow::

    mcpgen tools --input openapi.yaml            # preview the compiled tools
    mcpgen generate --input openapi.yaml --out ./server
    python ./server/server.py                     # run it

Modules:
    app: Typer application and CLI entry point.
    pipeline: Load, compile, render and write in one call.
    models: Pydantic models shared across the entire package.
    config: Option resolution and data directory helpers.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
