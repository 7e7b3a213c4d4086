"""Emission -- turn compiled tools into the source of a standalone MCP server.

Sub-modules:

* :mod:`~mcpgen.emitter.literals` -- safe Python literal rendering,
  string escaping and indentation.
* :mod:`~mcpgen.emitter.server` -- the module template, per-tool
  registration blocks, and transport bootstraps.
"""

from mcpgen.emitter.literals import escape_string, render_literal
from mcpgen.emitter.server import render_helpers, render_server, suggest_server_name

__all__ = [
    "escape_string",
    "render_literal",
    "render_helpers",
    "render_server",
    "suggest_server_name",
]
