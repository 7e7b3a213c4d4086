"""Schema/tool compiler -- turn OpenAPI operations into MCP tool descriptors.

Typical usage::

    from mcpgen.compiler import compile_document

    tools = compile_document(dereference(load_document("petstore.yaml")))
    for tool in tools:
        print(tool.name, tool.http_method, tool.path_pattern)

Sub-modules:

* :mod:`~mcpgen.compiler.identifiers` -- camelCase identifier folding and
  tool name derivation.
* :mod:`~mcpgen.compiler.schema` -- total schema translation and
  per-operation input schema assembly.
* :mod:`~mcpgen.compiler.tools` -- descriptor construction and
  document-level compilation with collision handling.
"""

from mcpgen.compiler.identifiers import derive_tool_name, to_identifier
from mcpgen.compiler.schema import build_input_schema, translate_schema
from mcpgen.compiler.tools import compile_document, compile_tool

__all__ = [
    "derive_tool_name",
    "to_identifier",
    "translate_schema",
    "build_input_schema",
    "compile_tool",
    "compile_document",
]
