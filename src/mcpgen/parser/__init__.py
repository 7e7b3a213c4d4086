"""OpenAPI document parser -- load, dereference, and walk operations.

Typical usage::

    from mcpgen.parser import dereference, extract_operations, load_document

    raw = load_document("https://petstore3.swagger.io/api/v3/openapi.json")
    for ref in extract_operations(dereference(raw)):
        print(ref.method, ref.path_pattern)

Sub-modules:

* :mod:`~mcpgen.parser.loader` -- I/O (URL, file, stdin), JSON/YAML
  parsing, version check, and advisory validation.
* :mod:`~mcpgen.parser.resolver` -- internal ``$ref`` inlining with cycle
  detection.
* :mod:`~mcpgen.parser.extractor` -- ordered ``(path, method, operation)``
  extraction.
"""

from mcpgen.parser.extractor import extract_operations
from mcpgen.parser.loader import load_document, validate_document, validate_openapi_version
from mcpgen.parser.resolver import dereference

__all__ = [
    "load_document",
    "validate_document",
    "validate_openapi_version",
    "dereference",
    "extract_operations",
]
