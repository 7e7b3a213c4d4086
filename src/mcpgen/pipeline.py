"""End-to-end generation: document in, server module out.

:func:`generate_server` is what ``mcpgen generate`` calls. It runs the
stages in order:

1. load the document (:func:`~mcpgen.parser.loader.load_document`),
2. check the OpenAPI version and run the advisory validator,
3. inline ``$ref`` pointers,
4. compile tools,
5. render the server module,
6. write ``server.py`` atomically into the output directory.

Validation findings never stop generation; they are returned on the result
and reported by the caller as warnings.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from mcpgen.compiler.tools import compile_document
from mcpgen.config import _atomic_write
from mcpgen.emitter.server import render_server, suggest_server_name
from mcpgen.models import Document, GeneratorOptions, ToolDescriptor
from mcpgen.parser.loader import load_document, validate_document, validate_openapi_version
from mcpgen.parser.resolver import dereference

logger = logging.getLogger(__name__)

SERVER_FILENAME = "server.py"


class GenerationResult(BaseModel):
    """What :func:`generate_server` produced."""

    model_config = ConfigDict(frozen=True)

    name: str
    out_path: Path
    tools: list[ToolDescriptor]
    warnings: list[str] = Field(default_factory=list)


def load_and_compile(
    source: str,
    options: Optional[GeneratorOptions] = None,
) -> tuple[Document, list[ToolDescriptor], list[str]]:
    """Load *source* and compile its tools without writing anything.

    Returns:
        ``(document, tools, warnings)`` where *warnings* are the advisory
        validation findings.

    Raises:
        DocumentError: If the document cannot be loaded, has an
            unsupported version, or holds an unresolvable ``$ref``.
    """
    options = options or GeneratorOptions()
    raw = load_document(source)
    validate_openapi_version(raw)

    report = validate_document(raw)
    for problem in report.errors:
        logger.debug("Validation: %s", problem)

    document = Document.model_validate(dereference(raw))
    tools = compile_document(document, options)
    return document, tools, list(report.errors)


def generate_server(
    source: str,
    out_dir: str | Path,
    name: Optional[str] = None,
    options: Optional[GeneratorOptions] = None,
) -> GenerationResult:
    """Generate ``<out_dir>/server.py`` from the document at *source*.

    Args:
        source: File path, ``http(s)://`` URL, or ``-`` for stdin.
        out_dir: Output directory; created when missing.
        name: Server name. Suggested from ``info.title`` when omitted.
        options: Generation options (defaults when omitted).

    Returns:
        A :class:`GenerationResult`.

    Example::

        result = generate_server("petstore.yaml", "./out")
        print(f"{len(result.tools)} tools -> {result.out_path}")
    """
    options = options or GeneratorOptions()
    document, tools, warnings = load_and_compile(source, options)

    fallback = Path(source).stem if source != "-" and "://" not in source else "openapi"
    server_name = name or suggest_server_name(document, fallback)

    out_path = Path(out_dir) / SERVER_FILENAME
    _atomic_write(out_path, render_server(document, tools, server_name, options))
    logger.debug("Wrote %d tools to %s", len(tools), out_path)

    return GenerationResult(name=server_name, out_path=out_path, tools=tools, warnings=warnings)
