"""Compile operations into tool descriptors.

:func:`compile_tool` handles one ``(path, method, operation)`` triple and is
pure. :func:`compile_document` runs the extractor and compiles every
operation in document order, so compiling the same document twice yields
equal lists.

Tool names are not unique by construction: two operations can fold onto the
same name (``GET /a-b`` and ``GET /a_b``). Collisions are always logged as
warnings. With :attr:`~mcpgen.models.GeneratorOptions.dedupe_names` set,
every later occurrence is renamed ``<name>_2``, ``<name>_3`` and so on.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from mcpgen.compiler.identifiers import derive_tool_name
from mcpgen.compiler.schema import build_input_schema, header_parameters
from mcpgen.models import Document, GeneratorOptions, Operation, ToolDescriptor
from mcpgen.parser.extractor import extract_operations

logger = logging.getLogger(__name__)


def compile_tool(
    path_pattern: str,
    method: str,
    operation: Operation,
) -> ToolDescriptor:
    """Build the :class:`~mcpgen.models.ToolDescriptor` for one operation.

    ``title`` falls back from ``summary`` to ``description`` to
    ``"<METHOD> <path>"``; ``description`` falls back to the resolved title.

    Args:
        path_pattern: Path template, e.g. ``/users/{id}``.
        method: HTTP method, any case.
        operation: The operation view.
    """
    http_method = method.upper()
    name = derive_tool_name(path_pattern, method, operation.operation_id)
    title = operation.summary or operation.description or f"{http_method} {path_pattern}"

    descriptor = ToolDescriptor(
        name=name,
        title=title,
        description=operation.description or title,
        input_schema=build_input_schema(path_pattern, operation),
        http_method=http_method,
        path_pattern=path_pattern,
        header_params=header_parameters(path_pattern, operation),
    )
    logger.debug("Compiled %s %s -> %s", http_method, path_pattern, name)
    return descriptor


def compile_document(
    document: Document | dict[str, Any],
    options: Optional[GeneratorOptions] = None,
) -> list[ToolDescriptor]:
    """Compile every supported operation of *document* into a descriptor.

    Args:
        document: A dereferenced document, as a :class:`~mcpgen.models.Document`
            or a raw mapping.
        options: Supplies the verb set and the ``dedupe_names`` switch.

    Returns:
        Descriptors in document order.
    """
    options = options or GeneratorOptions()
    tools: list[ToolDescriptor] = []
    seen: dict[str, int] = {}

    for ref in extract_operations(document, options.methods):
        tool = compile_tool(ref.path_pattern, ref.method, ref.operation)
        count = seen.get(tool.name, 0) + 1
        seen[tool.name] = count

        if count > 1:
            if options.dedupe_names:
                renamed = _next_free_name(tool.name, count, seen)
                logger.warning(
                    "Tool name %r is already used; %s %s renamed to %r",
                    tool.name, tool.http_method, tool.path_pattern, renamed,
                )
                seen[renamed] = 1
                tool = tool.model_copy(update={"name": renamed})
            else:
                logger.warning(
                    "Tool name %r is used by more than one operation (%s %s)",
                    tool.name, tool.http_method, tool.path_pattern,
                )

        tools.append(tool)

    return tools


def _next_free_name(name: str, count: int, seen: dict[str, int]) -> str:
    candidate = f"{name}_{count}"
    while candidate in seen:
        count += 1
        candidate = f"{name}_{count}"
    return candidate
