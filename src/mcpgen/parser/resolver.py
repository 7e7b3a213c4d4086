"""Inline ``$ref`` pointers so the compiler sees a fully dereferenced document.

The compiler never follows references itself: every schema node it receives
is expected to be inline. :func:`dereference` produces that view by walking a
deep copy of the raw document and replacing each internal reference
(``#/components/schemas/Pet``) with the node it points to.

Two cases are deliberately left unresolved:

* **Cycles** -- a schema that (transitively) references itself keeps its
  ``{"$ref": ...}`` mapping at the cycle point. The schema translator treats
  such a node as an unknown type and falls back to ``string``.
* Sibling keys next to ``$ref`` (allowed by OpenAPI 3.1) are laid over the
  resolved target, so a local ``description`` wins over the shared one.

External references (other files or URLs) are not fetched; they raise
:class:`~mcpgen.exceptions.DocumentError`, as does a pointer into a
location that does not exist.
"""

from __future__ import annotations

import copy
from typing import Any

from mcpgen.exceptions import DocumentError


def dereference(raw: dict[str, Any]) -> dict[str, Any]:
    """Return a new document with all resolvable ``$ref`` pointers inlined.

    Args:
        raw: The parsed OpenAPI document, as returned by
            :func:`~mcpgen.parser.loader.load_document`. It is not modified.

    Returns:
        A deep copy with references replaced by their targets.

    Raises:
        DocumentError: On an external reference or a dangling pointer.

    Example::

        doc = dereference(load_document("petstore.yaml"))
        body = doc["paths"]["/pets"]["post"]["requestBody"]
        # body["content"]["application/json"]["schema"] is now inline
    """
    root = copy.deepcopy(raw)
    return _walk(root, root, frozenset())


def resolve_pointer(ref: str, root: dict[str, Any]) -> Any:
    """Follow a single JSON Pointer reference (``#/a/b/0``) inside *root*.

    Handles RFC 6901 escaping (``~1`` is ``/``, ``~0`` is ``~``).

    Raises:
        DocumentError: If *ref* is not internal or any segment is missing.
    """
    if not ref.startswith("#/"):
        raise DocumentError(
            f"External $ref not supported: {ref}. "
            "Bundle the document into a single file first."
        )

    node: Any = root
    for raw_segment in ref[2:].split("/"):
        segment = raw_segment.replace("~1", "/").replace("~0", "~")
        if isinstance(node, dict) and segment in node:
            node = node[segment]
        elif isinstance(node, list) and segment.isdigit() and int(segment) < len(node):
            node = node[int(segment)]
        else:
            raise DocumentError(f"Cannot resolve $ref '{ref}': '{segment}' not found")
    return node


def _walk(node: Any, root: dict[str, Any], active: frozenset[str]) -> Any:
    # ``active`` holds the refs currently being expanded on this branch only,
    # so the same schema may appear in sibling positions without tripping
    # cycle detection.
    if isinstance(node, list):
        return [_walk(item, root, active) for item in node]
    if not isinstance(node, dict):
        return node

    ref = node.get("$ref")
    if isinstance(ref, str):
        if ref in active:
            return node
        target = _walk(resolve_pointer(ref, root), root, active | {ref})
        siblings = {k: _walk(v, root, active) for k, v in node.items() if k != "$ref"}
        if siblings and isinstance(target, dict):
            return {**target, **siblings}
        return target

    return {key: _walk(value, root, active) for key, value in node.items()}
