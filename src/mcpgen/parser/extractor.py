"""Walk the path/method matrix of a dereferenced document.

The single public entry point is :func:`extract_operations`. It yields one
:class:`~mcpgen.models.OperationRef` per supported ``(path, method)`` pair,
in document order: paths in the order the ``paths`` mapping lists them, and
methods in the order each path item lists its keys. That order is the order
tools appear in the generated server, so it is part of the output contract.

Parameter merging follows OpenAPI: path-level parameters provide defaults and
operation-level parameters replace them when they share ``name`` and ``in``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError

from mcpgen.models import DEFAULT_METHODS, Document, Operation, OperationRef

logger = logging.getLogger(__name__)


def extract_operations(
    document: Document | dict[str, Any],
    methods: Iterable[str] = DEFAULT_METHODS,
) -> list[OperationRef]:
    """Return the ordered operations of *document* for the verbs in *methods*.

    Method keys are matched case-insensitively and reported in lower case.
    Verbs outside *methods* (by default ``head``, ``options`` and ``trace``)
    are skipped, as are non-mapping path items and operations. The input is
    never mutated.

    Args:
        document: A :class:`~mcpgen.models.Document` or a raw dereferenced
            document mapping.
        methods: HTTP verbs to include.

    Returns:
        A list of :class:`~mcpgen.models.OperationRef`. Empty when the
        document has no ``paths``.

    Example::

        for ref in extract_operations(doc):
            print(ref.method.upper(), ref.path_pattern)
    """
    paths = document.paths if isinstance(document, Document) else document.get("paths")
    if not isinstance(paths, dict):
        return []

    wanted = {m.lower() for m in methods}
    refs: list[OperationRef] = []

    for path_pattern, path_item in paths.items():
        if not isinstance(path_item, dict):
            continue

        shared = path_item.get("parameters")
        shared = shared if isinstance(shared, list) else []

        for key, raw_operation in path_item.items():
            method = str(key).lower()
            if method not in wanted or not isinstance(raw_operation, dict):
                continue

            own = raw_operation.get("parameters")
            merged = _merge_parameters(shared, own if isinstance(own, list) else [])
            try:
                operation = Operation.model_validate({**raw_operation, "parameters": merged})
            except ValidationError as exc:
                logger.warning("Skipping %s %s: %s", method.upper(), path_pattern, exc)
                continue

            refs.append(OperationRef(path_pattern=str(path_pattern), method=method, operation=operation))

    return refs


def _merge_parameters(shared: list[Any], own: list[Any]) -> list[Any]:
    """Merge path-level *shared* parameters with operation-level *own* ones."""
    overridden = {_param_key(p) for p in own if isinstance(p, dict)}
    merged = [p for p in shared if not (isinstance(p, dict) and _param_key(p) in overridden)]
    merged.extend(own)
    return merged


def _param_key(param: dict[str, Any]) -> tuple[str, str]:
    return str(param.get("name", "")), str(param.get("in", ""))
