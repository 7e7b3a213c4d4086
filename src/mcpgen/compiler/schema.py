"""Translate OpenAPI schema nodes into tool input schemas.

:func:`translate_schema` is total: it accepts *any* value and always returns
an input-schema node. Whatever it cannot interpret (no schema at all, a
leftover ``$ref`` from a cycle, an unknown or missing ``type``) becomes a
bare ``{"type": "string"}``.

:func:`build_input_schema` assembles the top-level ``object`` schema for one
operation from three groups, in this order:

1. path template tokens (always required strings),
2. declared ``query`` and ``header`` parameters,
3. the JSON request body, under the property ``body``.

A property name claimed by an earlier group is never overwritten by a later
one.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

from mcpgen.compiler.identifiers import to_identifier
from mcpgen.models import (
    ArraySchema,
    BooleanSchema,
    InputSchema,
    IntegerSchema,
    NumberSchema,
    ObjectSchema,
    Operation,
    ParameterLocation,
    StringSchema,
)

logger = logging.getLogger(__name__)

_PATH_TOKEN_RE = re.compile(r"\{([^}]+)\}")

BODY_PROPERTY = "body"

_PROMOTED_LOCATIONS = (ParameterLocation.QUERY, ParameterLocation.HEADER)


def _schema_type(node: dict[str, Any]) -> Optional[str]:
    type_value = node.get("type")
    # OpenAPI 3.1 allows ["integer", "null"]
    if isinstance(type_value, list):
        non_null = [t for t in type_value if t != "null"]
        type_value = non_null[0] if non_null else None
    return type_value if isinstance(type_value, str) else None


def _number(value: Any) -> Any:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def translate_schema(node: Any) -> InputSchema:
    """Return the input-schema node for an arbitrary schema *node*.

    Args:
        node: A schema mapping from a dereferenced document, or anything
            else (``None``, a list, a string...).

    Returns:
        One of :class:`~mcpgen.models.StringSchema`,
        :class:`~mcpgen.models.NumberSchema`,
        :class:`~mcpgen.models.IntegerSchema`,
        :class:`~mcpgen.models.BooleanSchema`,
        :class:`~mcpgen.models.ArraySchema` or
        :class:`~mcpgen.models.ObjectSchema`.

    Example::

        >>> translate_schema({"type": "array"}).to_json_schema()
        {'type': 'array', 'items': {'type': 'string'}}
        >>> translate_schema(None).to_json_schema()
        {'type': 'string'}
    """
    if not isinstance(node, dict):
        return StringSchema()

    kind = _schema_type(node)
    description = node.get("description") if isinstance(node.get("description"), str) else None

    if kind == "string":
        enum = node.get("enum")
        fmt = node.get("format")
        return StringSchema(
            description=description,
            enum=list(enum) if isinstance(enum, list) else None,
            format=fmt if isinstance(fmt, str) else None,
        )

    if kind in ("number", "integer"):
        cls = IntegerSchema if kind == "integer" else NumberSchema
        return cls(
            description=description,
            minimum=_number(node.get("minimum")),
            maximum=_number(node.get("maximum")),
        )

    if kind == "boolean":
        return BooleanSchema(description=description)

    if kind == "array":
        items = node.get("items")
        return ArraySchema(
            description=description,
            items=translate_schema(items) if items is not None else StringSchema(),
        )

    if kind == "object":
        properties = node.get("properties")
        if not isinstance(properties, dict):
            return ObjectSchema(description=description, additional_properties=True)
        required = node.get("required")
        return ObjectSchema(
            description=description,
            properties={str(key): translate_schema(value) for key, value in properties.items()},
            required=[str(r) for r in required] if isinstance(required, list) else None,
        )

    return StringSchema()


def _with_description(schema: InputSchema, description: str) -> InputSchema:
    return schema.model_copy(update={"description": description})


def path_tokens(path_pattern: str) -> list[str]:
    """Return the ``{name}`` tokens of *path_pattern* in order of appearance."""
    return _PATH_TOKEN_RE.findall(path_pattern)


def build_input_schema(path_pattern: str, operation: Operation) -> ObjectSchema:
    """Assemble the top-level input schema of one operation.

    Args:
        path_pattern: The operation's path template, e.g. ``/items/{id}``.
        operation: The operation view from the extractor.

    Returns:
        An :class:`~mcpgen.models.ObjectSchema` whose ``properties`` are in
        group order (path, then parameters, then body). ``required`` is
        omitted when nothing is required.
    """
    properties: dict[str, Any] = {}
    required: list[str] = []

    def claim(name: str, schema: InputSchema, is_required: bool, source: str) -> None:
        if name in properties:
            logger.debug(
                "Property %r from %s ignored on %s: already defined", name, source, path_pattern
            )
            return
        properties[name] = schema
        if is_required:
            required.append(name)

    for token in path_tokens(path_pattern):
        claim(
            to_identifier(token),
            StringSchema(description=f"Path parameter: {token}"),
            True,
            "path template",
        )

    for param in operation.parameters:
        if param.location not in _PROMOTED_LOCATIONS:
            continue
        schema = translate_schema(param.schema_)
        description = param.description or schema.description or (
            f"{param.location.value} parameter: {param.name}"
        )
        claim(
            to_identifier(param.name),
            _with_description(schema, description),
            param.required,
            f"{param.location.value} parameter {param.name!r}",
        )

    body = operation.request_body
    if body is not None:
        body_schema = body.json_schema()
        if body_schema is not None:
            claim(
                BODY_PROPERTY,
                _with_description(translate_schema(body_schema), body.description or "Request body"),
                body.required,
                "request body",
            )

    return ObjectSchema(properties=properties, required=required or None)


def header_parameters(path_pattern: str, operation: Operation) -> dict[str, str]:
    """Map property names to wire names for the operation's header parameters.

    Only headers that actually own their property in
    :func:`build_input_schema` are included; a header whose name folds onto
    a path token or an earlier parameter is left out.
    """
    claimed = {to_identifier(token) for token in path_tokens(path_pattern)}
    headers: dict[str, str] = {}
    for param in operation.parameters:
        if param.location not in _PROMOTED_LOCATIONS:
            continue
        name = to_identifier(param.name)
        if name in claimed:
            continue
        claimed.add(name)
        if param.location is ParameterLocation.HEADER:
            headers[name] = param.name
    return headers
