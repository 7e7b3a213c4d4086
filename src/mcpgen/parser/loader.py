"""Load OpenAPI documents from a URL, local file, or stdin.

This module handles all I/O for fetching raw OpenAPI documents and turning
them into Python dictionaries. JSON and YAML are both accepted, with the
format guessed from the file extension or response content type and
confirmed by trying the parsers in turn.

Public functions:

* :func:`load_document` -- read and parse a document from any source.
* :func:`validate_openapi_version` -- reject Swagger 2.x and non-3.x inputs.
* :func:`validate_document` -- an *advisory* structural check. Its findings
  are reported as warnings by the pipeline and never stop generation.

After loading, the raw dict goes through
:func:`~mcpgen.parser.resolver.dereference` before it reaches the compiler.
"""

from __future__ import annotations

import json
import re
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from mcpgen.exceptions import DocumentError
from mcpgen.models import HTTPMethod, ParameterLocation, ValidationReport

_PATH_TOKEN_RE = re.compile(r"\{([^}]+)\}")


def load_document(source: str) -> dict[str, Any]:
    """Load an OpenAPI document from a URL, file path, or stdin (``-``).

    Args:
        source: An ``http(s)://`` URL, a file path, or ``-`` for stdin.

    Returns:
        The parsed document as a dictionary.

    Raises:
        DocumentError: If the source cannot be read or parsed.
    """
    if source == "-":
        return _load_from_stdin()
    if source.startswith(("http://", "https://")):
        return _load_from_url(source)
    return _load_from_file(source)


def _load_from_stdin() -> dict[str, Any]:
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise DocumentError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise DocumentError("No input received from stdin")
    return parse_content(content)


def _load_from_url(url: str) -> dict[str, Any]:
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise DocumentError(
            f"HTTP {exc.response.status_code} fetching document from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise DocumentError(f"Failed to fetch document from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"
    return parse_content(response.text, hint=hint)


def _load_from_file(path: str) -> dict[str, Any]:
    file_path = Path(path)
    if not file_path.is_file():
        raise DocumentError(f"Document not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise DocumentError(f"Failed to read {path}: {exc}") from exc

    if not content.strip():
        raise DocumentError(f"Document is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = "json" if suffix == ".json" else "yaml" if suffix in (".yaml", ".yml") else ""
    return parse_content(content, hint=hint)


def parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse *content* as JSON or YAML.

    JSON is tried first unless *hint* is ``"yaml"``; every JSON document is
    also YAML, but the JSON parser is stricter and gives better errors. An
    explicit ``"json"`` hint disables the YAML fallback.

    Raises:
        DocumentError: If neither parser accepts the content, or the top
            level is not a mapping.
    """
    json_error: Exception | None = None

    if hint != "yaml":
        try:
            return _require_mapping(json.loads(content))
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise DocumentError(f"Invalid JSON: {exc}") from exc
            json_error = exc

    try:
        return _require_mapping(yaml.safe_load(content))
    except yaml.YAMLError as exc:
        msg = "Failed to parse document as JSON or YAML"
        if json_error:
            msg += f"\n  JSON error: {json_error}"
        msg += f"\n  YAML error: {exc}"
        raise DocumentError(msg) from exc


def _require_mapping(result: Any) -> dict[str, Any]:
    if not isinstance(result, dict):
        kind = type(result).__name__ if result is not None else "empty document"
        raise DocumentError(f"Document must be a JSON/YAML object (got {kind})")
    return result


def validate_openapi_version(raw: dict[str, Any]) -> str:
    """Return the document's ``openapi`` version string.

    Raises:
        DocumentError: For Swagger 2.x, a missing ``openapi`` field, or a
            major version other than 3.
    """
    if "swagger" in raw:
        raise DocumentError(
            f"Swagger {raw['swagger']} is not supported. "
            "Only OpenAPI 3.x documents can be compiled. "
            "Consider converting with https://converter.swagger.io"
        )

    version = raw.get("openapi")
    if version is None:
        raise DocumentError("Missing 'openapi' field. Is this an OpenAPI 3.x document?")

    version_str = str(version)
    if not version_str.startswith("3."):
        raise DocumentError(f"Unsupported OpenAPI version: {version_str}")
    return version_str


def validate_document(raw: dict[str, Any]) -> ValidationReport:
    """Run an advisory structural check over a raw (not yet dereferenced) document.

    Looks for the problems that most often make a generated server useless:
    missing ``info`` fields, malformed path keys, operations without
    ``responses``, parameters without ``name``/``in``, and path tokens with
    no matching ``in: path`` parameter. None of these are fatal.

    Returns:
        A :class:`~mcpgen.models.ValidationReport`.
    """
    errors: list[str] = []

    try:
        validate_openapi_version(raw)
    except DocumentError as exc:
        errors.append(str(exc))

    info = raw.get("info")
    if not isinstance(info, dict):
        errors.append("Missing 'info' object")
    else:
        for key in ("title", "version"):
            if not info.get(key):
                errors.append(f"Missing info.{key}")

    paths = raw.get("paths")
    if paths is None:
        errors.append("Missing 'paths' object")
        paths = {}
    elif not isinstance(paths, dict):
        errors.append("'paths' must be an object")
        paths = {}

    locations = {loc.value for loc in ParameterLocation}
    verbs = {m.value for m in HTTPMethod}

    for path, path_item in paths.items():
        if not str(path).startswith("/"):
            errors.append(f"Path '{path}' must start with '/'")
        if not isinstance(path_item, dict):
            errors.append(f"Path item for '{path}' must be an object")
            continue

        shared = path_item.get("parameters") if isinstance(path_item.get("parameters"), list) else []
        for method, operation in path_item.items():
            if method.lower() not in verbs:
                continue
            where = f"{method.upper()} {path}"
            if not isinstance(operation, dict):
                errors.append(f"{where}: operation must be an object")
                continue
            if "responses" not in operation:
                errors.append(f"{where}: missing 'responses'")

            declared: set[str] = set()
            params = operation.get("parameters") or []
            for param in [*shared, *(params if isinstance(params, list) else [])]:
                if not isinstance(param, dict) or "$ref" in param:
                    continue
                if not param.get("name"):
                    errors.append(f"{where}: parameter without 'name'")
                if param.get("in") not in locations:
                    errors.append(f"{where}: parameter '{param.get('name')}' has invalid 'in'")
                if param.get("in") == "path":
                    declared.add(str(param.get("name")))

            for token in _PATH_TOKEN_RE.findall(str(path)):
                if token not in declared:
                    errors.append(f"{where}: path token '{{{token}}}' is not declared")

    return ValidationReport(valid=not errors, errors=errors)
