"""Request-building helpers shared by every generated server.

The functions in this module are real, importable code and are tested
directly. The emitter also copies their source text verbatim into each
generated server module (see :func:`~mcpgen.emitter.render_helpers`), so they
may only refer to names a generated module defines too: the standard
library imports below, :mod:`httpx`, ``BASE_URL_ENV`` and
``DEFAULT_BASE_URL``.

Tool arguments arrive as a flat mapping of property name to value. The three
builders split that mapping into the parts of an HTTP request:

* :func:`build_url` -- path template substitution, query string, base URL.
* :func:`build_headers` -- which arguments are sent as headers.
* :func:`build_request_body` -- the JSON body from the ``body`` argument.

:func:`dispatch` composes them into a single request and turns the outcome
into an MCP tool result.
"""

from __future__ import annotations

import json
import os
import re
from urllib.parse import quote, urlencode

import httpx

BASE_URL_ENV = "API_BASE_URL"
DEFAULT_BASE_URL = "https://api.example.com"


def _to_text(value):
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def build_url(path_pattern, params, base_url=None):
    """Return the absolute URL for *path_pattern* filled from *params*.

    Each ``{name}`` token is replaced by the percent-encoded value of
    ``params[name]``; a token with no value is left as is. Every other
    argument except ``body`` becomes a query pair (lists repeat the key,
    ``None`` is skipped). The base URL is *base_url*, else the
    ``BASE_URL_ENV`` environment variable, else ``DEFAULT_BASE_URL``.
    """
    params = params or {}
    tokens = re.findall(r"\{([^}]+)\}", path_pattern)

    path = path_pattern
    for token in tokens:
        value = params.get(token)
        if value is not None:
            path = path.replace("{" + token + "}", quote(_to_text(value), safe="-_.!~*'()"))

    query = []
    for key, value in params.items():
        if key == "body" or key in tokens or value is None:
            continue
        for item in value if isinstance(value, (list, tuple)) else [value]:
            if item is not None:
                query.append((key, _to_text(item)))

    base = base_url or os.environ.get(BASE_URL_ENV) or DEFAULT_BASE_URL
    url = base.rstrip("/") + "/" + path.lstrip("/")
    if query:
        url += "?" + urlencode(query, quote_via=quote)
    return url


def build_headers(params, header_params=None):
    """Pick the arguments that are sent as HTTP headers.

    With *header_params* (property name to wire name) exactly those
    properties are sent. Without it a naming heuristic applies: a key
    starting with ``header`` (any case) is sent with that prefix and any
    following ``-``, ``_`` or space removed; a key starting with ``x-`` or
    containing ``authorization``, ``token`` or ``key`` is sent unchanged.
    """
    params = params or {}
    headers = {}

    if header_params is not None:
        for prop, wire_name in header_params.items():
            value = params.get(prop)
            if value is not None:
                headers[wire_name] = _to_text(value)
        return headers

    for key, value in params.items():
        if value is None:
            continue
        lowered = key.lower()
        if lowered.startswith("header"):
            name = key[len("header"):].lstrip("-_ ")
            if name:
                headers[name] = _to_text(value)
        elif lowered.startswith("x-") or any(
            hint in lowered for hint in ("authorization", "token", "key")
        ):
            headers[key] = _to_text(value)
    return headers


def build_request_body(params):
    """Return the request body text for the ``body`` argument, or ``None``.

    Strings are sent as given; anything else is serialised as compact JSON.
    """
    body = (params or {}).get("body")
    if body is None:
        return None
    if isinstance(body, str):
        return body
    return json.dumps(body, separators=(",", ":"))


def _error_result(message):
    return {"content": [{"type": "text", "text": "Error: " + message}], "isError": True}


async def dispatch(method, path_pattern, params, header_params=None, client=None):
    """Perform the HTTP request for one tool call and return a tool result.

    Arguments listed in *header_params* are sent only as headers. ``GET``
    requests never carry a body. A non-2xx status, a transport failure or any
    error while building the request is reported as a result with ``isError``
    set rather than raised.

    Args:
        method: HTTP method.
        path_pattern: Path template of the operation.
        params: Tool arguments.
        header_params: Declared header mapping, or ``None`` for the heuristic.
        client: An ``httpx.AsyncClient`` to reuse. A temporary one is
            created and closed when omitted.
    """
    method = method.upper()
    params = dict(params or {})
    url_params = params
    if header_params:
        url_params = {k: v for k, v in params.items() if k not in header_params}

    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(timeout=30.0)
    try:
        url = build_url(path_pattern, url_params)
        headers = {"Content-Type": "application/json"}
        headers.update(build_headers(params, header_params))
        body = None if method == "GET" else build_request_body(params)
        response = await client.request(method, url, headers=headers, content=body)
    except httpx.HTTPError as exc:
        return _error_result(str(exc) or type(exc).__name__)
    except Exception as exc:
        return _error_result(f"{type(exc).__name__}: {exc}")
    finally:
        if owns_client:
            await client.aclose()

    if not response.is_success:
        return _error_result(f"HTTP {response.status_code}: {response.reason_phrase}")
    return {"content": [{"type": "text", "text": response.text}]}


HELPER_FUNCTIONS = (
    _to_text,
    build_url,
    build_headers,
    build_request_body,
    _error_result,
    dispatch,
)
"""Functions copied into generated modules, in definition order."""
