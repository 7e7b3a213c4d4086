"""Derive tool names and property names from arbitrary labels.

Both tool names and input-schema property names go through
:func:`to_identifier`, which folds a label into lower camelCase and
guarantees the result matches ``^[A-Za-z_][A-Za-z0-9_]*$``:

1. Every run of characters outside ``[A-Za-z0-9]`` is dropped and the
   character after it is upper-cased.
2. The first character is lower-cased.
3. An empty result or one starting with a digit gets a ``param_`` prefix.

The fold is a plain character-class scan so that non-ASCII letters are
treated as separators rather than passed through.

Example::

    >>> to_identifier("list-all users")
    'listAllUsers'
    >>> derive_tool_name("/users/{id}", "get")
    'getUsersId'
"""

from __future__ import annotations

import string
from typing import Optional

_ALNUM = frozenset(string.ascii_letters + string.digits)

IDENTIFIER_PREFIX = "param_"


def camel_fold(label: str) -> str:
    """Collapse separator runs in *label* and camel-case the following character."""
    chars: list[str] = []
    upper_next = False
    for char in label:
        if char not in _ALNUM:
            upper_next = True
            continue
        chars.append(char.upper() if upper_next else char)
        upper_next = False
    if chars:
        chars[0] = chars[0].lower()
    return "".join(chars)


def to_identifier(label: str) -> str:
    """Turn *label* into a valid identifier (see module docstring)."""
    folded = camel_fold(label)
    if not folded or folded[0].isdigit():
        return IDENTIFIER_PREFIX + folded
    return folded


def tool_name_seed(path_pattern: str, method: str) -> str:
    """Build the fallback seed ``<method>_<segments>`` for an operation without an id.

    Path segments are joined with ``_`` after stripping every non-alphanumeric
    character, so a template segment ``{id}`` contributes ``id``. A path with
    no usable segments (``/``) yields ``<method>_root``.
    """
    segments = []
    for segment in path_pattern.split("/"):
        cleaned = "".join(c for c in segment if c in _ALNUM)
        if cleaned:
            segments.append(cleaned)
    return f"{method.lower()}_{'_'.join(segments) or 'root'}"


def derive_tool_name(path_pattern: str, method: str, operation_id: Optional[str] = None) -> str:
    """Return the tool name for an operation.

    The ``operationId`` is used when it is a non-empty string; otherwise the
    name is derived from the method and path. Either way the seed is passed
    through :func:`to_identifier`. Names are not made unique here; see
    :func:`~mcpgen.compiler.tools.compile_document`.
    """
    if operation_id and operation_id.strip():
        return to_identifier(operation_id)
    return to_identifier(tool_name_seed(path_pattern, method))
