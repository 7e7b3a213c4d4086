"""Render Python values as source literals for generated modules.

Everything the emitter writes from document data (titles, descriptions,
input schemas, path templates) goes through :func:`render_literal`, so a
document can never inject code or break the syntax of a generated server.

Generated source is first rendered with four-space indentation and then
converted to the configured width by :func:`reindent`.
"""

from __future__ import annotations

import math
import re
from typing import Any

from mcpgen.models import QuoteStyle

BASE_INDENT = 4

_LEADING_SPACES_RE = re.compile(r"^( +)", re.MULTILINE)


def quote_char(style: QuoteStyle) -> str:
    return "'" if style is QuoteStyle.SINGLE else '"'


def escape_string(text: str, quote: str = '"') -> str:
    """Escape *text* for use between two *quote* characters.

    Backslashes, the active quote, and line breaks are always escaped. Other
    control characters and lone surrogates are written as ``\\x``/``\\u``
    escapes so the generated file stays valid UTF-8 source.

    >>> escape_string('say "hi"\\n')
    'say \\\\"hi\\\\"\\\\n'
    """
    out: list[str] = []
    for char in text:
        code = ord(char)
        if char == "\\":
            out.append("\\\\")
        elif char == quote:
            out.append("\\" + quote)
        elif char == "\n":
            out.append("\\n")
        elif char == "\r":
            out.append("\\r")
        elif char == "\t":
            out.append("\\t")
        elif code < 0x20 or code == 0x7F:
            out.append(f"\\x{code:02x}")
        elif 0xD800 <= code <= 0xDFFF:
            out.append(f"\\u{code:04x}")
        else:
            out.append(char)
    return "".join(out)


def render_literal(value: Any, style: QuoteStyle = QuoteStyle.DOUBLE, level: int = 0) -> str:
    """Render *value* as a Python literal.

    Non-empty dicts and lists are spread over several lines with trailing
    commas; nested lines are indented relative to *level*. Types without a
    literal form are rendered from their ``str()``.
    """
    if value is None or isinstance(value, bool):
        return repr(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return f'float("{value}")'
        return repr(value)
    if isinstance(value, str):
        q = quote_char(style)
        return f"{q}{escape_string(value, q)}{q}"

    pad = " " * (BASE_INDENT * (level + 1))
    close = " " * (BASE_INDENT * level)

    if isinstance(value, dict):
        if not value:
            return "{}"
        lines = [
            f"{pad}{render_literal(str(k), style)}: {render_literal(v, style, level + 1)},"
            for k, v in value.items()
        ]
        return "{\n" + "\n".join(lines) + f"\n{close}}}"

    if isinstance(value, (list, tuple)):
        if not value:
            return "[]"
        lines = [f"{pad}{render_literal(v, style, level + 1)}," for v in value]
        return "[\n" + "\n".join(lines) + f"\n{close}]"

    return render_literal(str(value), style, level)


def reindent(source: str, indent_size: int) -> str:
    """Convert four-space indentation in *source* to *indent_size* spaces."""
    if indent_size == BASE_INDENT:
        return source

    def _swap(match: re.Match[str]) -> str:
        levels, rest = divmod(len(match.group(1)), BASE_INDENT)
        return " " * (levels * indent_size + rest)

    return _LEADING_SPACES_RE.sub(_swap, source)
