"""Assemble a standalone MCP server module from compiled tools.

The generated module has a fixed layout:

1. a header docstring and imports (``httpx`` and ``mcp``),
2. server identity and base-URL constants,
3. the runtime helper block, copied from :mod:`mcpgen.runtime.helpers`,
4. the :class:`mcp.server.lowlevel.Server` bootstrap and a small tool
   registry,
5. one ``register_tool(...)`` block per descriptor, in compiled order,
6. the ``list_tools`` / ``call_tool`` handlers,
7. the transport bootstrap (``stdio`` or streamable ``http``).

All document-derived text is written through
:func:`~mcpgen.emitter.literals.render_literal`.
"""

from __future__ import annotations

import inspect
import re
from typing import Optional

from mcpgen import __version__
from mcpgen.emitter.literals import reindent, render_literal
from mcpgen.models import Document, GeneratorOptions, HeaderMode, ToolDescriptor, Transport
from mcpgen.runtime import helpers

DEFAULT_SERVER_VERSION = "1.0.0"


_MODULE_TEMPLATE = '''\
#!/usr/bin/env python3
"""MCP server generated by mcpgen {mcpgen_version}.

Each tool forwards its arguments to one HTTP operation of the source API.
Set the {base_url_env} environment variable to point the server at a
different base URL.
"""

from __future__ import annotations

import json
import os
import re
import sys
from urllib.parse import quote, urlencode

import httpx
import mcp.types as types
from mcp.server.lowlevel import Server

# ------------------------------------------------------------------ #
# Identity
# ------------------------------------------------------------------ #

SERVER_NAME = {server_name}
SERVER_VERSION = {server_version}
API_TITLE = {api_title}

BASE_URL_ENV = {base_url_env_literal}
DEFAULT_BASE_URL = {default_base_url}


# ------------------------------------------------------------------ #
# Request helpers
# ------------------------------------------------------------------ #

{helpers}

# ------------------------------------------------------------------ #
# Tools
# ------------------------------------------------------------------ #

server = Server(SERVER_NAME, version=SERVER_VERSION)

TOOLS = {{}}


def register_tool(name, title, description, input_schema, method, path, header_params=None):
    TOOLS[name] = {{
        "title": title,
        "description": description,
        "input_schema": input_schema,
        "method": method,
        "path": path,
        "header_params": header_params,
    }}


{tool_blocks}

@server.list_tools()
async def list_tools() -> list[types.Tool]:
    return [
        types.Tool(
            name=name,
            title=tool["title"],
            description=tool["description"],
            inputSchema=tool["input_schema"],
        )
        for name, tool in TOOLS.items()
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict) -> types.CallToolResult:
    tool = TOOLS.get(name)
    if tool is None:
        return types.CallToolResult.model_validate(_error_result("Unknown tool: " + name))
    result = await dispatch(
        tool["method"], tool["path"], arguments or {{}}, tool["header_params"]
    )
    return types.CallToolResult.model_validate(result)


# ------------------------------------------------------------------ #
# Transport
# ------------------------------------------------------------------ #

{transport}
'''


_STDIO_TRANSPORT = '''\
async def run() -> None:
    from mcp.server.stdio import stdio_server

    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def main() -> None:
    import anyio

    print(SERVER_NAME + " running on stdio", file=sys.stderr)
    try:
        anyio.run(run)
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
'''


_HTTP_TRANSPORT = '''\
HTTP_PORT = int(os.environ.get("PORT", {http_port}))


def create_app():
    import contextlib

    from mcp.server.streamable_http_manager import StreamableHTTPSessionManager
    from starlette.applications import Starlette
    from starlette.responses import JSONResponse
    from starlette.routing import Mount, Route

    session_manager = StreamableHTTPSessionManager(app=server, stateless=True)

    async def handle_mcp(scope, receive, send):
        await session_manager.handle_request(scope, receive, send)

    async def health(request):
        return JSONResponse({{"status": "ok", "server": SERVER_NAME, "tools": len(TOOLS)}})

    @contextlib.asynccontextmanager
    async def lifespan(app):
        async with session_manager.run():
            yield

    return Starlette(
        routes=[Route("/health", health), Mount("/mcp", app=handle_mcp)],
        lifespan=lifespan,
    )


def main() -> None:
    import uvicorn

    print(SERVER_NAME + " listening on port " + str(HTTP_PORT), file=sys.stderr)
    uvicorn.run(create_app(), host="0.0.0.0", port=HTTP_PORT)


if __name__ == "__main__":
    main()
'''


def render_helpers() -> str:
    """Return the source text of the runtime helper block.

    The text is taken from :mod:`mcpgen.runtime.helpers` itself, so the code
    that runs inside a generated server is the code the test suite covers.
    """
    return "\n\n".join(inspect.getsource(fn).rstrip() + "\n" for fn in helpers.HELPER_FUNCTIONS)


def render_tool_block(tool: ToolDescriptor, options: GeneratorOptions) -> str:
    """Render the ``register_tool(...)`` call for one descriptor."""
    style = options.quote_style
    header_params = tool.header_params if options.header_mode is HeaderMode.DECLARED else None
    fields = [
        ("name", tool.name),
        ("title", tool.title),
        ("description", tool.description),
        ("input_schema", tool.input_schema.to_json_schema()),
        ("method", tool.http_method),
        ("path", tool.path_pattern),
        ("header_params", header_params),
    ]
    lines = [f"    {key}={render_literal(value, style, 1)}," for key, value in fields]
    return "register_tool(\n" + "\n".join(lines) + "\n)\n"


def _default_base_url(document: Document, options: GeneratorOptions) -> str:
    if options.default_base_url:
        return options.default_base_url
    for server_info in document.servers:
        if server_info.url.startswith(("http://", "https://")):
            return server_info.url
    return helpers.DEFAULT_BASE_URL


def render_server(
    document: Document,
    tools: list[ToolDescriptor],
    server_name: str,
    options: Optional[GeneratorOptions] = None,
) -> str:
    """Render the complete server module.

    Args:
        document: The dereferenced document (for title, version, servers).
        tools: Descriptors from :func:`~mcpgen.compiler.tools.compile_document`.
        server_name: Name the server reports to MCP clients.
        options: Formatting, header mode, base URL and transport settings.

    Returns:
        Python source text. Indentation follows ``options.indent_size``.
    """
    options = options or GeneratorOptions()
    style = options.quote_style

    if options.transport is Transport.HTTP:
        transport = _HTTP_TRANSPORT.format(http_port=options.http_port)
    else:
        transport = _STDIO_TRANSPORT

    source = _MODULE_TEMPLATE.format(
        mcpgen_version=__version__,
        base_url_env=options.base_url_env,
        server_name=render_literal(server_name, style),
        server_version=render_literal(document.info.version or DEFAULT_SERVER_VERSION, style),
        api_title=render_literal(document.info.title or server_name, style),
        base_url_env_literal=render_literal(options.base_url_env, style),
        default_base_url=render_literal(_default_base_url(document, options), style),
        helpers=render_helpers(),
        tool_blocks="\n".join(render_tool_block(tool, options) for tool in tools),
        transport=transport,
    )
    return reindent(source, options.indent_size)


def slugify(text: str) -> str:
    """Lower-case *text* and collapse runs of other characters to ``-``."""
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")


def suggest_server_name(document: Document, fallback: str = "openapi") -> str:
    """Suggest a server name from ``info.title``, else from *fallback*.

    >>> suggest_server_name(Document(info={"title": "Pet Store API"}))
    'pet-store-api-mcp'
    """
    base = document.info.title or fallback or "openapi"
    return slugify(f"{base}-mcp")
