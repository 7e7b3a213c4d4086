"""Runtime helpers that every generated server carries.

See :mod:`mcpgen.runtime.helpers`.
"""

from mcpgen.runtime.helpers import build_headers, build_request_body, build_url, dispatch

__all__ = ["build_url", "build_headers", "build_request_body", "dispatch"]
