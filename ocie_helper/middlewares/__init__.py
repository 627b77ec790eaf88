"""ASGI middleware installed by :func:`ocie_helper.create_app`.

The context vars are re-exported so loggers and access dependencies can read
the current request id and principal without importing the middleware module.
"""

from __future__ import annotations

from .request_id import RequestIdMiddleware, principal_ctx_var, request_id_ctx_var
from .security_headers import SecurityHeadersMiddleware

__all__ = [
    "principal_ctx_var",
    "request_id_ctx_var",
    "RequestIdMiddleware",
    "SecurityHeadersMiddleware",
]
