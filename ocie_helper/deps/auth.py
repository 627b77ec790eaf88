"""Session-backed access checks.

Both gates store a grant timestamp in the signed session cookie. The site grant
lasts as long as the cookie (``SESSION_MAX_AGE``). The write grant is scoped to
one page visit: the UI drops it on any full page load that is not the redirect
of one of its own actions (see :func:`revoke_write`), and it expires after
``WRITE_GRANT_MAX_AGE`` seconds even for API callers that never load a page.
"""

from __future__ import annotations

import time

from fastapi import Request

from ..core.config import settings
from ..core.errors import AuthError
from ..core.gate import SITE_SESSION_FLAG, WRITE_SESSION_FLAG
from ..middlewares import principal_ctx_var


def _session(request: Request) -> dict | None:
    try:
        return request.session
    except AssertionError:
        # SessionMiddleware not installed
        return None


def _set_principal(request: Request, principal: str) -> None:
    principal_ctx_var.set(principal)
    request.state.principal = principal


def has_site_access(request: Request) -> bool:
    session = _session(request)
    return bool(session and session.get(SITE_SESSION_FLAG))


def has_write_access(request: Request) -> bool:
    session = _session(request)
    granted_at = session.get(WRITE_SESSION_FLAG) if session else None
    if isinstance(granted_at, bool) or not isinstance(granted_at, (int, float)):
        return False
    return 0 <= time.time() - granted_at <= settings.WRITE_GRANT_MAX_AGE


def grant(request: Request, flag: str) -> None:
    request.session[flag] = int(time.time())


def revoke_write(request: Request) -> None:
    session = _session(request)
    if session is not None:
        session.pop(WRITE_SESSION_FLAG, None)


async def require_site_access(request: Request) -> bool:
    if not has_site_access(request):
        raise AuthError("Authorization required")
    _set_principal(request, "site")
    return True


async def require_write_access(request: Request) -> bool:
    if not has_write_access(request):
        raise AuthError("Authorization required")
    _set_principal(request, "write")
    return True
