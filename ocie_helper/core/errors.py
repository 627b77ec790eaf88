"""Error types and the handlers that turn them into responses.

Handlers raise a :class:`CatalogError` subclass; ``create_app`` registers
:func:`catalog_exception_handler`, which renders every one of them as the same
JSON envelope::

    {"success": false, "code": "...", "error": "...", "details": ...}

Browser requests for UI pages that fail the site gate are redirected to
``/gate`` instead. Request validation errors from FastAPI are 400s, the same
status ``core.codes`` uses for bad input.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, RedirectResponse
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Base class for failures surfaced to HTTP callers."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "error"

    def __init__(self, message: str, *, details: Any | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(CatalogError):
    """Malformed or missing input. The message is shown to the caller verbatim."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"


class DuplicateError(CatalogError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "duplicate"


class AuthError(CatalogError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthorized"

    def __init__(self, message: str = "Invalid passcode", *, details: Any | None = None) -> None:
        super().__init__(message, details=details)


class StoreError(CatalogError):
    """An external store failed. Callers only ever see the generic message."""

    code = "store_error"


class ErrorEnvelope(JSONResponse):
    def __init__(
        self,
        *,
        status_code: int,
        code: str,
        message: str,
        details: Any | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        payload: dict[str, Any] = {"success": False, "code": code, "error": message}
        if details is not None:
            payload["details"] = details
        super().__init__(payload, status_code=status_code, headers=headers)


def _wants_html(request: Request) -> bool:
    accept = (request.headers.get("accept") or "").lower()
    path = request.url.path
    return "text/html" in accept and (path == "/" or path.startswith("/ui"))


async def catalog_exception_handler(request: Request, exc: CatalogError):
    if isinstance(exc, AuthError) and _wants_html(request):
        return RedirectResponse(url="/gate", status_code=302)
    if isinstance(exc, StoreError):
        logger.warning("store failure on %s %s: %s", request.method, request.url.path, exc.message)
    return ErrorEnvelope(status_code=exc.status_code, code=exc.code, message=exc.message, details=exc.details)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    message = detail if isinstance(detail, str) else "Error"
    details = detail if isinstance(detail, dict) else None
    return ErrorEnvelope(status_code=exc.status_code, code="http_error", message=message, details=details)


async def validation_exception_handler(request: Request, exc):  # type: ignore[override]
    from fastapi.exceptions import RequestValidationError

    if isinstance(exc, RequestValidationError):
        return ErrorEnvelope(
            status_code=status.HTTP_400_BAD_REQUEST,
            code="validation_error",
            message="Validation failed",
            details={"errors": jsonable_encoder(exc.errors())},
        )
    raise exc
