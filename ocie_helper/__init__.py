"""Application factory and top-level wiring for OCIE Helper.

This module brings together configuration, the database, HTML templates,
routers, middleware and error handling. Reading ``create_app`` top to bottom
shows every piece that takes part in serving a request.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from .core.config import settings
from .core.errors import (
    CatalogError,
    catalog_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from .db.session import Base, engine
from .middlewares import RequestIdMiddleware, SecurityHeadersMiddleware

# Importing the models registers them with the metadata so ``create_all`` sees them.
from .models import equipment as _equipment  # noqa: F401


def create_app() -> FastAPI:
    app = FastAPI(title=settings.APP_NAME)

    app.mount("/static", StaticFiles(directory=str(settings.static_dir)), name="static")
    # Photos saved by the local blob backend are published by this mount.
    app.mount("/media", StaticFiles(directory=str(settings.media_dir)), name="media")

    Base.metadata.create_all(bind=engine)

    # ---------- Middleware (last added runs first) ----------
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.APP_SECRET,
        session_cookie=settings.SESSION_COOKIE_NAME,
        max_age=settings.SESSION_MAX_AGE,
        same_site="lax",
        https_only=False,  # set True once the app is always accessed via HTTPS at the edge
    )
    if settings.allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.allowed_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
        )
    app.add_middleware(RequestIdMiddleware)

    # ---------- Routers ----------
    from .routers import api_auth, api_equipment, api_upload, auth_ui, ui

    app.include_router(auth_ui.router)
    app.include_router(ui.router)
    app.include_router(api_auth.router)
    app.include_router(api_equipment.router)
    app.include_router(api_upload.router)

    # ---------- Exception handling ----------
    app.add_exception_handler(CatalogError, catalog_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    return app


__all__ = ["create_app"]
