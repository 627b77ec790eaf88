"""ASGI entry point: ``uvicorn ocie_helper.main:app``.

Builds the app once at import, after logging is configured, and adds the
Prometheus ``/metrics`` endpoint and a ``/health`` probe for the container.
"""

from fastapi import FastAPI
from prometheus_fastapi_instrumentator import Instrumentator

from ocie_helper import create_app
from ocie_helper.core.logging import setup_logging

setup_logging()
app: FastAPI = create_app()
instrumentator = Instrumentator(excluded_handlers=["/health", "/metrics", "/static", "/media"])
instrumentator.instrument(app).expose(app, include_in_schema=False)


@app.get("/health")
async def health() -> dict[str, bool]:
    return {"ok": True}
