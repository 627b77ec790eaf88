"""Site gate pages: the passcode form at ``/gate`` and ``/logout``."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from ..core.gate import SITE_SESSION_FLAG, AccessGate, site_gate
from ..core.jinja import get_templates
from ..deps.auth import grant, has_site_access

logger = logging.getLogger(__name__)

router = APIRouter()
templates = get_templates()


@router.get("/gate", response_class=HTMLResponse)
def gate_page(request: Request):
    if has_site_access(request):
        return RedirectResponse(url="/", status_code=302)
    return templates.TemplateResponse(request, "gate.html", {"error": ""})


@router.post("/gate", response_class=HTMLResponse)
def gate_submit(request: Request, passcode: str = Form(""), gate: AccessGate = Depends(site_gate)):
    if not gate.verify(passcode):
        logger.info("passcode.rejected", extra={"extra_data": {"gate": gate.name}})
        return templates.TemplateResponse(request, "gate.html", {"error": "Invalid passcode"}, status_code=401)
    grant(request, SITE_SESSION_FLAG)
    return RedirectResponse(url="/", status_code=303)


@router.get("/logout")
def logout(request: Request):
    request.session.clear()
    return RedirectResponse(url="/gate", status_code=302)
