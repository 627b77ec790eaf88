"""Passcode endpoints for API clients.

``POST /auth/verify-site`` and ``POST /auth/verify-write`` check a submitted
passcode against the matching :class:`AccessGate` and, on success, record the
grant in the signed session cookie. A blank passcode is a 400, a wrong one a
401 with the generic "Invalid passcode" message. Passcodes are never logged.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request

from ..core.errors import AuthError, ValidationError
from ..core.gate import SITE_SESSION_FLAG, WRITE_SESSION_FLAG, AccessGate, site_gate, write_gate
from ..deps.auth import grant
from ..schemas.auth import PasscodeRequest, VerifyResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _check(request: Request, payload: PasscodeRequest, gate: AccessGate, flag: str) -> VerifyResponse:
    if not (payload.passcode or "").strip():
        raise ValidationError("Passcode is required")
    if not gate.verify(payload.passcode):
        logger.info("passcode.rejected", extra={"extra_data": {"gate": gate.name}})
        raise AuthError()
    grant(request, flag)
    logger.info("passcode.accepted", extra={"extra_data": {"gate": gate.name}})
    return VerifyResponse(success=True)


@router.post("/verify-write", response_model=VerifyResponse, summary="Unlock add-item for this session")
async def verify_write(request: Request, payload: PasscodeRequest, gate: AccessGate = Depends(write_gate)):
    return _check(request, payload, gate, WRITE_SESSION_FLAG)


@router.post("/verify-site", response_model=VerifyResponse, summary="Unlock the site for this browser")
async def verify_site(request: Request, payload: PasscodeRequest, gate: AccessGate = Depends(site_gate)):
    return _check(request, payload, gate, SITE_SESSION_FLAG)
