from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class PasscodeRequest(BaseModel):
    passcode: Optional[str] = None

    model_config = {
        "json_schema_extra": {
            "example": {"passcode": "shared-secret"}
        },
    }


class VerifyResponse(BaseModel):
    success: bool

    model_config = {
        "json_schema_extra": {
            "example": {"success": True}
        }
    }
