"""Shared-passcode gates for site and write access."""

from __future__ import annotations

import hmac
import logging

from .config import settings

logger = logging.getLogger(__name__)

SITE_SESSION_FLAG = "site_authenticated"
WRITE_SESSION_FLAG = "write_authenticated"


class AccessGate:
    """Shared-secret check. A deterrent for casual visitors, not a credential system."""

    def __init__(self, name: str, secret: str | None) -> None:
        self.name = name
        self._secret = (secret or "").strip()

    @property
    def configured(self) -> bool:
        return bool(self._secret)

    def verify(self, submitted: str | None) -> bool:
        if not self._secret:
            logger.warning("%s gate has no passcode configured; refusing access", self.name)
            return False
        provided = (submitted or "").strip()
        if not provided:
            return False
        return hmac.compare_digest(provided.encode("utf-8"), self._secret.encode("utf-8"))


def site_gate() -> AccessGate:
    return AccessGate("site", settings.SITE_PASSCODE)


def write_gate() -> AccessGate:
    return AccessGate("write", settings.ADMIN_PASSCODE)
