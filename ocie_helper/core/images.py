"""Storage keys for equipment photos.

An uploaded photo is stored as ``<partial NSN>.<ext>`` no matter what the
file was called on the user's machine, so the image for an item can always be
found from its code alone.
"""

from __future__ import annotations

import logging

from .errors import ValidationError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = ("jpg", "jpeg", "png", "gif", "webp")
UNSUPPORTED_IMAGE = "unsupported image type"

_CONTENT_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
}


def image_extension(filename: str | None) -> str:
    """Return the lower-cased extension of ``filename`` or raise if not allowed."""

    name = (filename or "").strip()
    if "." not in name:
        raise ValidationError(UNSUPPORTED_IMAGE)
    ext = name.rsplit(".", 1)[1].lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise ValidationError(UNSUPPORTED_IMAGE)
    return ext


def derive_key(code: str, filename: str | None) -> str:
    return f"{code}.{image_extension(filename)}"


def content_type_for(key: str, declared: str | None = None) -> str:
    """Return the type implied by the key's extension.

    The declared upload type never overrides the extension: a ``.png`` that
    claims to be ``image/svg+xml`` is still published as PNG.
    """

    implied = _CONTENT_TYPES[image_extension(key)]
    declared = (declared or "").split(";", 1)[0].strip().lower()
    if declared and declared != implied:
        logger.info("declared type %s ignored for %s", declared, key)
    return implied
