"""Validation and normalisation of submitted equipment records.

Equipment arrives from three places: the JSON API, the browser add-item form
and the bulk importer. All of them funnel through :func:`normalize_record` so
the database only ever sees one shape:

* line item numbers become a list of trimmed codes (split on ``/`` or ``,``);
* the partial NSN becomes exactly four digits;
* optional text fields default to ``""`` and the image reference to ``None``;
* a UTC ``created_at`` timestamp is attached.

Short partial NSNs are rejected instead of zero padded. ``"12"`` could mean
``"0012"`` or a typo of ``"1245"``, and guessing would make the uniqueness
check lie about which item already exists.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .errors import ValidationError

__all__ = [
    "CODE_WIDTH",
    "NormalizedRecord",
    "normalize_partial_code",
    "normalize_record",
    "split_line_items",
]

CODE_WIDTH = 4
MISSING_FIELD = "missing required field"
INVALID_CODE = "invalid code format"

_NON_DIGIT_RE = re.compile(r"\D")
_CODE_RE = re.compile(r"^\d{4}$")
_LIN_SPLIT_RE = re.compile(r"[/,]")

# Field names used by the legacy JSON data files, mapped onto the API names.
LEGACY_FIELD_NAMES = {
    "lin": "lineItemNumbers",
    "nomenclature": "name",
    "partialNsn": "partialCode",
    "anotherName": "alternateName",
    "size": "sizeLabel",
    "image": "imageReference",
}


class NormalizedRecord(BaseModel):
    """A record that passed validation and is ready for the store."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    line_item_numbers: list[str] = Field(min_length=1)
    name: str
    partial_code: str
    alternate_name: str = ""
    size_label: str = ""
    image_reference: str | None = None
    created_at: str


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def split_line_items(raw: str | Iterable[str] | None) -> list[str]:
    """Turn ``"DA150J/B14729, C1"`` (or an already split list) into clean codes."""

    if raw is None:
        return []
    if isinstance(raw, str):
        pieces: Iterable[Any] = _LIN_SPLIT_RE.split(raw)
    else:
        pieces = []
        for item in raw:
            pieces.extend(_LIN_SPLIT_RE.split(_text(item)))
    return [piece.strip() for piece in pieces if piece and piece.strip()]


def normalize_partial_code(raw: str | int | None) -> str:
    """Return the canonical four digit partial NSN.

    Non-digits are stripped and the first four digits kept. Fewer than four
    digits raises :class:`ValidationError` rather than padding, which keeps
    the function idempotent on its own output.
    """

    digits = _NON_DIGIT_RE.sub("", _text(raw))[:CODE_WIDTH]
    if len(digits) < CODE_WIDTH:
        raise ValidationError(INVALID_CODE)
    code = digits.zfill(CODE_WIDTH)
    if not _CODE_RE.match(code):
        raise ValidationError(INVALID_CODE)
    return code


def _utc_now_iso() -> str:
    return datetime.now(tz=timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def normalize_record(candidate: Mapping[str, Any]) -> NormalizedRecord:
    """Validate a raw camelCase payload and return a :class:`NormalizedRecord`."""

    data = {LEGACY_FIELD_NAMES.get(key, key): value for key, value in candidate.items()}

    line_items = split_line_items(data.get("lineItemNumbers"))
    name = _text(data.get("name"))
    raw_code = _text(data.get("partialCode"))
    if not line_items or not name or not raw_code:
        raise ValidationError(MISSING_FIELD)

    image = _text(data.get("imageReference")) or None

    return NormalizedRecord(
        line_item_numbers=line_items,
        name=name,
        partial_code=normalize_partial_code(raw_code),
        alternate_name=_text(data.get("alternateName")),
        size_label=_text(data.get("sizeLabel")),
        image_reference=image,
        created_at=_utc_now_iso(),
    )
