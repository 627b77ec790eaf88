"""The add-item flow shared by the browser form."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from sqlalchemy.orm import Session

from ..core.codes import normalize_record
from ..core.errors import DuplicateError, StoreError
from ..core.images import content_type_for, derive_key
from ..crud.equipment import DUPLICATE_CODE, find_by_code, insert_if_unique
from ..models.equipment import Equipment
from .blob_store import BlobStore

logger = logging.getLogger(__name__)


@dataclass
class ImageUpload:
    filename: str
    data: bytes
    content_type: str | None = None


def add_item(
    db: Session,
    blobs: BlobStore,
    form: Mapping[str, Any],
    image: ImageUpload | None = None,
) -> Equipment:
    """Run the add-item flow: validate, check the code, upload the photo, insert.

    A photo that fails to upload does not block the record; it is saved with
    no image reference instead. Validation, duplicate and insert failures
    propagate to the caller.
    """

    record = normalize_record(form)
    if find_by_code(db, record.partial_code) is not None:
        raise DuplicateError(DUPLICATE_CODE)

    if image is not None and image.data:
        key = derive_key(record.partial_code, image.filename)
        try:
            url = blobs.upload_and_publish(image.data, key, content_type_for(key, image.content_type))
        except StoreError:
            logger.warning(
                "image upload failed; saving item without image",
                extra={"extra_data": {"partial_code": record.partial_code}},
            )
        else:
            record = record.model_copy(update={"image_reference": url})

    return insert_if_unique(db, record)
