"""Bulk loading of an existing equipment list.

Older deployments kept the catalogue in a JSON file with photos in a folder
next to it. :func:`import_records` walks such a file, pushes each photo to the
blob store and inserts the record. A bad item is logged and counted; it never
stops the rest of the run.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping

from sqlalchemy.orm import Session

from ..core.codes import normalize_record
from ..core.errors import CatalogError, DuplicateError, StoreError
from ..core.images import content_type_for, derive_key, image_extension
from ..crud.equipment import find_by_code, insert
from .blob_store import BlobStore

logger = logging.getLogger(__name__)


@dataclass
class ImportReport:
    total: int = 0
    created: int = 0
    skipped: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.failed == 0


def load_items(path: Path) -> list[dict[str, Any]]:
    with Path(path).open("r", encoding="utf-8") as fh:
        data = json.load(fh)
    if isinstance(data, Mapping):
        data = data.get("equipment", data.get("items", []))
    if not isinstance(data, list):
        raise ValueError(f"expected a JSON array of equipment items in {path}")
    return [item for item in data if isinstance(item, Mapping)]


def _image_name(item: Mapping[str, Any]) -> str | None:
    value = item.get("image", item.get("imageReference"))
    if not isinstance(value, str) or not value.strip():
        return None
    return value.strip()


def _upload_image(blobs: BlobStore, image_dir: Path | None, code: str, filename: str) -> str | None:
    if filename.startswith(("http://", "https://")):
        return filename
    if image_dir is None:
        # Keep the bare filename; it is resolved against the media folder when rendered.
        return filename
    path = image_dir / filename
    if not path.is_file():
        logger.warning("image not found: %s", filename)
        return None
    try:
        image_extension(filename)
    except CatalogError:
        logger.warning("skipping unsupported image %s", filename)
        return None
    key = derive_key(code, filename)
    try:
        return blobs.upload_and_publish(path.read_bytes(), key, content_type_for(key))
    except StoreError:
        logger.warning("image upload failed for %s", filename)
        return None


def import_records(
    db: Session,
    blobs: BlobStore,
    items: Iterable[Mapping[str, Any]],
    *,
    image_dir: Path | None = None,
    skip_existing: bool = True,
) -> ImportReport:
    report = ImportReport()
    for index, item in enumerate(items, start=1):
        report.total += 1
        label = item.get("nomenclature") or item.get("name") or f"item {index}"
        try:
            record = normalize_record({k: v for k, v in item.items() if k not in ("image", "imageReference")})
            if skip_existing and find_by_code(db, record.partial_code) is not None:
                raise DuplicateError(f"partial NSN {record.partial_code} already exists")
            filename = _image_name(item)
            if filename:
                url = _upload_image(blobs, image_dir, record.partial_code, filename)
                record = record.model_copy(update={"image_reference": url})
            insert(db, record)
        except DuplicateError as exc:
            report.skipped += 1
            logger.info("import.skipped", extra={"extra_data": {"item": str(label), "reason": exc.message}})
        except CatalogError as exc:
            report.failed += 1
            report.errors.append(f"[{index}] {label}: {exc.message}")
            logger.warning("import.failed", extra={"extra_data": {"item": str(label), "reason": exc.message}})
        else:
            report.created += 1
            logger.info("import.created", extra={"extra_data": {"item": str(label), "index": index}})
    return report
