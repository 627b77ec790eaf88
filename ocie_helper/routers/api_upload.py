"""``POST /upload``: store one photo under the partial NSN it belongs to.

The body is multipart with a ``file`` part and an ``nsn`` field. The stored
name is derived from the code, never from the uploaded filename, so a second
upload for the same item replaces the first. The blob write is blocking
(boto3 or disk) and runs in the threadpool.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from starlette.concurrency import run_in_threadpool

from ..core.codes import normalize_partial_code
from ..core.errors import ValidationError
from ..core.images import content_type_for, derive_key
from ..deps.auth import require_write_access
from ..schemas.equipment import UploadOut
from ..services.blob_store import BlobStore, get_blob_store

router = APIRouter(tags=["upload"])


@router.post("/upload", response_model=UploadOut, dependencies=[Depends(require_write_access)])
async def api_upload(
    file: Optional[UploadFile] = File(default=None),
    nsn: Optional[str] = Form(default=None),
    blobs: BlobStore = Depends(get_blob_store),
):
    if file is None or not (file.filename or "").strip() or not (nsn or "").strip():
        raise ValidationError("File and NSN are required")
    key = derive_key(normalize_partial_code(nsn), file.filename)
    data = await file.read()
    if not data:
        raise ValidationError("File and NSN are required")
    url = await run_in_threadpool(blobs.upload_and_publish, data, key, content_type_for(key, file.content_type))
    return UploadOut(filename=key, url=url)
