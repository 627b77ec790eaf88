"""Where equipment photos live.

Two backends share one small contract, :meth:`BlobStore.upload_and_publish`:
write the bytes under the ``equipment/`` prefix, make the object readable by
anyone, and hand back the URL a browser can load it from.

* :class:`LocalBlobStore` keeps files on disk under ``MEDIA_DIR``; the app
  serves that folder at ``/media``. Handy for development and tests.
* :class:`S3BlobStore` talks to S3 (or any S3-compatible service such as R2
  or MinIO) through boto3.

Any failure is logged and re-raised as :class:`StoreError` so driver
exceptions never reach HTTP callers. Nothing here retries.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ..core.config import AppSettings, settings
from ..core.errors import StoreError

logger = logging.getLogger(__name__)

UPLOAD_FAILED = "Failed to upload image"


class BlobStore:
    """Interface every photo backend implements."""

    prefix: str = "equipment"

    def object_path(self, key: str) -> str:
        return f"{self.prefix.strip('/')}/{key}"

    def upload_and_publish(self, data: bytes, key: str, content_type: str) -> str:
        raise NotImplementedError


class LocalBlobStore(BlobStore):
    def __init__(self, root: Path, *, prefix: str = "equipment", url_prefix: str = "/media") -> None:
        self.root = Path(root)
        self.prefix = prefix
        self.url_prefix = url_prefix.rstrip("/")

    def upload_and_publish(self, data: bytes, key: str, content_type: str) -> str:
        path = self.root / self.object_path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp = path.with_suffix(path.suffix + ".tmp")
            tmp.write_bytes(data)
            tmp.replace(path)
            # World-readable is the local equivalent of a public object ACL.
            os.chmod(path, 0o644)
        except OSError as exc:
            logger.exception("local blob write failed for %s", key)
            raise StoreError(UPLOAD_FAILED, details="upload failed") from exc
        logger.info(
            "blob.published",
            extra={"extra_data": {"key": key, "bytes": len(data), "content_type": content_type}},
        )
        return f"{self.url_prefix}/{self.object_path(key)}"


class S3BlobStore(BlobStore):
    def __init__(
        self,
        bucket: str,
        *,
        prefix: str = "equipment",
        region: str | None = None,
        endpoint_url: str | None = None,
        public_base_url: str | None = None,
        client=None,
        access_key: str | None = None,
        secret_key: str | None = None,
    ) -> None:
        self.bucket = bucket
        self.prefix = prefix
        self.region = region
        self.endpoint_url = endpoint_url
        self.public_base_url = public_base_url
        if client is None:
            client = boto3.client(
                "s3",
                region_name=region,
                endpoint_url=endpoint_url,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                config=Config(retries={"max_attempts": 1, "mode": "standard"}),
            )
        self.client = client

    def public_url(self, key: str) -> str:
        path = self.object_path(key)
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{path}"
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket}/{path}"
        region = self.region or "us-east-1"
        return f"https://{self.bucket}.s3.{region}.amazonaws.com/{path}"

    def upload_and_publish(self, data: bytes, key: str, content_type: str) -> str:
        path = self.object_path(key)
        try:
            self.client.put_object(Bucket=self.bucket, Key=path, Body=data, ContentType=content_type)
            self.client.put_object_acl(Bucket=self.bucket, Key=path, ACL="public-read")
        except (BotoCoreError, ClientError) as exc:
            logger.exception("s3 upload failed for %s", path)
            raise StoreError(UPLOAD_FAILED, details="upload failed") from exc
        logger.info(
            "blob.published",
            extra={"extra_data": {"key": key, "bytes": len(data), "content_type": content_type}},
        )
        return self.public_url(key)


def build_blob_store(config: AppSettings) -> BlobStore:
    if config.BLOB_BACKEND == "s3":
        if not config.S3_BUCKET:
            raise RuntimeError("BLOB_BACKEND=s3 requires S3_BUCKET")
        return S3BlobStore(
            config.S3_BUCKET,
            prefix=config.BLOB_PREFIX,
            region=config.S3_REGION,
            endpoint_url=config.S3_ENDPOINT_URL,
            public_base_url=config.S3_PUBLIC_BASE_URL,
            access_key=config.S3_ACCESS_KEY,
            secret_key=config.S3_SECRET_KEY,
        )
    return LocalBlobStore(config.media_dir, prefix=config.BLOB_PREFIX)


@lru_cache(maxsize=1)
def get_blob_store() -> BlobStore:
    """FastAPI dependency returning the configured backend."""

    return build_blob_store(settings)
