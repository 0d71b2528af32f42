"""
Client for the external asset host that stores audio files and cover images.

Any S3-compatible object store works (AWS S3, MinIO, R2). Objects are written
under ``<folder>/<random>.<ext>``; the object key doubles as the asset id used
for deletion.
"""

from __future__ import annotations

import logging
import mimetypes
import uuid
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from musicshare.api import config
from musicshare.api.errors import UpstreamFailure

logger = logging.getLogger(__name__)

_MISSING_OBJECT_CODES = {"NoSuchKey", "404", "NotFound"}


@dataclass(frozen=True)
class UploadedAsset:
    url: str
    asset_id: str


class S3AssetHost:
    """Uploads and deletes media objects in one bucket."""

    def __init__(
        self,
        client: Any,
        bucket: str,
        *,
        public_base_url: Optional[str] = None,
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
    ):
        self.client = client
        self.bucket = bucket
        self.public_base_url = public_base_url
        self.region = region
        self.endpoint_url = endpoint_url

    def _object_url(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url}/{key}"
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket}/{key}"
        region = self.region or "us-east-1"
        return f"https://{self.bucket}.s3.{region}.amazonaws.com/{key}"

    def upload(self, data: bytes, content_type: str, folder: str) -> UploadedAsset:
        """Store ``data`` and return its durable URL and asset id."""
        ext = mimetypes.guess_extension(content_type or "") or ""
        key = f"{folder.strip('/')}/{uuid.uuid4().hex}{ext}"
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type or "application/octet-stream",
            )
        except (BotoCoreError, ClientError) as exc:
            logger.exception("asset_upload_failed: bucket=%s key=%s", self.bucket, key)
            raise UpstreamFailure(f"Asset upload failed ({exc.__class__.__name__}).")

        logger.info("asset_uploaded: bucket=%s key=%s size=%d", self.bucket, key, len(data))
        return UploadedAsset(url=self._object_url(key), asset_id=key)

    def destroy(self, asset_id: str) -> bool:
        """
        Delete an asset. Deleting one that is already gone is not an error.

        Returns False when the host reported the object as missing.
        """
        try:
            self.client.delete_object(Bucket=self.bucket, Key=asset_id)
        except ClientError as exc:
            code = str(exc.response.get("Error", {}).get("Code", ""))
            if code in _MISSING_OBJECT_CODES:
                logger.warning("asset_already_absent: bucket=%s key=%s", self.bucket, asset_id)
                return False
            logger.exception("asset_destroy_failed: bucket=%s key=%s code=%s", self.bucket, asset_id, code)
            raise UpstreamFailure(f"Asset deletion failed ({code or 'ClientError'}).")
        except BotoCoreError as exc:
            logger.exception("asset_destroy_failed: bucket=%s key=%s", self.bucket, asset_id)
            raise UpstreamFailure(f"Asset deletion failed ({exc.__class__.__name__}).")

        logger.info("asset_destroyed: bucket=%s key=%s", self.bucket, asset_id)
        return True


@lru_cache(maxsize=1)
def _default_host() -> S3AssetHost:
    bucket = config.asset_bucket()
    region = config.asset_region()
    endpoint_url = config.asset_endpoint_url()
    client = boto3.client("s3", region_name=region, endpoint_url=endpoint_url)
    return S3AssetHost(
        client,
        bucket,
        public_base_url=config.asset_public_base_url(),
        region=region,
        endpoint_url=endpoint_url,
    )


# PUBLIC_INTERFACE
def get_asset_host() -> S3AssetHost:
    """FastAPI dependency returning the process-wide asset host client."""
    try:
        return _default_host()
    except RuntimeError as exc:
        raise UpstreamFailure(str(exc))
