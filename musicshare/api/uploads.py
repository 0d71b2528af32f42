"""
Validation and storage of multipart media uploads (audio + optional cover).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from fastapi import UploadFile

from musicshare.api import config
from musicshare.api.assets import S3AssetHost, UploadedAsset
from musicshare.api.errors import Invalid, ServiceError

logger = logging.getLogger(__name__)

_AUDIO_FALLBACK_TYPES = {"application/octet-stream"}


@dataclass
class StoredMedia:
    audio: UploadedAsset
    image: Optional[UploadedAsset]

    def asset_ids(self) -> List[str]:
        ids = [self.audio.asset_id]
        if self.image is not None:
            ids.append(self.image.asset_id)
        return ids


# PUBLIC_INTERFACE
def require_text(value: Optional[str], field: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise Invalid(f"{field} is required.")
    return cleaned


def _read_upload(upload: UploadFile, kind: str) -> Tuple[bytes, str]:
    limit = config.max_upload_bytes()
    # One byte past the limit is enough to tell an oversized file apart.
    content = upload.file.read(limit + 1)
    if len(content) == 0:
        raise Invalid(f"Empty {kind} file.")
    if len(content) > limit:
        raise Invalid(
            f"File is too large. Maximum size is {limit // (1024 * 1024)}MB.",
            code="payload_too_large",
            status_code=413,
        )
    return content, (upload.content_type or "").lower()


# PUBLIC_INTERFACE
def read_audio(upload: Optional[UploadFile]) -> Tuple[bytes, str]:
    """Return (bytes, content type) of an audio upload, rejecting non-audio payloads."""
    if upload is None:
        raise Invalid("No audio file provided.")
    content, content_type = _read_upload(upload, "audio")
    if not (content_type.startswith("audio/") or content_type in _AUDIO_FALLBACK_TYPES):
        raise Invalid("Please upload a valid audio file.")
    return content, content_type or "audio/mpeg"


# PUBLIC_INTERFACE
def read_image(upload: Optional[UploadFile]) -> Optional[Tuple[bytes, str]]:
    """Return (bytes, content type) of an optional cover image upload."""
    if upload is None or not upload.filename:
        return None
    content, content_type = _read_upload(upload, "image")
    if not content_type.startswith("image/"):
        raise Invalid("Cover must be an image file.")
    return content, content_type


# PUBLIC_INTERFACE
def store_media(
    assets: S3AssetHost,
    audio: Tuple[bytes, str],
    image: Optional[Tuple[bytes, str]],
) -> StoredMedia:
    """
    Push the audio (and cover, if any) to the asset host.

    If the cover upload fails the already stored audio is destroyed before the
    error propagates.
    """
    stored_audio = assets.upload(audio[0], audio[1], config.asset_audio_folder())
    stored_image = None
    if image is not None:
        try:
            stored_image = assets.upload(image[0], image[1], config.asset_image_folder())
        except ServiceError:
            discard_media(assets, [stored_audio.asset_id])
            raise
    return StoredMedia(audio=stored_audio, image=stored_image)


# PUBLIC_INTERFACE
def discard_media(assets: S3AssetHost, asset_ids: List[str]) -> None:
    """
    Best-effort deletion of assets no database row refers to any more.

    Host failures are logged and leave the object orphaned; they never fail
    the request.
    """
    for asset_id in asset_ids:
        try:
            assets.destroy(asset_id)
        except ServiceError:
            logger.warning("orphan_asset_left: asset_id=%s", asset_id)
