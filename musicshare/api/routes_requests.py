"""
Song request endpoints:
- POST /api/song-requests (any authenticated user submits a candidate song)
- GET /api/song-requests (admin; pending requests)
- POST /api/song-requests/{id}/accept (admin; promotes the request to a catalog song)
- DELETE /api/song-requests/{id}/decline (admin; drops the request and its media)
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from musicshare.api import config
from musicshare.api.assets import S3AssetHost, get_asset_host
from musicshare.api.auth import get_current_user, require_admin
from musicshare.api.catalog import UNKNOWN_UPLOADER, song_response
from musicshare.api.errors import Conflict, NotFound
from musicshare.api.models import SongRequest, SongRequestStatus, User
from musicshare.api.repositories import (
    SongRepository,
    SongRequestRepository,
    song_repository,
    song_request_repository,
)
from musicshare.api.schemas import MessageResponse, SongRequestListResponse, SongRequestResponse, SongResponse
from musicshare.api.uploads import discard_media, read_audio, read_image, require_text, store_media

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/song-requests", tags=["Song requests"])


def _request_response(req: SongRequest, username: Optional[str]) -> SongRequestResponse:
    return SongRequestResponse(
        id=req.id,
        title=req.title,
        artist=req.artist,
        audio_url=req.audio_url,
        cover_url=req.cover_url,
        uploaded_by=username or UNKNOWN_UPLOADER,
        status=req.status.value,
        created_at=req.created_at,
    )


def _pending_request(requests: SongRequestRepository, request_id: uuid.UUID) -> SongRequest:
    req = requests.get(request_id)
    if req is None:
        raise NotFound("Song request not found.")
    if req.status is not SongRequestStatus.PENDING:
        raise Conflict(f"Song request is already {req.status.value}.")
    return req


@router.post(
    "",
    response_model=SongRequestResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Request a song",
    description="Uploads candidate media and queues it for admin review.",
    operation_id="create_song_request",
)
def create_song_request(
    title: Optional[str] = Form(None),
    artist: Optional[str] = Form(None),
    audio: Optional[UploadFile] = File(None),
    image: Optional[UploadFile] = File(None),
    user: User = Depends(get_current_user),
    requests: SongRequestRepository = Depends(song_request_repository),
    assets: S3AssetHost = Depends(get_asset_host),
) -> SongRequestResponse:
    audio_payload = read_audio(audio)
    final_title = require_text(title, "Title")
    final_artist = require_text(artist, "Artist")
    image_payload = read_image(image)

    media = store_media(assets, audio_payload, image_payload)
    try:
        req = requests.create(
            title=final_title,
            artist=final_artist,
            audio_url=media.audio.url,
            audio_asset_id=media.audio.asset_id,
            cover_url=media.image.url if media.image else None,
            cover_asset_id=media.image.asset_id if media.image else None,
            requested_by=user.id,
        )
    except Exception:
        discard_media(assets, media.asset_ids())
        raise

    logger.info("song_requested: request_id=%s user_id=%s", str(req.id), str(user.id))
    return _request_response(req, user.username)


@router.get(
    "",
    response_model=SongRequestListResponse,
    summary="List pending song requests",
    operation_id="list_song_requests",
)
def list_song_requests(
    admin: User = Depends(require_admin),
    requests: SongRequestRepository = Depends(song_request_repository),
) -> SongRequestListResponse:
    return SongRequestListResponse(
        requests=[_request_response(req, username) for req, username in requests.list_pending()]
    )


@router.post(
    "/{request_id}/accept",
    response_model=SongResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Accept a song request",
    description="Adds the requested song to the catalog, credited to the requesting user.",
    operation_id="accept_song_request",
)
def accept_song_request(
    request_id: uuid.UUID,
    admin: User = Depends(require_admin),
    requests: SongRequestRepository = Depends(song_request_repository),
    songs: SongRepository = Depends(song_repository),
) -> SongResponse:
    req = _pending_request(requests, request_id)

    song = songs.create(
        title=req.title,
        artist=req.artist,
        audio_url=req.audio_url,
        image_url=req.cover_url or config.default_cover_url(),
        uploaded_by=req.requested_by,
        external_asset_id=req.audio_asset_id,
        image_asset_id=req.cover_asset_id,
    )
    requests.set_status(req, SongRequestStatus.ACCEPTED)

    logger.info("song_request_accepted: request_id=%s song_id=%s admin_id=%s", str(req.id), str(song.id), str(admin.id))
    return song_response(song, songs.uploader_username(song))


@router.delete(
    "/{request_id}/decline",
    response_model=MessageResponse,
    summary="Decline a song request",
    operation_id="decline_song_request",
)
def decline_song_request(
    request_id: uuid.UUID,
    admin: User = Depends(require_admin),
    requests: SongRequestRepository = Depends(song_request_repository),
    assets: S3AssetHost = Depends(get_asset_host),
) -> MessageResponse:
    req = _pending_request(requests, request_id)

    requests.set_status(req, SongRequestStatus.DECLINED)
    discard_media(assets, [a for a in (req.audio_asset_id, req.cover_asset_id) if a])
    logger.info("song_request_declined: request_id=%s admin_id=%s", str(req.id), str(admin.id))
    return MessageResponse(message="Song request declined")
