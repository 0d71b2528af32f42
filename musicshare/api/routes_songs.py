"""
Song endpoints:
- GET /api/songs (list/search the catalog, any authenticated user)
- POST /api/songs (multipart audio + optional cover upload, admin only)
- POST /api/songs/{id}/like (toggle like, any authenticated user)
- DELETE /api/songs/{id} (admin only; also deletes the hosted media)
"""

from __future__ import annotations

import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from musicshare.api import config
from musicshare.api.assets import S3AssetHost, get_asset_host
from musicshare.api.auth import get_current_user, require_admin
from musicshare.api.catalog import list_catalog, song_response
from musicshare.api.errors import NotFound
from musicshare.api.likes import toggle_like
from musicshare.api.models import User
from musicshare.api.repositories import SongRepository, UserRepository, song_repository, user_repository
from musicshare.api.schemas import CatalogSongResponse, LikeToggleResponse, MessageResponse, SongResponse
from musicshare.api.uploads import discard_media, read_audio, read_image, require_text, store_media

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/songs", tags=["Songs"])


@router.get(
    "",
    response_model=List[CatalogSongResponse],
    summary="List songs",
    description="Returns the catalog in upload order; `search` filters by title or artist (case-insensitive).",
    operation_id="list_songs",
)
def list_songs(
    search: Optional[str] = Query(None, description="Substring to look for in title or artist."),
    user: User = Depends(get_current_user),
    songs: SongRepository = Depends(song_repository),
    users: UserRepository = Depends(user_repository),
) -> List[CatalogSongResponse]:
    return list_catalog(user, songs, users, search)


@router.post(
    "",
    response_model=SongResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a song",
    description="Uploads audio (and optionally a cover image) to the asset host and adds the song to the catalog.",
    operation_id="upload_song",
)
def upload_song(
    title: Optional[str] = Form(None),
    artist: Optional[str] = Form(None),
    audio: Optional[UploadFile] = File(None, description="Audio file (multipart/form-data)"),
    image: Optional[UploadFile] = File(None, description="Optional cover image"),
    admin: User = Depends(require_admin),
    songs: SongRepository = Depends(song_repository),
    assets: S3AssetHost = Depends(get_asset_host),
) -> SongResponse:
    """Store the media externally, then record the song."""
    audio_payload = read_audio(audio)
    final_title = require_text(title, "Title")
    final_artist = require_text(artist, "Artist")
    image_payload = read_image(image)

    media = store_media(assets, audio_payload, image_payload)
    try:
        song = songs.create(
            title=final_title,
            artist=final_artist,
            audio_url=media.audio.url,
            image_url=media.image.url if media.image else config.default_cover_url(),
            uploaded_by=admin.id,
            external_asset_id=media.audio.asset_id,
            image_asset_id=media.image.asset_id if media.image else None,
        )
    except Exception:
        discard_media(assets, media.asset_ids())
        raise

    logger.info("song_uploaded: song_id=%s admin_id=%s asset_id=%s", str(song.id), str(admin.id), media.audio.asset_id)
    return song_response(song, admin.username)


@router.post(
    "/{song_id}/like",
    response_model=LikeToggleResponse,
    summary="Like or unlike a song",
    description="Flips the caller's like on the song and returns the new count and state.",
    operation_id="toggle_like",
)
def like_song(
    song_id: uuid.UUID,
    user: User = Depends(get_current_user),
    songs: SongRepository = Depends(song_repository),
    users: UserRepository = Depends(user_repository),
) -> LikeToggleResponse:
    return toggle_like(user, song_id, songs, users)


@router.delete(
    "/{song_id}",
    response_model=MessageResponse,
    summary="Delete a song",
    description="Deletes the song, its likes, and its hosted media.",
    operation_id="delete_song",
)
def delete_song(
    song_id: uuid.UUID,
    admin: User = Depends(require_admin),
    songs: SongRepository = Depends(song_repository),
    assets: S3AssetHost = Depends(get_asset_host),
) -> MessageResponse:
    song = songs.get(song_id, for_update=True)
    if song is None:
        raise NotFound("Song not found.")

    asset_ids = [a for a in (song.external_asset_id, song.image_asset_id) if a]
    songs.delete(song)

    # The row is gone (flushed) before media is touched; host failures only leave orphaned objects.
    discard_media(assets, asset_ids)
    logger.info("song_deleted: song_id=%s admin_id=%s", str(song_id), str(admin.id))
    return MessageResponse(message="Song deleted successfully")
