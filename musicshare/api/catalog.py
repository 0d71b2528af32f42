"""
Catalog queries: list or search songs, annotated with the caller's like state.
"""

from __future__ import annotations

from typing import List, Optional

from musicshare.api.models import Song, User
from musicshare.api.repositories import SongRepository, UserRepository
from musicshare.api.schemas import CatalogSongResponse, SongResponse, UploaderResponse

UNKNOWN_UPLOADER = "unknown"


# PUBLIC_INTERFACE
def song_response(song: Song, uploader_username: Optional[str]) -> SongResponse:
    """Serialize a song, exposing only the uploader's username."""
    return SongResponse(
        id=song.id,
        title=song.title,
        artist=song.artist,
        audio_url=song.audio_url,
        image_url=song.image_url,
        uploaded_by=UploaderResponse(username=uploader_username or UNKNOWN_UPLOADER),
        likes=song.likes,
        created_at=song.created_at,
    )


# PUBLIC_INTERFACE
def list_catalog(
    user: User,
    songs: SongRepository,
    users: UserRepository,
    search: Optional[str] = None,
) -> List[CatalogSongResponse]:
    """
    Return the visible catalog for ``user``.

    Without a search term every song is returned; with one, only songs whose
    title or artist contains it (case-insensitively). Each entry carries
    ``is_liked`` for the calling user. No matches is an empty list.
    """
    liked = users.liked_song_ids(user.id)
    return [
        CatalogSongResponse(
            **song_response(song, username).model_dump(),
            is_liked=song.id in liked,
        )
        for song, username in songs.list_with_uploader(search)
    ]
