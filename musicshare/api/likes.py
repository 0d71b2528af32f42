"""
Like/unlike toggle for a (user, song) pair.

The song row is locked for the duration of the request transaction, so two
toggles on the same song are applied one after the other; the membership
change and the counter change commit or roll back together.
"""

from __future__ import annotations

import logging
import uuid

from musicshare.api.errors import NotFound
from musicshare.api.models import User
from musicshare.api.repositories import SongRepository, UserRepository
from musicshare.api.schemas import LikeToggleResponse

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
def toggle_like(user: User, song_id: uuid.UUID, songs: SongRepository, users: UserRepository) -> LikeToggleResponse:
    """
    Flip whether ``user`` likes the song and return the new counter and state.

    Liked -> unliked removes the membership and decrements the counter (never
    below zero); unliked -> liked adds the membership and increments the
    counter. When the add or remove turns out to be a no-op the counter is left
    alone. Raises NotFound for an unknown song.
    """
    song = songs.get(song_id, for_update=True)
    if song is None:
        raise NotFound("Song not found.")

    # The counter moves only when the membership row actually changed.
    likes = song.likes
    was_liked = users.has_liked(user.id, song.id)
    if was_liked:
        if users.remove_liked(user.id, song.id):
            likes = songs.decrement_likes(song)
    elif users.add_liked(user.id, song.id):
        likes = songs.increment_likes(song)

    logger.info(
        "like_toggled: user_id=%s song_id=%s liked=%s likes=%d",
        str(user.id),
        str(song.id),
        not was_liked,
        likes,
    )
    return LikeToggleResponse(likes=likes, is_liked=not was_liked)
