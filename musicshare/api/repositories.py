"""
Store handles built on top of the request's SQLAlchemy session.

Handlers never reach for a global store; they receive these repositories
through FastAPI dependencies bound to the request-scoped session.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import List, Optional, Set, Tuple

from fastapi import Depends
from sqlalchemy import case, delete, exists, func, insert, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from musicshare.api.db import db_session_dep
from musicshare.api.errors import Conflict
from musicshare.api.models import Song, SongRequest, SongRequestStatus, User, user_liked_songs


def _now() -> datetime:
    return datetime.now(timezone.utc)


class UserRepository:
    """Identity store: user records and their liked-song sets."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, user_id: uuid.UUID) -> Optional[User]:
        return self.session.get(User, user_id)

    def get_by_username(self, username: str) -> Optional[User]:
        return self.session.execute(select(User).where(User.username == username)).scalar_one_or_none()

    def create(self, *, username: str, password_hash: str, is_admin: bool = False) -> User:
        """Insert a user. Raises Conflict when the username is taken."""
        if self.get_by_username(username) is not None:
            raise Conflict("Username already exists. Choose a different one.")

        user = User(
            id=uuid.uuid4(),
            username=username,
            password_hash=password_hash,
            is_admin=is_admin,
            created_at=_now(),
        )
        self.session.add(user)
        try:
            self.session.flush()
        except IntegrityError:
            # Lost a race against a concurrent registration of the same name.
            raise Conflict("Username already exists. Choose a different one.")
        return user

    def liked_song_ids(self, user_id: uuid.UUID) -> Set[uuid.UUID]:
        rows = self.session.execute(
            select(user_liked_songs.c.song_id).where(user_liked_songs.c.user_id == user_id)
        ).scalars()
        return set(rows)

    def has_liked(self, user_id: uuid.UUID, song_id: uuid.UUID) -> bool:
        stmt = select(
            exists().where(
                user_liked_songs.c.user_id == user_id,
                user_liked_songs.c.song_id == song_id,
            )
        )
        return bool(self.session.execute(stmt).scalar())

    def add_liked(self, user_id: uuid.UUID, song_id: uuid.UUID) -> bool:
        """
        Add ``song_id`` to the user's liked set.

        Adding a member that is already present is a no-op. Returns True when a
        row was inserted.
        """
        values = {"user_id": user_id, "song_id": song_id}
        dialect = self.session.get_bind().dialect.name

        if dialect == "postgresql":
            from sqlalchemy.dialects.postgresql import insert as pg_insert

            stmt = pg_insert(user_liked_songs).values(**values).on_conflict_do_nothing()
        elif dialect == "sqlite":
            from sqlalchemy.dialects.sqlite import insert as sqlite_insert

            stmt = sqlite_insert(user_liked_songs).values(**values).on_conflict_do_nothing()
        else:
            if self.has_liked(user_id, song_id):
                return False
            stmt = insert(user_liked_songs).values(**values)

        return self.session.execute(stmt).rowcount > 0

    def remove_liked(self, user_id: uuid.UUID, song_id: uuid.UUID) -> bool:
        """Remove ``song_id`` from the user's liked set. Returns True if it was present."""
        result = self.session.execute(
            delete(user_liked_songs).where(
                user_liked_songs.c.user_id == user_id,
                user_liked_songs.c.song_id == song_id,
            )
        )
        return result.rowcount > 0


class SongRepository:
    """Catalog store: song records and their like counters."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, song_id: uuid.UUID, *, for_update: bool = False) -> Optional[Song]:
        """
        Load a song by id. ``for_update`` takes a row lock (SELECT ... FOR UPDATE)
        that serializes concurrent writers of the same song until commit.
        """
        if for_update:
            stmt = select(Song).where(Song.id == song_id).with_for_update()
            return self.session.execute(stmt).scalar_one_or_none()
        return self.session.get(Song, song_id)

    def list_with_uploader(self, search: Optional[str] = None) -> List[Tuple[Song, Optional[str]]]:
        """
        Return ``(song, uploader_username)`` pairs in insertion order.

        When ``search`` is non-empty only songs whose title or artist contains it
        (case-insensitive substring, wildcards taken literally) are returned.
        The username is None when the uploader no longer exists.
        """
        stmt = select(Song, User.username).outerjoin(User, User.id == Song.uploaded_by)

        if search:
            needle = search.lower()
            stmt = stmt.where(
                or_(
                    func.lower(Song.title).contains(needle, autoescape=True),
                    func.lower(Song.artist).contains(needle, autoescape=True),
                )
            )

        stmt = stmt.order_by(Song.created_at, Song.id)
        return [(song, username) for song, username in self.session.execute(stmt).all()]

    def uploader_username(self, song: Song) -> Optional[str]:
        if song.uploaded_by is None:
            return None
        return self.session.execute(
            select(User.username).where(User.id == song.uploaded_by)
        ).scalar_one_or_none()

    def create(
        self,
        *,
        title: str,
        artist: str,
        audio_url: str,
        image_url: str,
        uploaded_by: Optional[uuid.UUID],
        external_asset_id: Optional[str],
        image_asset_id: Optional[str] = None,
    ) -> Song:
        song = Song(
            id=uuid.uuid4(),
            title=title,
            artist=artist,
            audio_url=audio_url,
            image_url=image_url,
            uploaded_by=uploaded_by,
            likes=0,
            external_asset_id=external_asset_id,
            image_asset_id=image_asset_id,
            created_at=_now(),
        )
        self.session.add(song)
        self.session.flush()
        return song

    def increment_likes(self, song: Song) -> int:
        """Atomically add one to the counter and return the stored value."""
        self.session.execute(
            update(Song)
            .where(Song.id == song.id)
            .values(likes=Song.likes + 1)
            .execution_options(synchronize_session=False)
        )
        return self._refresh_likes(song)

    def decrement_likes(self, song: Song) -> int:
        """Atomically subtract one from the counter, never going below zero."""
        self.session.execute(
            update(Song)
            .where(Song.id == song.id)
            .values(likes=case((Song.likes > 0, Song.likes - 1), else_=0))
            .execution_options(synchronize_session=False)
        )
        return self._refresh_likes(song)

    def _refresh_likes(self, song: Song) -> int:
        self.session.refresh(song, attribute_names=["likes"])
        return song.likes

    def delete(self, song: Song) -> None:
        """Delete a song together with every like membership that points at it."""
        self.session.execute(delete(user_liked_songs).where(user_liked_songs.c.song_id == song.id))
        self.session.delete(song)
        self.session.flush()


class SongRequestRepository:
    """Pending song submissions from regular users."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, request_id: uuid.UUID) -> Optional[SongRequest]:
        return self.session.get(SongRequest, request_id)

    def create(
        self,
        *,
        title: str,
        artist: str,
        audio_url: str,
        audio_asset_id: Optional[str],
        cover_url: Optional[str],
        cover_asset_id: Optional[str],
        requested_by: Optional[uuid.UUID],
    ) -> SongRequest:
        req = SongRequest(
            id=uuid.uuid4(),
            title=title,
            artist=artist,
            audio_url=audio_url,
            audio_asset_id=audio_asset_id,
            cover_url=cover_url,
            cover_asset_id=cover_asset_id,
            requested_by=requested_by,
            status=SongRequestStatus.PENDING,
            created_at=_now(),
        )
        self.session.add(req)
        self.session.flush()
        return req

    def list_pending(self) -> List[Tuple[SongRequest, Optional[str]]]:
        stmt = (
            select(SongRequest, User.username)
            .outerjoin(User, User.id == SongRequest.requested_by)
            .where(SongRequest.status == SongRequestStatus.PENDING)
            .order_by(SongRequest.created_at, SongRequest.id)
        )
        return [(req, username) for req, username in self.session.execute(stmt).all()]

    def set_status(self, req: SongRequest, status: SongRequestStatus) -> SongRequest:
        req.status = status
        self.session.flush()
        return req


# PUBLIC_INTERFACE
def user_repository(db: Session = Depends(db_session_dep)) -> UserRepository:
    """FastAPI dependency: identity store bound to the request session."""
    return UserRepository(db)


# PUBLIC_INTERFACE
def song_repository(db: Session = Depends(db_session_dep)) -> SongRepository:
    """FastAPI dependency: catalog store bound to the request session."""
    return SongRepository(db)


# PUBLIC_INTERFACE
def song_request_repository(db: Session = Depends(db_session_dep)) -> SongRequestRepository:
    return SongRequestRepository(db)
