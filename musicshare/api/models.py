"""
SQLAlchemy models for the identity and catalog stores.

Relations between users and songs are identifier-based and never owning:
deleting a user leaves their uploads in place (``uploaded_by`` becomes NULL),
and deleting a song removes only the like memberships that point at it.
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Table,
    Text,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""


# A user's likedSongs set. The composite primary key makes membership a set:
# the same (user, song) pair can never be stored twice.
user_liked_songs = Table(
    "user_liked_songs",
    Base.metadata,
    Column("user_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("song_id", Uuid, ForeignKey("songs.id", ondelete="CASCADE"), primary_key=True, index=True),
)


class User(Base):
    """User account row. ``password_hash`` never leaves the identity store."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    username: Mapped[str] = mapped_column(Text, nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class Song(Base):
    """Song row: metadata, externally hosted asset references and like counter."""

    __tablename__ = "songs"
    __table_args__ = (CheckConstraint("likes >= 0", name="ck_songs_likes_non_negative"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    artist: Mapped[str] = mapped_column(Text, nullable=False)

    audio_url: Mapped[str] = mapped_column(Text, nullable=False)
    image_url: Mapped[str] = mapped_column(Text, nullable=False)

    uploaded_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    likes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    external_asset_id: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image_asset_id: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)


class SongRequestStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class SongRequest(Base):
    """A song submitted by a regular user, waiting for admin review."""

    __tablename__ = "song_requests"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    artist: Mapped[str] = mapped_column(Text, nullable=False)

    audio_url: Mapped[str] = mapped_column(Text, nullable=False)
    audio_asset_id: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    cover_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    cover_asset_id: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    requested_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    status: Mapped[SongRequestStatus] = mapped_column(
        Enum(SongRequestStatus, name="song_request_status", native_enum=False, length=16),
        nullable=False,
        default=SongRequestStatus.PENDING,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
