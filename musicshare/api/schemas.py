"""
Pydantic models (request/response shapes) for API endpoints.

Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class AuthRegisterRequest(ApiModel):
    username: str = Field(..., min_length=1, max_length=64, description="Unique username.")
    password: str = Field(..., min_length=6, description="User password (min 6 chars).")


class AuthLoginRequest(ApiModel):
    username: str = Field(..., description="Username.")
    password: str = Field(..., description="User password.")


class UserResponse(ApiModel):
    id: uuid.UUID = Field(..., description="User UUID.")
    username: str
    is_admin: bool = False
    liked_songs: List[uuid.UUID] = Field(default_factory=list, description="Ids of liked songs.")


class AuthTokenResponse(ApiModel):
    user: UserResponse
    token: str = Field(..., description="JWT access token.")
    token_type: str = Field("bearer", description="Token type for Authorization header.")


class UploaderResponse(ApiModel):
    username: str = Field(..., description="Uploader's username, or 'unknown'.")


class SongResponse(ApiModel):
    id: uuid.UUID = Field(..., description="Song UUID.")
    title: str
    artist: str
    audio_url: str
    image_url: str
    uploaded_by: UploaderResponse
    likes: int = Field(0, ge=0)
    created_at: datetime


class CatalogSongResponse(SongResponse):
    is_liked: bool = Field(..., description="Whether the calling user likes this song.")


class LikeToggleResponse(ApiModel):
    likes: int = Field(..., ge=0, description="Like counter after the toggle.")
    is_liked: bool = Field(..., description="Whether the caller likes the song after the toggle.")


class MessageResponse(ApiModel):
    message: str


class SongRequestResponse(ApiModel):
    id: uuid.UUID
    title: str
    artist: str
    audio_url: str
    cover_url: Optional[str] = None
    uploaded_by: str = Field(..., description="Requesting user's username, or 'unknown'.")
    status: str
    created_at: datetime


class SongRequestListResponse(ApiModel):
    requests: List[SongRequestResponse]


class HealthResponse(ApiModel):
    status: str
    message: str
