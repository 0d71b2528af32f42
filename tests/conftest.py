from __future__ import annotations

import uuid
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import update

from musicshare.api.assets import UploadedAsset, get_asset_host
from musicshare.api.db import get_db_session, init_db, reset_engine
from musicshare.api.errors import UpstreamFailure
from musicshare.api.main import app
from musicshare.api.models import User
from musicshare.api.repositories import SongRepository

MP3_BYTES = b"ID3\x04\x00\x00\x00\x00\x00\x00" + b"\x00" * 64
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


class FakeAssetHost:
    """In-memory stand-in for the S3 asset host."""

    def __init__(self):
        self.objects: Dict[str, bytes] = {}
        self.uploads: List[str] = []
        self.destroyed: List[str] = []
        self.fail_uploads_after: Optional[int] = None
        self.fail_destroys = False

    def upload(self, data: bytes, content_type: str, folder: str) -> UploadedAsset:
        if self.fail_uploads_after is not None and len(self.uploads) >= self.fail_uploads_after:
            raise UpstreamFailure("Asset upload failed (ConnectTimeoutError).")
        asset_id = f"{folder}/{uuid.uuid4().hex}"
        self.objects[asset_id] = data
        self.uploads.append(asset_id)
        return UploadedAsset(url=f"https://assets.test/{asset_id}", asset_id=asset_id)

    def destroy(self, asset_id: str) -> bool:
        self.destroyed.append(asset_id)
        if self.fail_destroys:
            raise UpstreamFailure("Asset delete failed (InternalError).")
        return self.objects.pop(asset_id, None) is not None


@pytest.fixture(autouse=True)
def _environment(monkeypatch, tmp_path):
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'test.db'}")
    monkeypatch.setenv("JWT_SECRET", "test-secret")
    monkeypatch.setenv("BCRYPT_ROUNDS", "4")
    reset_engine()
    init_db()
    yield
    reset_engine()


@pytest.fixture
def assets():
    fake = FakeAssetHost()
    app.dependency_overrides[get_asset_host] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_asset_host, None)


@pytest.fixture
def client(assets):
    with TestClient(app) as c:
        yield c


def register(client: TestClient, username: str, password: str = "secret123") -> Dict:
    resp = client.post("/api/register", json={"username": username, "password": password})
    assert resp.status_code == 201, resp.text
    return resp.json()


def auth_header(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def promote(username: str) -> None:
    with get_db_session() as db:
        db.execute(update(User).where(User.username == username).values(is_admin=True))


def add_song(title: str, artist: str, uploaded_by: Optional[str] = None, likes: int = 0):
    """Insert a song directly into the catalog store and return its id as a string."""
    with get_db_session() as db:
        songs = SongRepository(db)
        song = songs.create(
            title=title,
            artist=artist,
            audio_url=f"https://assets.test/audio/{title}.mp3",
            image_url="https://assets.test/images/cover.png",
            uploaded_by=uuid.UUID(uploaded_by) if uploaded_by else None,
            external_asset_id=f"music-player/audio/{uuid.uuid4().hex}",
        )
        song.likes = likes
        return str(song.id)


@pytest.fixture
def alice(client):
    data = register(client, "alice")
    return {"id": data["user"]["id"], "token": data["token"], "headers": auth_header(data["token"])}


@pytest.fixture
def bob(client):
    data = register(client, "bob")
    return {"id": data["user"]["id"], "token": data["token"], "headers": auth_header(data["token"])}


@pytest.fixture
def admin(client):
    data = register(client, "admin")
    promote("admin")
    return {"id": data["user"]["id"], "token": data["token"], "headers": auth_header(data["token"])}
