from __future__ import annotations

import uuid

from sqlalchemy import delete

from conftest import add_song
from musicshare.api.catalog import UNKNOWN_UPLOADER, list_catalog
from musicshare.api.db import get_db_session
from musicshare.api.models import User
from musicshare.api.repositories import SongRepository, UserRepository


def _titles(resp):
    assert resp.status_code == 200, resp.text
    return {song["title"] for song in resp.json()}


def test_list_requires_authentication(client):
    assert client.get("/api/songs").status_code == 401


def test_empty_catalog_is_an_empty_list(client, alice):
    resp = client.get("/api/songs", headers=alice["headers"])
    assert resp.status_code == 200
    assert resp.json() == []


def test_search_matches_title_or_artist_case_insensitively(client, alice):
    add_song("Blue", "Aqua")
    add_song("Green Day", "Rock")

    assert _titles(client.get("/api/songs", params={"search": "blue"}, headers=alice["headers"])) == {"Blue"}
    assert _titles(client.get("/api/songs", params={"search": "ROCK"}, headers=alice["headers"])) == {"Green Day"}
    assert _titles(client.get("/api/songs", params={"search": "e"}, headers=alice["headers"])) == {"Blue", "Green Day"}
    assert _titles(client.get("/api/songs", params={"search": "aqu"}, headers=alice["headers"])) == {"Blue"}
    assert _titles(client.get("/api/songs", params={"search": "jazz"}, headers=alice["headers"])) == set()


def test_search_folds_non_ascii_case(client, alice):
    add_song("Élan Vital", "Ümlaut Band")
    add_song("Blue", "Aqua")

    assert _titles(client.get("/api/songs", params={"search": "élan"}, headers=alice["headers"])) == {"Élan Vital"}
    assert _titles(client.get("/api/songs", params={"search": "ÜMLAUT"}, headers=alice["headers"])) == {"Élan Vital"}


def test_no_search_term_returns_full_catalog(client, alice):
    add_song("One", "A")
    add_song("Two", "B")

    assert _titles(client.get("/api/songs", headers=alice["headers"])) == {"One", "Two"}
    assert _titles(client.get("/api/songs", params={"search": ""}, headers=alice["headers"])) == {"One", "Two"}


def test_search_treats_wildcards_literally(client, alice):
    add_song("100% Pure", "Nobody")
    add_song("1000 Miles", "Somebody")
    add_song("snake_case", "Coder")
    add_song("snakeXcase", "Coder")

    assert _titles(client.get("/api/songs", params={"search": "100%"}, headers=alice["headers"])) == {"100% Pure"}
    assert _titles(client.get("/api/songs", params={"search": "e_c"}, headers=alice["headers"])) == {"snake_case"}


def test_songs_expose_uploader_username_only(client, alice, admin):
    add_song("Blue", "Aqua", uploaded_by=admin["id"])

    song = client.get("/api/songs", headers=alice["headers"]).json()[0]
    assert song["uploadedBy"] == {"username": "admin"}
    assert set(song) == {
        "id",
        "title",
        "artist",
        "audioUrl",
        "imageUrl",
        "uploadedBy",
        "likes",
        "createdAt",
        "isLiked",
    }


def test_missing_uploader_degrades_to_unknown(client, alice):
    ghost = uuid.uuid4()
    add_song("Orphan", "Nobody", uploaded_by=str(ghost))
    add_song("Anonymous", "Nobody")

    songs = client.get("/api/songs", headers=alice["headers"]).json()
    assert {s["uploadedBy"]["username"] for s in songs} == {UNKNOWN_UPLOADER}


def test_deleting_uploader_keeps_their_songs(client, alice, bob):
    add_song("Bob's Tune", "Bob", uploaded_by=bob["id"])

    with get_db_session() as db:
        db.execute(delete(User).where(User.id == uuid.UUID(bob["id"])))

    songs = client.get("/api/songs", headers=alice["headers"]).json()
    assert [s["title"] for s in songs] == ["Bob's Tune"]
    assert songs[0]["uploadedBy"]["username"] == UNKNOWN_UPLOADER


def test_is_liked_is_per_user(client, alice, bob):
    song_id = add_song("Blue", "Aqua")
    client.post(f"/api/songs/{song_id}/like", headers=alice["headers"])

    as_alice = client.get("/api/songs", headers=alice["headers"]).json()[0]
    as_bob = client.get("/api/songs", headers=bob["headers"]).json()[0]

    assert as_alice["isLiked"] is True
    assert as_bob["isLiked"] is False
    assert as_alice["likes"] == as_bob["likes"] == 1


def test_list_catalog_service_directly(client, alice):
    liked_id = add_song("Liked", "X")
    add_song("Other", "Y")

    with get_db_session() as db:
        users = UserRepository(db)
        songs = SongRepository(db)
        user = users.get(uuid.UUID(alice["id"]))
        users.add_liked(user.id, uuid.UUID(liked_id))

        result = {entry.title: entry.is_liked for entry in list_catalog(user, songs, users)}
        assert result == {"Liked": True, "Other": False}

        only = list_catalog(user, songs, users, search="oth")
        assert [entry.title for entry in only] == ["Other"]
