from __future__ import annotations

import pytest

from musicshare.api.db import _build_database_url, _redact_sqlalchemy_url, ping_db


@pytest.fixture
def clean_db_env(monkeypatch):
    for name in ("DATABASE_URL", "POSTGRES_URL", "POSTGRES_USER", "POSTGRES_PASSWORD", "POSTGRES_DB", "POSTGRES_PORT"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_database_url_wins_and_is_normalized(clean_db_env):
    clean_db_env.setenv("DATABASE_URL", "postgres://u:p@db:5432/music")
    assert _build_database_url() == "postgresql://u:p@db:5432/music"


def test_postgres_url_must_be_a_full_url(clean_db_env):
    clean_db_env.setenv("POSTGRES_URL", "db.internal:6543")
    clean_db_env.setenv("POSTGRES_USER", "u")
    clean_db_env.setenv("POSTGRES_PASSWORD", "p")
    clean_db_env.setenv("POSTGRES_DB", "music")
    with pytest.raises(RuntimeError):
        _build_database_url()

    clean_db_env.setenv("POSTGRES_URL", "mysql://u:p@db/music")
    with pytest.raises(RuntimeError):
        _build_database_url()


def test_postgres_full_url_with_overrides(clean_db_env):
    clean_db_env.setenv("POSTGRES_URL", "postgresql://u:p@db:5432/music")
    clean_db_env.setenv("POSTGRES_DB", "other")
    assert _build_database_url() == "postgresql+psycopg2://u:p@db:5432/other"

    clean_db_env.setenv("POSTGRES_PORT", "6543")
    clean_db_env.setenv("POSTGRES_PASSWORD", "s3cret")
    assert _build_database_url() == "postgresql+psycopg2://u:s3cret@db:6543/other"


def test_missing_configuration_raises(clean_db_env):
    with pytest.raises(RuntimeError):
        _build_database_url()


def test_redaction_hides_password():
    assert _redact_sqlalchemy_url("postgresql://u:hunter2@db:5432/x") == "postgresql://u:***@db:5432/x"
    assert _redact_sqlalchemy_url("sqlite:///music.db") == "sqlite:///music.db"


def test_health_endpoints(client):
    assert client.get("/").json() == {"status": "ok"}
    assert client.get("/api/health").json()["status"] == "connected"
    assert ping_db() is True
