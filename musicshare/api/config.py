"""
Environment-driven configuration for the music sharing backend.

Every setting is read at call time so tests (and redeploys) can change the
environment without re-importing modules.
"""

from __future__ import annotations

import os
from typing import List, Optional

_DEFAULT_COVER_URL = (
    "https://images.unsplash.com/photo-1470225620780-dba8ba36b745"
    "?w=800&auto=format&fit=crop&q=60&ixlib=rb-4.0.3"
)
_MAX_UPLOAD_BYTES_DEFAULT = 10 * 1024 * 1024  # 10MB


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


# PUBLIC_INTERFACE
def jwt_secret() -> str:
    """Return the token signing secret. Raises if unset."""
    secret = os.getenv("JWT_SECRET")
    if not secret:
        raise RuntimeError("JWT_SECRET env var is required.")
    return secret


# PUBLIC_INTERFACE
def jwt_algorithm() -> str:
    return os.getenv("JWT_ALGORITHM", "HS256")


# PUBLIC_INTERFACE
def jwt_expires_minutes() -> int:
    """Token lifetime in minutes (default: 24 hours)."""
    return _env_int("JWT_EXPIRES_MINUTES", 24 * 60)


# PUBLIC_INTERFACE
def bcrypt_rounds() -> int:
    return _env_int("BCRYPT_ROUNDS", 12)


# PUBLIC_INTERFACE
def db_auto_create() -> bool:
    """Whether tables are created on application startup."""
    return _env_bool("DB_AUTO_CREATE", True)


# PUBLIC_INTERFACE
def max_upload_bytes() -> int:
    return _env_int("MAX_UPLOAD_BYTES", _MAX_UPLOAD_BYTES_DEFAULT)


# PUBLIC_INTERFACE
def default_cover_url() -> str:
    """Placeholder cover used when a song is stored without an image."""
    return os.getenv("DEFAULT_COVER_URL", "").strip() or _DEFAULT_COVER_URL


# PUBLIC_INTERFACE
def asset_bucket() -> str:
    bucket = os.getenv("ASSET_BUCKET", "").strip()
    if not bucket:
        raise RuntimeError("ASSET_BUCKET env var is required for media uploads.")
    return bucket


# PUBLIC_INTERFACE
def asset_region() -> Optional[str]:
    return os.getenv("ASSET_REGION") or None


# PUBLIC_INTERFACE
def asset_endpoint_url() -> Optional[str]:
    """Custom endpoint for S3-compatible hosts (MinIO, R2, ...)."""
    return os.getenv("ASSET_ENDPOINT_URL") or None


# PUBLIC_INTERFACE
def asset_public_base_url() -> Optional[str]:
    raw = os.getenv("ASSET_PUBLIC_BASE_URL", "").strip()
    return raw.rstrip("/") or None


# PUBLIC_INTERFACE
def asset_audio_folder() -> str:
    return os.getenv("ASSET_AUDIO_FOLDER", "music-player/audio")


# PUBLIC_INTERFACE
def asset_image_folder() -> str:
    return os.getenv("ASSET_IMAGE_FOLDER", "music-player/images")


# PUBLIC_INTERFACE
def cors_origins() -> List[str]:
    """
    Allowed CORS origins: local React dev servers plus any comma-separated
    values from CORS_ALLOW_ORIGINS (or ALLOWED_ORIGINS).
    """
    origins = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
    ]
    raw = os.getenv("CORS_ALLOW_ORIGINS") or os.getenv("ALLOWED_ORIGINS", "")
    origins.extend(o.strip() for o in raw.split(",") if o.strip())
    return origins


# PUBLIC_INTERFACE
def log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO")
