"""
FastAPI application entrypoint for the music sharing backend.

- /api/register, /api/login, /api/me
- /api/songs (list/search, admin upload/delete, like toggle)
- /api/song-requests (user submissions, admin review)

Every /api route except register/login/health requires
``Authorization: Bearer <token>``.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from musicshare.api import config
from musicshare.api.db import init_db, ping_db
from musicshare.api.errors import register_error_handlers
from musicshare.api.logging_config import setup_logging
from musicshare.api.routes_auth import router as auth_router
from musicshare.api.routes_requests import router as requests_router
from musicshare.api.routes_songs import router as songs_router
from musicshare.api.schemas import HealthResponse

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "Auth", "description": "Registration, login and the current user."},
    {"name": "Songs", "description": "Catalog listing/search, likes, admin upload and delete."},
    {"name": "Song requests", "description": "User song submissions and admin review."},
    {"name": "Health", "description": "Service health and database connectivity."},
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    if config.db_auto_create():
        try:
            init_db()
        except RuntimeError as exc:
            # Missing DB configuration: keep serving so /api/health can report it.
            logger.error("DB: schema creation skipped: %s", exc)
    yield


setup_logging(config.log_level())

app = FastAPI(
    title="Music Share Backend API",
    description=(
        "Backend for a shared music catalog.\n\n"
        "Authentication: Bearer JWT from /api/login or /api/register.\n\n"
        "Media files are stored on an external S3-compatible asset host."
    ),
    version="1.0.0",
    openapi_tags=openapi_tags,
    lifespan=lifespan,
)

# credentials=true requires explicit origins (not '*') in browsers.
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(auth_router)
app.include_router(songs_router)
app.include_router(requests_router)


@app.get(
    "/",
    summary="Health check",
    description="Simple health check endpoint.",
    tags=["Health"],
)
def health_check():
    """Return basic service health information."""
    return {"status": "ok"}


@app.get(
    "/api/health",
    response_model=HealthResponse,
    summary="Database health",
    description="Reports whether the backend can reach its database.",
    tags=["Health"],
)
def database_health() -> HealthResponse:
    if ping_db():
        return HealthResponse(status="connected", message="Connected to database")
    return HealthResponse(status="disconnected", message="Database connection failed")
