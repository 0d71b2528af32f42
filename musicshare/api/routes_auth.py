"""
Auth endpoints:
- POST /api/register
- POST /api/login
- GET /api/me

Register and login respond with { user, token, tokenType }.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status

from musicshare.api.auth import create_access_token, get_current_user, hash_password, verify_password
from musicshare.api.errors import Invalid, Unauthenticated
from musicshare.api.models import User
from musicshare.api.repositories import UserRepository, user_repository
from musicshare.api.schemas import AuthLoginRequest, AuthRegisterRequest, AuthTokenResponse, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Auth"])


def _user_response(user: User, users: UserRepository) -> UserResponse:
    return UserResponse(
        id=user.id,
        username=user.username,
        is_admin=user.is_admin,
        liked_songs=sorted(users.liked_song_ids(user.id), key=str),
    )


@router.post(
    "/register",
    response_model=AuthTokenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    description="Creates a new (non-admin) user and returns a JWT token.",
    operation_id="register_user",
)
def register(req: AuthRegisterRequest, users: UserRepository = Depends(user_repository)) -> AuthTokenResponse:
    """Register a new user with username/password."""
    username = req.username.strip()
    if not username:
        raise Invalid("Username is required.")

    user = users.create(username=username, password_hash=hash_password(req.password))
    logger.info("user_registered: user_id=%s username=%s", str(user.id), username)

    token = create_access_token(user_id=user.id)
    return AuthTokenResponse(user=_user_response(user, users), token=token, token_type="bearer")


@router.post(
    "/login",
    response_model=AuthTokenResponse,
    summary="Login",
    description="Validates credentials and returns a JWT token.",
    operation_id="login_user",
)
def login(req: AuthLoginRequest, users: UserRepository = Depends(user_repository)) -> AuthTokenResponse:
    """Login an existing user."""
    user = users.get_by_username(req.username.strip())
    if not user or not verify_password(req.password, user.password_hash):
        logger.info("login_failed: username=%s", req.username)
        raise Unauthenticated("Invalid username or password.")

    token = create_access_token(user_id=user.id)
    return AuthTokenResponse(user=_user_response(user, users), token=token, token_type="bearer")


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Current user",
    operation_id="current_user",
)
def me(user: User = Depends(get_current_user), users: UserRepository = Depends(user_repository)) -> UserResponse:
    return _user_response(user, users)
