"""
Authentication utilities: password hashing, token issuance and verification.

The frontend sends:
- Authorization: Bearer <token>

Tokens are HS256 JWTs carrying ``sub`` (the user id) and ``exp``.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Dict, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from musicshare.api import config
from musicshare.api.errors import Forbidden, Unauthenticated
from musicshare.api.models import User
from musicshare.api.repositories import UserRepository, user_repository

_bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache(maxsize=None)
def _pwd_context(rounds: int) -> CryptContext:
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


# PUBLIC_INTERFACE
def hash_password(password: str) -> str:
    """Hash a plain-text password."""
    return _pwd_context(config.bcrypt_rounds()).hash(password)


# PUBLIC_INTERFACE
def verify_password(password: str, password_hash: str) -> bool:
    """Verify a plain-text password against a hash."""
    try:
        return _pwd_context(config.bcrypt_rounds()).verify(password, password_hash)
    except ValueError:
        # Malformed hash in the store.
        return False


# PUBLIC_INTERFACE
def create_access_token(*, user_id: uuid.UUID, expires_in: Optional[timedelta] = None) -> str:
    """
    Create a signed JWT access token.

    Token contains:
      - sub: user_id (string UUID)
      - iat
      - exp (default: JWT_EXPIRES_MINUTES from now)
    """
    now = datetime.now(timezone.utc)
    exp = now + (expires_in if expires_in is not None else timedelta(minutes=config.jwt_expires_minutes()))
    payload: Dict[str, Any] = {
        "sub": str(user_id),
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, config.jwt_secret(), algorithm=config.jwt_algorithm())


def _decode_token(token: str) -> Dict[str, Any]:
    try:
        return jwt.decode(
            token,
            config.jwt_secret(),
            algorithms=[config.jwt_algorithm()],
            options={"require_exp": True, "require_sub": True},
        )
    except JWTError:
        raise Unauthenticated("Invalid or expired token.")


# PUBLIC_INTERFACE
def resolve_user(token: str, users: UserRepository) -> User:
    """
    Verify a bearer token and return the user it was issued to.

    Raises Unauthenticated when the token is malformed, expired, signed with a
    different secret, or names a user that no longer exists.
    """
    if token.lower().startswith("bearer "):
        token = token[len("bearer ") :]
    token = token.strip()
    if not token:
        raise Unauthenticated("Not authenticated.")

    payload = _decode_token(token)
    try:
        user_id = uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise Unauthenticated("Invalid token payload.")

    user = users.get(user_id)
    if user is None:
        raise Unauthenticated("User not found.")
    return user


# PUBLIC_INTERFACE
def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    users: UserRepository = Depends(user_repository),
) -> User:
    """
    FastAPI dependency that returns the authenticated user.

    Raises 401 if the header is missing, the token is invalid/expired, or the
    user doesn't exist.
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise Unauthenticated("Not authenticated.")
    return resolve_user(credentials.credentials, users)


# PUBLIC_INTERFACE
def require_admin(user: User = Depends(get_current_user)) -> User:
    """FastAPI dependency: the authenticated user, who must be an admin (403 otherwise)."""
    if not user.is_admin:
        raise Forbidden("Admin access required.")
    return user
