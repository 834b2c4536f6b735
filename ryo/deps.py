"""Request dependencies: repositories, collaborators and the authorization gates.

The gates replace an ambient per-request user with explicit values passed
into handler signatures:

* ``get_current_user`` - required session; 401 when the cookie is missing,
  invalid or expired, or when its subject no longer resolves to a user.
* ``get_auth_context`` - optional session; any failure yields an anonymous
  ``AuthContext``.
* ``get_current_admin_user`` - required session plus the admin flag; 403.

CORS preflight requests are answered by ``CORSMiddleware`` before routing,
so none of the gates run for them.
"""
from dataclasses import dataclass
from typing import Optional
import logging

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from ryo.core.exceptions import AuthenticationError, AuthorizationError, InvalidToken, UpstreamError
from ryo.core.security import SessionTokenCodec, session_codec
from ryo.core.storage import BlobStore, r2_storage
from ryo.db.session import get_db
from ryo.modules.auth.services.google_auth import IdentityVerifier, google_verifier
from ryo.modules.posts.likes.services.like import LikeRepository
from ryo.modules.posts.services.post import PostRepository
from ryo.modules.user_management.models.user import User
from ryo.modules.user_management.services.user import UserLookup, UserRepository

logger = logging.getLogger("ryo")


@dataclass(frozen=True)
class AuthContext:
    """Caller identity resolved by the optional gate"""
    user: Optional[User] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def user_id(self) -> Optional[str]:
        return self.user.id if self.user else None


def get_session_codec() -> SessionTokenCodec:
    return session_codec


def get_blob_store() -> BlobStore:
    return r2_storage


def get_identity_verifier() -> IdentityVerifier:
    return google_verifier


def get_user_repository(db: Session = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def get_post_repository(db: Session = Depends(get_db)) -> PostRepository:
    return PostRepository(db)


def get_like_repository(db: Session = Depends(get_db)) -> LikeRepository:
    return LikeRepository(db)


def _resolve_user(request: Request, codec: SessionTokenCodec, users: UserLookup) -> User:
    token = request.cookies.get(codec.cookie_name)
    if not token:
        raise AuthenticationError("authorization cookie is missing")

    try:
        claims = codec.verify(token)
    except InvalidToken as e:
        logger.info(f"Invalid session token: {e}")
        raise AuthenticationError("token invalid") from e

    user = users.get_by_sub(claims.sub)
    if not user:
        logger.info(f"User not found for sub: {claims.sub}")
        raise AuthenticationError("token invalid")
    return user


def get_current_user(
    request: Request,
    codec: SessionTokenCodec = Depends(get_session_codec),
    users: UserRepository = Depends(get_user_repository),
) -> User:
    """Required-auth gate"""
    return _resolve_user(request, codec, users)


def get_auth_context(
    request: Request,
    codec: SessionTokenCodec = Depends(get_session_codec),
    users: UserRepository = Depends(get_user_repository),
) -> AuthContext:
    """Optional-auth gate"""
    if request.method == "OPTIONS" or codec.cookie_name not in request.cookies:
        return AuthContext()
    try:
        return AuthContext(user=_resolve_user(request, codec, users))
    except (AuthenticationError, UpstreamError) as e:
        logger.debug(f"Proceeding unauthenticated: {e.detail}")
        return AuthContext()


def get_current_admin_user(current_user: User = Depends(get_current_user)) -> User:
    """Admin-only gate; runs after the required-auth gate"""
    if not current_user.is_admin:
        raise AuthorizationError("admin access required")
    return current_user
