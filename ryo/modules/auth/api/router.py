"""Authentication router for Google Sign-In sessions"""
from typing import Optional
import logging

from fastapi import APIRouter, Depends, Query, Response

from ryo.core.exceptions import ValidationError
from ryo.core.security import SessionTokenCodec
from ryo.deps import get_identity_verifier, get_session_codec, get_user_repository
from ryo.modules.auth.schemas.auth import LogoutResponse, SessionClaims
from ryo.modules.auth.services.google_auth import IdentityVerifier, authenticate_with_google
from ryo.modules.user_management.services.user import UserRepository

router = APIRouter()
logger = logging.getLogger("ryo")


@router.get("/login", response_model=SessionClaims)
def login(
    response: Response,
    id_token: Optional[str] = Query(None),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
    users: UserRepository = Depends(get_user_repository),
    codec: SessionTokenCodec = Depends(get_session_codec),
) -> SessionClaims:
    """Exchange a Google ID token for a session cookie"""
    if id_token is None:
        raise ValidationError("id_token parameter is required")
    if not id_token:
        raise ValidationError("id_token cannot be empty")

    claims, token = authenticate_with_google(id_token, verifier, users, codec)
    codec.set_cookie(response, token)
    return claims


@router.post("/logout", response_model=LogoutResponse)
def logout(
    response: Response,
    codec: SessionTokenCodec = Depends(get_session_codec),
) -> LogoutResponse:
    """Clear the session cookie; the token itself stays valid until it expires"""
    codec.clear_cookie(response)
    logger.info("User logged out successfully")
    return LogoutResponse()
