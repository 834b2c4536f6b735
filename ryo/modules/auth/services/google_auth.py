"""Google Sign-In: ID token verification and the login flow"""
import logging
from typing import Any, Dict, Iterable, Optional, Protocol, Tuple

from google.auth import exceptions as google_exceptions
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from ryo.core.config import settings
from ryo.core.exceptions import AuthenticationError, InvalidToken, UpstreamError, ValidationError
from ryo.core.security import SessionTokenCodec
from ryo.modules.auth.schemas.auth import SessionClaims, VerifiedIdentity
from ryo.modules.user_management.models.user import User
from ryo.modules.user_management.services.user import UserLookup, UserWriter
from ryo.modules.user_management.services.username import fallback_username, sanitize_and_validate_username

logger = logging.getLogger("ryo")


class IdentityVerifier(Protocol):
    def verify(self, raw_token: str, expected_audience: str) -> VerifiedIdentity: ...


class GoogleIdentityVerifier:
    """Verifies Google ID tokens; Google's certificates are fetched and cached by google-auth"""

    def __init__(self, client_id: str, issuers: Iterable[str]):
        self.client_id = client_id
        self.issuers = set(issuers)
        self._request = google_requests.Request()

    def verify(self, raw_token: str, expected_audience: Optional[str] = None) -> VerifiedIdentity:
        if not raw_token:
            raise InvalidToken("id_token cannot be empty")

        audience = expected_audience or self.client_id
        logger.info(f"Verifying Google ID token, length: {len(raw_token)}")
        try:
            payload = id_token.verify_oauth2_token(raw_token, self._request, audience)
        except google_exceptions.TransportError as e:
            logger.error(f"Could not fetch Google certificates: {e}")
            raise UpstreamError("identity provider unavailable") from e
        except (ValueError, google_exceptions.GoogleAuthError) as e:
            logger.warning(f"ID token validation failed: {e}")
            raise InvalidToken(f"id token validation failed: {e}") from e

        if payload.get("iss") not in self.issuers:
            raise InvalidToken(f"unexpected issuer {payload.get('iss')!r}")
        return identity_from_claims(payload)


def identity_from_claims(claims: Dict[str, Any]) -> VerifiedIdentity:
    """Extract required claims with strict type checking"""
    required = {"sub": str, "email": str, "email_verified": bool, "name": str}
    for name, expected in required.items():
        if not isinstance(claims.get(name), expected):
            raise InvalidToken(f"{name} claim is missing or invalid")

    picture = claims.get("picture")
    if not isinstance(picture, str):
        picture = ""

    return VerifiedIdentity(
        sub=claims["sub"],
        email=claims["email"],
        email_verified=claims["email_verified"],
        name=claims["name"],
        picture=picture,
    )


def choose_username(users: UserLookup, identity: VerifiedIdentity) -> str:
    """Username for a new account: the sanitized display name, else the subject-based fallback"""
    try:
        username = sanitize_and_validate_username(identity.name)
    except ValidationError:
        username = None

    if username is None or users.get_by_username(username) is not None:
        username = fallback_username(identity.sub)

    candidate = username
    suffix = 1
    while users.get_by_username(candidate) is not None:
        candidate = f"{username}{suffix}"
        suffix += 1
    return candidate


class UserStore(UserLookup, UserWriter, Protocol):
    pass


def get_or_create_user(users: UserStore, identity: VerifiedIdentity) -> Tuple[User, bool]:
    user = users.get_by_sub(identity.sub)
    if user:
        logger.info(f"User found: {user.username} ({user.id})")
        return user, False

    logger.info("User not found, creating new user")
    username = choose_username(users, identity)
    user = users.create(
        sub=identity.sub,
        verified=identity.email_verified,
        username=username,
        name=identity.name,
        email=identity.email,
    )
    return user, True


def authenticate_with_google(
    raw_token: str,
    verifier: IdentityVerifier,
    users: UserStore,
    codec: SessionTokenCodec,
) -> Tuple[SessionClaims, str]:
    """Verify the ID token, resolve the user and issue a session token"""
    try:
        identity = verifier.verify(raw_token, settings.GOOGLE_CLIENT_ID)
    except InvalidToken as e:
        raise AuthenticationError(str(e)) from e

    if not identity.email_verified:
        logger.warning(f"Unauthorized login attempt for unverified email, sub: {identity.sub}")
        raise AuthenticationError("email address is not verified")

    user, _ = get_or_create_user(users, identity)

    claims = codec.stamp(SessionClaims(
        sub=identity.sub,
        id=user.id,
        username=user.username or "",
        name=identity.name,
        email=identity.email,
        is_admin=bool(user.is_admin),
        profile_img=user.profile_picture_url or identity.picture,
    ))
    token = codec.issue(claims)
    logger.info(f"Session token generated for user: {user.name} ({user.id})")
    return claims, token


google_verifier = GoogleIdentityVerifier(settings.GOOGLE_CLIENT_ID, settings.GOOGLE_ISSUERS)
