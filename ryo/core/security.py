# Implements the session token codec:
# Signed (HS256) session token issuing and verification
# Session cookie writing and clearing
# Provides the codec instance used by the login handler and the auth dependencies

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
import logging

from jose import jwt, JWTError
from pydantic import ValidationError
from starlette.responses import Response

from ryo.core.config import Settings, settings
from ryo.core.exceptions import InvalidToken
from ryo.modules.auth.schemas.auth import SessionClaims

logger = logging.getLogger("ryo")


class SessionTokenCodec:
    """Issues and verifies session tokens and manages the session cookie"""

    def __init__(
        self,
        secret: str,
        audience: str,
        issuer: str,
        ttl: timedelta,
        algorithm: str = "HS256",
        cookie_name: str = "ryo_session",
        cookie_domain: Optional[str] = None,
        secure: bool = False,
    ):
        self.secret = secret
        self.audience = audience
        self.issuer = issuer
        self.ttl = ttl
        self.algorithm = algorithm
        self.cookie_name = cookie_name
        self.cookie_domain = cookie_domain
        self.secure = secure

    @classmethod
    def from_settings(cls, config: Settings) -> "SessionTokenCodec":
        return cls(
            secret=config.SECRET_KEY,
            audience=config.TOKEN_AUDIENCE,
            issuer=config.TOKEN_ISSUER,
            ttl=timedelta(hours=config.SESSION_TTL_HOURS),
            algorithm=config.ALGORITHM,
            cookie_name=config.SESSION_COOKIE_NAME,
            cookie_domain=config.COOKIE_DOMAIN if config.is_production else None,
            secure=config.is_production,
        )

    def stamp(self, claims: SessionClaims, now: Optional[datetime] = None) -> SessionClaims:
        """Return a copy of the claims with issued-at, expiry, audience and issuer set"""
        now = now or datetime.now(timezone.utc)
        return claims.model_copy(update={
            "iat": int(now.timestamp()),
            "exp": int((now + self.ttl).timestamp()),
            "aud": self.audience,
            "iss": self.issuer,
        })

    def issue(self, claims: SessionClaims) -> str:
        if claims.exp is None:
            claims = self.stamp(claims)
        to_encode: Dict[str, Any] = claims.model_dump(by_alias=True)
        return jwt.encode(to_encode, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> SessionClaims:
        if not token:
            raise InvalidToken("token is empty")
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
                options={"require_exp": True, "require_aud": True, "require_iss": True, "require_sub": True},
            )
        except JWTError as e:
            raise InvalidToken(str(e)) from e

        try:
            return SessionClaims.model_validate(payload)
        except ValidationError as e:
            raise InvalidToken("malformed session claims") from e

    def set_cookie(self, response: Response, token: str) -> None:
        max_age = int(self.ttl.total_seconds())
        response.set_cookie(
            key=self.cookie_name,
            value=token,
            max_age=max_age,
            expires=datetime.now(timezone.utc) + self.ttl,
            path="/",
            domain=self.cookie_domain,
            secure=self.secure,
            httponly=True,
            samesite="lax",
        )

    def clear_cookie(self, response: Response) -> None:
        # max-age=0 with an epoch expiry so browsers evict it
        response.delete_cookie(
            key=self.cookie_name,
            path="/",
            domain=self.cookie_domain,
            secure=self.secure,
            httponly=True,
            samesite="lax",
        )


session_codec = SessionTokenCodec.from_settings(settings)
