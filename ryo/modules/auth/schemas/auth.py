from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class VerifiedIdentity(BaseModel):
    """Claims read from a verified Google ID token"""
    sub: str
    email: str
    email_verified: bool
    name: str
    picture: str = ""


class SessionClaims(BaseModel):
    """Claims embedded in the ryo_session token and returned by /login"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    sub: str
    id: str
    username: str = ""
    name: str = ""
    email: str = ""
    is_admin: bool = False
    profile_img: str = ""
    iat: Optional[int] = None
    exp: Optional[int] = None
    aud: Optional[str] = None
    iss: Optional[str] = None


class LogoutResponse(BaseModel):
    message: str = Field("Logged out successfully")
