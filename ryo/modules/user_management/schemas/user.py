from typing import Optional
from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class UserProfile(CamelModel):
    """User profile returned to the owner"""
    id: str
    username: Optional[str] = None
    name: str = ""
    email: str = ""
    is_admin: bool = False
    profile_picture_url: Optional[str] = None
    created_at: Optional[datetime] = None


class UserSummary(CamelModel):
    """Author block embedded in post responses"""
    id: str
    username: Optional[str] = None
    name: str = ""
    email: str = ""
    is_admin: bool = False
    profile_picture_url: Optional[str] = None


class ProfilePictureUpdate(CamelModel):
    profile_picture_url: Optional[str] = None


class ProfilePictureResponse(CamelModel):
    profile_picture_url: Optional[str] = None


class ProfilePictureUploadResponse(CamelModel):
    profile_picture_url: str
    message: str = "Profile picture updated successfully"


class UsernameUpdate(CamelModel):
    username: str


class UsernameAvailability(CamelModel):
    username: str
    available: bool
    reason: Optional[str] = None


class MessageResponse(BaseModel):
    message: str
