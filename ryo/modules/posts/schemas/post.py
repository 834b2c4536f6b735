from typing import List, Optional
from datetime import datetime

from pydantic import Field

from ryo.modules.user_management.schemas.user import CamelModel, UserSummary


class CreateMediaRequest(CamelModel):
    file_key: str
    media_type: str
    mime_type: str = ""
    file_size: int = 0


class CreatePostRequest(CamelModel):
    body: str
    media: List[CreateMediaRequest] = Field(default_factory=list)


class PostMediaResponse(CamelModel):
    id: str
    media_url: str
    media_type: str
    mime_type: Optional[str] = None
    file_size: int = 0
    created_at: Optional[datetime] = None


class PostResponse(CamelModel):
    """Post returned to client with computed like information"""
    id: str
    user_id: str
    body: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    user: Optional[UserSummary] = None
    media: List[PostMediaResponse] = Field(default_factory=list)
    like_count: int = 0
    is_liked_by_me: bool = False


class PostsListResponse(CamelModel):
    posts: List[PostResponse]
    page: int
    limit: int
    has_more: bool


class LikeToggleResponse(CamelModel):
    is_liked: bool
    like_count: int
