from typing import Any
import logging

from fastapi import APIRouter, Depends

from ryo.core.exceptions import NotFoundError
from ryo.deps import get_current_user, get_like_repository, get_post_repository
from ryo.modules.posts.likes.services.like import LikeToggler
from ryo.modules.posts.schemas.post import LikeToggleResponse
from ryo.modules.posts.services.post import PostReader
from ryo.modules.user_management.models.user import User

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=LikeToggleResponse)
def toggle_like(
    post_id: str,
    current_user: User = Depends(get_current_user),
    posts: PostReader = Depends(get_post_repository),
    likes: LikeToggler = Depends(get_like_repository),
) -> Any:
    """
    Like a post, or remove the like when the caller already likes it.
    """
    if not posts.get_post(post_id):
        raise NotFoundError("post not found")

    is_liked = likes.toggle(post_id, current_user.id)
    logger.info(f"User {current_user.id} {'liked' if is_liked else 'unliked'} post {post_id}")
    return LikeToggleResponse(is_liked=is_liked, like_count=likes.count(post_id))
