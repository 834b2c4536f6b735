from datetime import datetime, timezone
from typing import List, Optional, Protocol, Sequence, Tuple
import logging
import uuid

from sqlalchemy.orm import Session

from ryo.core.config import settings
from ryo.core.exceptions import AuthorizationError, NotFoundError, UpstreamError, ValidationError
from ryo.core.storage import BlobStore
from ryo.db.utils import upstream_errors
from ryo.modules.posts.likes.services.like import LikeRepository
from ryo.modules.posts.models.post import Post, PostMedia
from ryo.modules.posts.schemas.post import CreateMediaRequest, CreatePostRequest, PostResponse
from ryo.modules.user_management.models.user import User

logger = logging.getLogger("ryo")

DEFAULT_LIMIT = 10
MAX_LIMIT = 100
MEDIA_TYPES = ("image", "video")


class PostReader(Protocol):
    def get_post(self, post_id: str, viewer_id: Optional[str] = None) -> Optional[PostResponse]: ...

    def list_posts(self, limit: int, offset: int, viewer_id: Optional[str] = None) -> List[PostResponse]: ...

    def list_user_posts(self, user_id: str, limit: int, offset: int, viewer_id: Optional[str] = None) -> List[PostResponse]: ...

    def get_media(self, media_id: str) -> Optional[PostMedia]: ...


class PostWriter(Protocol):
    def get_model(self, post_id: str) -> Optional[Post]: ...

    def create_post(self, user_id: str, body: str, media: Sequence[Tuple[CreateMediaRequest, str]]) -> Post: ...

    def delete_post(self, post: Post) -> None: ...


def parse_pagination(page: Optional[str], limit: Optional[str]) -> Tuple[int, int, int]:
    """Return (page, limit, offset); out-of-range or unparsable values fall back to the defaults"""
    parsed_limit = DEFAULT_LIMIT
    if limit:
        try:
            value = int(limit)
            if 0 < value <= MAX_LIMIT:
                parsed_limit = value
        except ValueError:
            pass

    parsed_page = 1
    if page:
        try:
            value = int(page)
            if value > 0:
                parsed_page = value
        except ValueError:
            pass

    return parsed_page, parsed_limit, (parsed_page - 1) * parsed_limit


class PostRepository:
    """SQLAlchemy-backed posts, media and like aggregation"""

    def __init__(self, db: Session):
        self.db = db
        self.likes = LikeRepository(db)

    def _to_responses(self, posts: List[Post], viewer_id: Optional[str]) -> List[PostResponse]:
        ids = [post.id for post in posts]
        counts = self.likes.counts_for(ids)
        liked = self.likes.liked_among(ids, viewer_id)
        result = []
        for post in posts:
            response = PostResponse.model_validate(post)
            response.like_count = counts.get(post.id, 0)
            response.is_liked_by_me = post.id in liked
            result.append(response)
        return result

    def get_model(self, post_id: str) -> Optional[Post]:
        with upstream_errors(self.db, "get post"):
            return self.db.query(Post).filter(Post.id == post_id).first()

    def get_post(self, post_id: str, viewer_id: Optional[str] = None) -> Optional[PostResponse]:
        post = self.get_model(post_id)
        if not post:
            return None
        return self._to_responses([post], viewer_id)[0]

    def list_posts(self, limit: int, offset: int, viewer_id: Optional[str] = None) -> List[PostResponse]:
        logger.info(f"Getting posts with limit={limit}, offset={offset}")
        with upstream_errors(self.db, "get posts"):
            posts = (
                self.db.query(Post)
                .order_by(Post.created_at.desc(), Post.id.desc())
                .offset(offset)
                .limit(limit)
                .all()
            )
        return self._to_responses(posts, viewer_id)

    def list_user_posts(self, user_id: str, limit: int, offset: int, viewer_id: Optional[str] = None) -> List[PostResponse]:
        logger.info(f"Getting posts for user ID: {user_id} with limit={limit}, offset={offset}")
        with upstream_errors(self.db, "get user posts"):
            posts = (
                self.db.query(Post)
                .filter(Post.user_id == user_id)
                .order_by(Post.created_at.desc(), Post.id.desc())
                .offset(offset)
                .limit(limit)
                .all()
            )
        return self._to_responses(posts, viewer_id)

    def create_post(self, user_id: str, body: str, media: Sequence[Tuple[CreateMediaRequest, str]] = ()) -> Post:
        """Create a post and its media rows; media items are (request, presigned url) pairs"""
        now = datetime.now(timezone.utc)
        post = Post(id=str(uuid.uuid4()), user_id=user_id, body=body, created_at=now, updated_at=now)
        for item, media_url in media:
            post.media.append(PostMedia(
                id=str(uuid.uuid4()),
                file_key=item.file_key,
                media_url=media_url,
                media_type=item.media_type,
                mime_type=item.mime_type,
                file_size=item.file_size,
                created_at=now,
            ))
        with upstream_errors(self.db, "create post"):
            self.db.add(post)
            self.db.commit()
            self.db.refresh(post)
        logger.info(f"Created post {post.id} with {len(post.media)} media for author ID: {user_id}")
        return post

    def delete_post(self, post: Post) -> None:
        """Delete a post with its likes and media rows"""
        logger.info(f"Deleting post with ID: {post.id}")
        with upstream_errors(self.db, "delete post"):
            self.likes.delete_for_post(post.id)
            self.db.delete(post)
            self.db.commit()

    def get_media(self, media_id: str) -> Optional[PostMedia]:
        with upstream_errors(self.db, "get media info"):
            return self.db.query(PostMedia).filter(PostMedia.id == media_id).first()


def create_post_with_media(posts: PostWriter, blobs: BlobStore, author: User, request: CreatePostRequest) -> Post:
    """Validate every attachment before writing anything, then create the post"""
    if not request.body.strip():
        raise ValidationError("post body cannot be empty")

    for item in request.media:
        if item.media_type not in MEDIA_TYPES:
            raise ValidationError(f"invalid media type: {item.media_type}. Must be 'image' or 'video'")
        if not blobs.file_exists(item.file_key):
            raise ValidationError(f"media file not found: {item.file_key}")

    media = [
        (item, blobs.generate_presigned_url(item.file_key, settings.MEDIA_URL_EXPIRATION))
        for item in request.media
    ]
    return posts.create_post(author.id, request.body, media)


def delete_post_with_media(posts: PostWriter, blobs: BlobStore, post_id: str, caller: User) -> None:
    post = posts.get_model(post_id)
    if not post:
        raise NotFoundError("post not found")

    if not caller.is_admin and post.user_id != caller.id:
        raise AuthorizationError("you can only delete your own posts")

    # Blob cleanup is best effort
    for media in list(post.media):
        try:
            blobs.delete_file(media.file_key)
        except (NotFoundError, UpstreamError) as e:
            logger.warning(f"Failed to delete media file {media.file_key}: {e.detail}")

    posts.delete_post(post)


def media_download_filename(media: PostMedia) -> str:
    filename = f"ryo-media-{media.id}"
    if media.media_type == "video":
        return filename + ".mp4"
    return filename + {
        "image/png": ".png",
        "image/gif": ".gif",
        "image/webp": ".webp",
    }.get(media.mime_type, ".jpg")
