from typing import Any, Optional
import logging
import time

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from starlette.responses import Response

from ryo.core.config import settings
from ryo.core.exceptions import NotFoundError, ValidationError
from ryo.core.files import read_upload, sniff_content_type
from ryo.core.storage import BlobStore
from ryo.deps import (
    AuthContext, get_auth_context, get_blob_store, get_current_admin_user, get_post_repository,
)
from ryo.modules.posts.schemas.post import (
    CreateMediaRequest, CreatePostRequest, PostResponse, PostsListResponse,
)
from ryo.modules.posts.services.post import (
    PostReader, PostRepository, PostWriter, create_post_with_media, delete_post_with_media, media_download_filename,
    parse_pagination,
)
from ryo.modules.user_management.models.user import User
from ryo.modules.user_management.schemas.user import MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _page_of(posts_page: list, page: int, limit: int) -> PostsListResponse:
    # One extra row was fetched to detect further pages
    has_more = len(posts_page) > limit
    return PostsListResponse(posts=posts_page[:limit], page=page, limit=limit, has_more=has_more)


@router.get("", response_model=PostsListResponse)
@router.get("/", response_model=PostsListResponse, include_in_schema=False)
def read_posts(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    auth: AuthContext = Depends(get_auth_context),
    posts: PostReader = Depends(get_post_repository),
) -> Any:
    """
    Retrieve posts, newest first, with like counts and the viewer's like state.
    """
    page_no, page_size, offset = parse_pagination(page, limit)
    return _page_of(posts.list_posts(page_size + 1, offset, viewer_id=auth.user_id), page_no, page_size)


@router.get("/user/{user_id}", response_model=PostsListResponse)
def read_user_posts(
    user_id: str,
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    auth: AuthContext = Depends(get_auth_context),
    posts: PostReader = Depends(get_post_repository),
) -> Any:
    """
    Get posts by user ID.
    """
    page_no, page_size, offset = parse_pagination(page, limit)
    return _page_of(
        posts.list_user_posts(user_id, page_size + 1, offset, viewer_id=auth.user_id),
        page_no,
        page_size,
    )


@router.get("/media/{media_id}/download")
def download_post_media(
    media_id: str,
    posts: PostReader = Depends(get_post_repository),
    blobs: BlobStore = Depends(get_blob_store),
) -> Response:
    """Download a post attachment as a file"""
    media = posts.get_media(media_id)
    if not media:
        raise NotFoundError("media not found")

    data = blobs.download_file(media.file_key)
    return Response(
        content=data,
        media_type=media.mime_type or "application/octet-stream",
        headers={
            "Content-Disposition": f'attachment; filename="{media_download_filename(media)}"',
            "Cache-Control": "no-cache, no-store, must-revalidate",
        },
    )


@router.post("/media/upload", response_model=CreateMediaRequest, status_code=status.HTTP_201_CREATED)
async def upload_post_media(
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_admin_user),
    blobs: BlobStore = Depends(get_blob_store),
) -> Any:
    """
    Upload an image or video to attach to a post later.
    """
    data = await read_upload(file, settings.MAX_POST_MEDIA_SIZE)
    content_type = sniff_content_type(data)

    if content_type.startswith("image/"):
        media_type = "image"
    elif content_type.startswith("video/"):
        media_type = "video"
    else:
        raise ValidationError(f"unsupported file type: {content_type}. Only images and videos are allowed")

    key = f"posts/media/{int(time.time())}_{file.filename}"
    blobs.upload_file(key, data, content_type)
    logger.info(f"User {current_user.id} uploaded post media {key}")

    return CreateMediaRequest(file_key=key, media_type=media_type, mime_type=content_type, file_size=len(data))


@router.get("/{post_id}", response_model=PostResponse)
def read_post_by_id(
    post_id: str,
    auth: AuthContext = Depends(get_auth_context),
    posts: PostReader = Depends(get_post_repository),
) -> Any:
    """
    Get post by ID.
    """
    post = posts.get_post(post_id, viewer_id=auth.user_id)
    if not post:
        raise NotFoundError("post not found")
    return post


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=PostResponse, status_code=status.HTTP_201_CREATED, include_in_schema=False)
def create_new_post(
    post_in: CreatePostRequest,
    current_user: User = Depends(get_current_admin_user),
    posts: PostRepository = Depends(get_post_repository),
    blobs: BlobStore = Depends(get_blob_store),
) -> Any:
    """
    Create new post; attachments must already be uploaded.
    """
    post = create_post_with_media(posts, blobs, current_user, post_in)
    return posts.get_post(post.id, viewer_id=current_user.id)


@router.delete("/{post_id}", response_model=MessageResponse)
def delete_post_by_id(
    post_id: str,
    current_user: User = Depends(get_current_admin_user),
    posts: PostWriter = Depends(get_post_repository),
    blobs: BlobStore = Depends(get_blob_store),
) -> Any:
    """
    Delete a post together with its media (rows and stored files) and likes.
    """
    delete_post_with_media(posts, blobs, post_id, current_user)
    return MessageResponse(message="post deleted successfully")
