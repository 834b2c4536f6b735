"""Profile picture and username changes for the signed-in user."""
from typing import Optional
from urllib.parse import urlparse
import logging
import uuid

from ryo.core.config import settings
from ryo.core.exceptions import NotFoundError, UpstreamError, ValidationError
from ryo.core.files import extension_for
from ryo.core.storage import BlobStore
from ryo.modules.user_management.models.user import User
from ryo.modules.user_management.schemas.user import UsernameAvailability
from ryo.modules.user_management.services.user import UserRepository
from ryo.modules.user_management.services.username import sanitize_and_validate_username

logger = logging.getLogger("ryo")

PROFILE_PICTURE_PREFIX = "profile-pictures"


def key_from_picture_url(url: Optional[str]) -> Optional[str]:
    """Blob key of a stored picture: the last two segments of its URL path"""
    if not url:
        return None
    parts = [p for p in urlparse(url).path.split("/") if p]
    if len(parts) < 2:
        return None
    return "/".join(parts[-2:])


def stored_picture_key(url: Optional[str]) -> Optional[str]:
    """Key of a picture this service uploaded; None for URLs pointing anywhere else"""
    base = settings.PUBLIC_MEDIA_URL.rstrip("/") + "/"
    if not url or not url.startswith(base):
        return None
    key = key_from_picture_url(url)
    if not key or not key.startswith(PROFILE_PICTURE_PREFIX + "/"):
        return None
    return key


def _delete_picture_blob(users: UserRepository, blobs: BlobStore, user: User, url: Optional[str]) -> None:
    key = stored_picture_key(url)
    if not key:
        return
    if users.picture_in_use(url, exclude_user_id=user.id):
        logger.warning(f"Keeping profile picture {key}: still used by another user")
        return
    try:
        blobs.delete_file(key)
        logger.info(f"Deleted old profile picture {key}")
    except (NotFoundError, UpstreamError) as e:
        logger.warning(f"Failed to delete old profile picture {key}: {e.detail}")


def replace_profile_picture(users: UserRepository, blobs: BlobStore, user: User, data: bytes, content_type: str) -> str:
    """Store a new picture, point the profile at it and drop the previous blob"""
    if not content_type.startswith("image/"):
        raise ValidationError("file must be an image")

    key = f"{PROFILE_PICTURE_PREFIX}/{uuid.uuid4()}{extension_for(content_type)}"
    blobs.upload_file(key, data, content_type)

    url = f"{settings.PUBLIC_MEDIA_URL.rstrip('/')}/{key}"
    previous = user.profile_picture_url
    users.update_profile_picture(user, url)
    logger.info(f"Updated profile picture for user {user.id}")

    if previous and previous != url:
        _delete_picture_blob(users, blobs, user, previous)
    return url


def remove_profile_picture(users: UserRepository, blobs: BlobStore, user: User) -> None:
    _delete_picture_blob(users, blobs, user, user.profile_picture_url)
    users.update_profile_picture(user, None)


def check_username_availability(users: UserRepository, user: User, raw: str) -> UsernameAvailability:
    """Report whether a (sanitized) username could be taken by the caller"""
    try:
        username = sanitize_and_validate_username(raw)
    except ValidationError as e:
        return UsernameAvailability(username=raw, available=False, reason=e.detail)

    if users.username_taken(username, exclude_user_id=user.id):
        return UsernameAvailability(username=username, available=False, reason="username is already taken")
    return UsernameAvailability(username=username, available=True)


def change_username(users: UserRepository, user: User, raw: str) -> User:
    username = sanitize_and_validate_username(raw)
    if users.username_taken(username, exclude_user_id=user.id):
        raise ValidationError("username is already taken")
    if username == user.username:
        return user
    logger.info(f"Changing username of user {user.id} to {username}")
    return users.update_username(user, username)
