from typing import Any, Optional
import logging

from fastapi import APIRouter, Depends, File, Query, UploadFile

from ryo.core.config import settings
from ryo.core.exceptions import NotFoundError
from ryo.core.files import read_upload, sniff_content_type
from ryo.core.storage import BlobStore
from ryo.deps import get_blob_store, get_current_user, get_user_repository
from ryo.modules.user_management.models.user import User
from ryo.modules.user_management.schemas.user import (
    MessageResponse, ProfilePictureResponse, ProfilePictureUpdate, ProfilePictureUploadResponse,
    UsernameAvailability, UsernameUpdate, UserProfile,
)
from ryo.modules.user_management.services.profile import (
    change_username, check_username_availability, remove_profile_picture, replace_profile_picture,
)
from ryo.modules.user_management.services.user import UserRepository

router = APIRouter()
logger = logging.getLogger("ryo")


@router.get("", response_model=UserProfile)
@router.get("/", response_model=UserProfile, include_in_schema=False)
def read_profile(
    current_user: User = Depends(get_current_user),
) -> Any:
    """Get current user"""
    return current_user


@router.get("/picture/{user_id}", response_model=ProfilePictureResponse)
def read_profile_picture(
    user_id: str,
    users: UserRepository = Depends(get_user_repository),
) -> Any:
    """Public lookup of a user's profile picture URL"""
    user = users.get_by_id(user_id)
    if not user:
        raise NotFoundError("user not found")
    return ProfilePictureResponse(profile_picture_url=user.profile_picture_url)


@router.put("/picture/update", response_model=UserProfile)
def update_profile_picture(
    picture_in: ProfilePictureUpdate,
    current_user: User = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
) -> Any:
    """Point the profile picture at an existing URL, or clear it with null"""
    return users.update_profile_picture(current_user, picture_in.profile_picture_url)


@router.post("/picture/upload", response_model=ProfilePictureUploadResponse)
async def upload_profile_picture(
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
    blobs: BlobStore = Depends(get_blob_store),
) -> Any:
    """Upload a profile picture for the current user"""
    data = await read_upload(file, settings.MAX_PROFILE_PICTURE_SIZE)
    url = replace_profile_picture(users, blobs, current_user, data, sniff_content_type(data))
    return ProfilePictureUploadResponse(profile_picture_url=url)


@router.delete("/picture/delete", response_model=MessageResponse)
def delete_profile_picture(
    current_user: User = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
    blobs: BlobStore = Depends(get_blob_store),
) -> Any:
    remove_profile_picture(users, blobs, current_user)
    return MessageResponse(message="Profile picture deleted successfully")


@router.get("/username/check", response_model=UsernameAvailability)
def check_username(
    username: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
) -> Any:
    return check_username_availability(users, current_user, username or "")


@router.put("/username", response_model=UserProfile)
def update_username(
    username_in: UsernameUpdate,
    current_user: User = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
) -> Any:
    """Change the current user's username"""
    return change_username(users, current_user, username_in.username)
