from typing import Optional
import logging

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from fastapi.responses import Response

from ryo.core.storage import BlobStore
from ryo.deps import get_blob_store, get_current_user
from ryo.modules.media.schemas import (
    FileExistsResponse, FileInfoResponse, FileUploadResponse, ListFilesResponse,
    PresignedUrlRequest, PresignedUrlResponse,
)
from ryo.modules.media.service import MediaService
from ryo.modules.user_management.models.user import User
from ryo.modules.user_management.schemas.user import MessageResponse

logger = logging.getLogger(__name__)

# Every /files endpoint needs a session
router = APIRouter(prefix="/files", tags=["files"], dependencies=[Depends(get_current_user)])


def get_media_service(storage: BlobStore = Depends(get_blob_store)) -> MediaService:
    return MediaService(storage)


@router.post("/upload", response_model=FileUploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_file(
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    media_service: MediaService = Depends(get_media_service),
):
    key = await media_service.upload(file)
    logger.info(f"User {current_user.id} uploaded {key}")
    return FileUploadResponse(key=key)


@router.get("", response_model=ListFilesResponse)
def list_files(
    prefix: Optional[str] = Query(None),
    media_service: MediaService = Depends(get_media_service),
):
    return ListFilesResponse(files=media_service.list_files(prefix or ""), prefix=prefix or "")


@router.post("/presigned-url", response_model=PresignedUrlResponse)
def generate_presigned_url(
    request: PresignedUrlRequest,
    media_service: MediaService = Depends(get_media_service),
):
    return media_service.presigned_get(request)


@router.post("/presigned-upload-url", response_model=PresignedUrlResponse)
def generate_presigned_upload_url(
    request: PresignedUrlRequest,
    media_service: MediaService = Depends(get_media_service),
):
    return media_service.presigned_put(request)


@router.get("/info/{key:path}", response_model=FileInfoResponse)
def get_file_info(key: str, media_service: MediaService = Depends(get_media_service)):
    info = media_service.info(key)
    return FileInfoResponse(
        key=info.key,
        size=info.size,
        content_type=info.content_type,
        last_modified=info.last_modified,
        etag=info.etag,
        metadata=info.metadata,
    )


@router.get("/exists/{key:path}", response_model=FileExistsResponse)
def file_exists(key: str, media_service: MediaService = Depends(get_media_service)):
    return FileExistsResponse(exists=media_service.exists(key))


@router.get("/{key:path}")
def download_file(key: str, media_service: MediaService = Depends(get_media_service)) -> Response:
    data, content_type = media_service.download(key)
    return Response(content=data, media_type=content_type)


@router.delete("/{key:path}", response_model=MessageResponse)
def delete_file(key: str, media_service: MediaService = Depends(get_media_service)):
    media_service.delete(key)
    return MessageResponse(message="file deleted successfully")
