from typing import List, Optional, Tuple
import logging
import time

from fastapi import UploadFile

from ryo.core.config import settings
from ryo.core.exceptions import NotFoundError, UpstreamError, ValidationError
from ryo.core.files import read_upload, sniff_content_type
from ryo.core.storage import BlobStore, FileInfo
from ryo.modules.media.schemas import PresignedUrlRequest, PresignedUrlResponse

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def _require_key(key: Optional[str]) -> str:
    if not key:
        raise ValidationError("file key is required")
    return key


class MediaService:
    """Generic blob operations behind the /files endpoints"""

    def __init__(self, storage: BlobStore):
        self.storage = storage

    async def upload(self, file: UploadFile) -> str:
        data = await read_upload(file, settings.MAX_UPLOAD_SIZE)
        key = f"uploads/{int(time.time())}_{file.filename}"
        content_type = file.content_type or sniff_content_type(data)
        self.storage.upload_file(key, data, content_type)
        logger.info(f"Stored upload {key} ({content_type}, {len(data)} bytes)")
        return key

    def download(self, key: str) -> Tuple[bytes, str]:
        """Return the blob and its stored content type"""
        data = self.storage.download_file(_require_key(key))
        try:
            content_type = self.storage.get_file_info(key).content_type or DEFAULT_CONTENT_TYPE
        except (NotFoundError, UpstreamError) as e:
            logger.warning(f"Could not read content type of {key}: {e.detail}")
            content_type = DEFAULT_CONTENT_TYPE
        return data, content_type

    def delete(self, key: str) -> None:
        self.storage.delete_file(_require_key(key))

    def info(self, key: str) -> FileInfo:
        return self.storage.get_file_info(_require_key(key))

    def exists(self, key: str) -> bool:
        return self.storage.file_exists(_require_key(key))

    def list_files(self, prefix: str = "") -> List[str]:
        return self.storage.list_files(prefix)

    def presigned_get(self, request: PresignedUrlRequest) -> PresignedUrlResponse:
        key = _require_key(request.key)
        expiration = request.expiration or settings.PRESIGNED_URL_EXPIRATION
        url = self.storage.generate_presigned_url(key, expiration)
        return PresignedUrlResponse(url=url, key=key, expiration=expiration)

    def presigned_put(self, request: PresignedUrlRequest) -> PresignedUrlResponse:
        key = _require_key(request.key)
        expiration = request.expiration or settings.PRESIGNED_URL_EXPIRATION
        url = self.storage.generate_presigned_put_url(key, request.content_type or DEFAULT_CONTENT_TYPE, expiration)
        return PresignedUrlResponse(url=url, key=key, expiration=expiration)
