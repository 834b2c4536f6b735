from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class FileUploadResponse(BaseModel):
    key: str


class PresignedUrlRequest(BaseModel):
    key: str = ""
    content_type: Optional[str] = None
    expiration: int = 0


class PresignedUrlResponse(BaseModel):
    url: str
    key: str
    expiration: int


class FileInfoResponse(BaseModel):
    key: str
    size: int
    content_type: str
    last_modified: Optional[datetime] = None
    etag: str
    metadata: Dict[str, str] = Field(default_factory=dict)


class ListFilesResponse(BaseModel):
    files: List[str]
    prefix: str = ""


class FileExistsResponse(BaseModel):
    exists: bool
