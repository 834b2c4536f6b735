from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Protocol
import logging

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from .config import Settings, settings
from .exceptions import NotFoundError, UpstreamError

logger = logging.getLogger(__name__)

_MISSING_CODES = {"NoSuchKey", "NotFound", "404"}


@dataclass
class FileInfo:
    key: str
    size: int
    content_type: str
    last_modified: Optional[datetime]
    etag: str
    metadata: Dict[str, str] = field(default_factory=dict)


class BlobStore(Protocol):
    def upload_file(self, key: str, data: bytes, content_type: str, metadata: Optional[Dict[str, str]] = None) -> None: ...

    def download_file(self, key: str) -> bytes: ...

    def delete_file(self, key: str) -> None: ...

    def file_exists(self, key: str) -> bool: ...

    def list_files(self, prefix: str = "") -> List[str]: ...

    def get_file_info(self, key: str) -> FileInfo: ...

    def generate_presigned_url(self, key: str, expiration: int) -> str: ...

    def generate_presigned_put_url(self, key: str, content_type: str, expiration: int) -> str: ...


def _is_missing(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code") in _MISSING_CODES


class R2Storage:
    """Handles file storage using Cloudflare R2 through the S3 API"""

    def __init__(self, config: Settings = settings):
        self.client = None
        self.bucket = config.R2_BUCKET_NAME
        endpoint = config.r2_endpoint_url

        logger.info("Initializing R2Storage with configuration:")
        logger.info(f"  Bucket: {self.bucket}")
        logger.info(f"  Endpoint: {endpoint}")
        logger.info(f"  Access Key ID: {config.R2_ACCESS_KEY_ID[:5]}..." if config.R2_ACCESS_KEY_ID else "  Access Key ID: Not set")

        if all([endpoint, config.R2_ACCESS_KEY_ID, config.R2_SECRET_ACCESS_KEY]):
            self.client = boto3.client(
                "s3",
                endpoint_url=endpoint,
                aws_access_key_id=config.R2_ACCESS_KEY_ID,
                aws_secret_access_key=config.R2_SECRET_ACCESS_KEY,
                region_name="auto",
                config=Config(signature_version="s3v4", s3={"addressing_style": "path"}),
            )
            logger.info("R2Storage S3 client initialized successfully")
        else:
            missing = []
            if not endpoint:
                missing.append("R2_ACCOUNT_ID or R2_ENDPOINT")
            if not config.R2_ACCESS_KEY_ID:
                missing.append("R2_ACCESS_KEY_ID")
            if not config.R2_SECRET_ACCESS_KEY:
                missing.append("R2_SECRET_ACCESS_KEY")
            logger.warning(f"R2 storage not properly configured - missing: {', '.join(missing)}")

    def _require_client(self):
        if not self.client:
            logger.error("Attempted storage operation but R2 client is not initialized")
            raise UpstreamError("object storage is not configured")
        return self.client

    def check_connection(self) -> bool:
        """Verify the bucket is reachable; used at startup for diagnostics only"""
        if not self.client:
            return False
        try:
            self.client.head_bucket(Bucket=self.bucket)
            logger.info(f"Target bucket '{self.bucket}' found and accessible")
            return True
        except (BotoCoreError, ClientError) as e:
            logger.warning(f"Bucket '{self.bucket}' is not accessible: {e}")
            return False

    def upload_file(self, key: str, data: bytes, content_type: str, metadata: Optional[Dict[str, str]] = None) -> None:
        client = self._require_client()
        logger.info(f"[UPLOAD] Uploading {len(data)} bytes to bucket '{self.bucket}' with key '{key}'")
        params = {
            "Bucket": self.bucket,
            "Key": key,
            "Body": data,
            "ContentType": content_type or "application/octet-stream",
        }
        if metadata:
            params["Metadata"] = metadata
        try:
            client.put_object(**params)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"[UPLOAD] Failed to upload to R2: {e}")
            raise UpstreamError("failed to upload file") from e

    def download_file(self, key: str) -> bytes:
        client = self._require_client()
        try:
            response = client.get_object(Bucket=self.bucket, Key=key)
            return response["Body"].read()
        except ClientError as e:
            if _is_missing(e):
                raise NotFoundError("file not found") from e
            logger.error(f"Failed to download '{key}' from R2: {e}")
            raise UpstreamError("failed to download file") from e
        except BotoCoreError as e:
            logger.error(f"Failed to download '{key}' from R2: {e}")
            raise UpstreamError("failed to download file") from e

    def delete_file(self, key: str) -> None:
        client = self._require_client()
        logger.info(f"Deleting file with key '{key}' from bucket '{self.bucket}'")
        try:
            client.delete_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if _is_missing(e):
                raise NotFoundError("file not found") from e
            logger.error(f"Failed to delete from R2: {e}")
            raise UpstreamError("failed to delete file") from e
        except BotoCoreError as e:
            logger.error(f"Failed to delete from R2: {e}")
            raise UpstreamError("failed to delete file") from e

    def file_exists(self, key: str) -> bool:
        try:
            self.get_file_info(key)
        except NotFoundError:
            return False
        return True

    def list_files(self, prefix: str = "") -> List[str]:
        client = self._require_client()
        params = {"Bucket": self.bucket}
        if prefix:
            params["Prefix"] = prefix
        keys = []
        try:
            for page in client.get_paginator("list_objects_v2").paginate(**params):
                keys.extend(obj["Key"] for obj in page.get("Contents", []))
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to list files: {e}")
            raise UpstreamError("failed to list files") from e
        return keys

    def get_file_info(self, key: str) -> FileInfo:
        client = self._require_client()
        try:
            result = client.head_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if _is_missing(e):
                raise NotFoundError("file not found") from e
            logger.error(f"Failed to get file info for '{key}': {e}")
            raise UpstreamError("failed to get file info") from e
        except BotoCoreError as e:
            logger.error(f"Failed to get file info for '{key}': {e}")
            raise UpstreamError("failed to get file info") from e

        return FileInfo(
            key=key,
            size=result.get("ContentLength", 0),
            content_type=result.get("ContentType", ""),
            last_modified=result.get("LastModified"),
            etag=result.get("ETag", "").strip('"'),
            metadata=result.get("Metadata", {}),
        )

    def generate_presigned_url(self, key: str, expiration: int) -> str:
        client = self._require_client()
        try:
            return client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=expiration,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to generate pre-signed URL for '{key}': {e}")
            raise UpstreamError("failed to generate pre-signed URL") from e

    def generate_presigned_put_url(self, key: str, content_type: str, expiration: int) -> str:
        client = self._require_client()
        try:
            return client.generate_presigned_url(
                "put_object",
                Params={"Bucket": self.bucket, "Key": key, "ContentType": content_type},
                ExpiresIn=expiration,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to generate pre-signed PUT URL for '{key}': {e}")
            raise UpstreamError("failed to generate pre-signed upload URL") from e


# Global instance for app-wide usage
r2_storage = R2Storage()
logger.info("R2Storage initialization complete")
