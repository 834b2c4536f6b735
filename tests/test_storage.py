import io

import pytest
from botocore.response import StreamingBody
from botocore.stub import Stubber

from ryo.core.config import Settings
from ryo.core.exceptions import NotFoundError, UpstreamError
from ryo.core.storage import R2Storage


@pytest.fixture
def storage():
    config = Settings(
        R2_ACCOUNT_ID="account",
        R2_ACCESS_KEY_ID="key-id",
        R2_SECRET_ACCESS_KEY="secret",
        R2_BUCKET_NAME="bucket",
    )
    return R2Storage(config)


@pytest.fixture
def stubber(storage):
    with Stubber(storage.client) as stub:
        yield stub
        stub.assert_no_pending_responses()


def test_endpoint_derived_from_account_id(storage):
    assert storage.client.meta.endpoint_url == "https://account.r2.cloudflarestorage.com"


def test_upload_file(storage, stubber):
    stubber.add_response(
        "put_object",
        {},
        {"Bucket": "bucket", "Key": "uploads/a.txt", "Body": b"hi", "ContentType": "text/plain"},
    )
    storage.upload_file("uploads/a.txt", b"hi", "text/plain")


def test_upload_failure_is_upstream(storage, stubber):
    stubber.add_client_error("put_object", service_error_code="InternalError", http_status_code=500)
    with pytest.raises(UpstreamError):
        storage.upload_file("uploads/a.txt", b"hi", "text/plain")


def test_download_file(storage, stubber):
    stubber.add_response(
        "get_object",
        {"Body": StreamingBody(io.BytesIO(b"payload"), len(b"payload"))},
        {"Bucket": "bucket", "Key": "uploads/a.txt"},
    )
    assert storage.download_file("uploads/a.txt") == b"payload"


def test_download_missing_is_not_found(storage, stubber):
    stubber.add_client_error("get_object", service_error_code="NoSuchKey", http_status_code=404)
    with pytest.raises(NotFoundError):
        storage.download_file("uploads/missing.txt")


def test_file_exists_maps_404(storage, stubber):
    stubber.add_client_error("head_object", service_error_code="404", http_status_code=404)
    assert storage.file_exists("uploads/missing.txt") is False


def test_file_exists_propagates_other_errors(storage, stubber):
    stubber.add_client_error("head_object", service_error_code="AccessDenied", http_status_code=403)
    with pytest.raises(UpstreamError):
        storage.file_exists("uploads/secret.txt")


def test_get_file_info(storage, stubber):
    stubber.add_response(
        "head_object",
        {"ContentLength": 7, "ContentType": "text/plain", "ETag": '"abc123"', "Metadata": {"owner": "ryo"}},
        {"Bucket": "bucket", "Key": "uploads/a.txt"},
    )
    info = storage.get_file_info("uploads/a.txt")
    assert info.size == 7
    assert info.content_type == "text/plain"
    assert info.etag == "abc123"
    assert info.metadata == {"owner": "ryo"}


def test_list_files(storage, stubber):
    stubber.add_response(
        "list_objects_v2",
        {"Contents": [{"Key": "uploads/a.txt"}, {"Key": "uploads/b.txt"}], "IsTruncated": False},
        {"Bucket": "bucket", "Prefix": "uploads/"},
    )
    assert storage.list_files("uploads/") == ["uploads/a.txt", "uploads/b.txt"]


def test_presigned_urls_need_no_network(storage):
    url = storage.generate_presigned_url("uploads/a.txt", 60)
    assert "uploads/a.txt" in url
    assert "X-Amz-Expires=60" in url

    put_url = storage.generate_presigned_put_url("uploads/b.txt", "image/png", 120)
    assert "X-Amz-Expires=120" in put_url


def test_unconfigured_storage():
    storage = R2Storage(Settings(R2_ACCOUNT_ID="", R2_ENDPOINT="", R2_ACCESS_KEY_ID="", R2_SECRET_ACCESS_KEY=""))
    assert storage.client is None
    assert storage.check_connection() is False
    with pytest.raises(UpstreamError, match="not configured"):
        storage.download_file("x")
