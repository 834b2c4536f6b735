import asyncio
import io

import pytest
from starlette.datastructures import UploadFile

from ryo.core.exceptions import ValidationError
from ryo.core.files import extension_for, read_upload, sniff_content_type

from _helpers import JPEG_BYTES, MP4_BYTES, PDF_BYTES, PNG_BYTES


@pytest.mark.parametrize("data, expected", [
    (PNG_BYTES, "image/png"),
    (JPEG_BYTES, "image/jpeg"),
    (b"GIF89a" + b"\x00" * 10, "image/gif"),
    (b"RIFF\x00\x00\x00\x00WEBPVP8 ", "image/webp"),
    (b"RIFF\x00\x00\x00\x00AVI LIST", "video/avi"),
    (b"RIFF\x00\x00\x00\x00WAVEfmt ", "audio/wav"),
    (MP4_BYTES, "video/mp4"),
    (b"\x00\x00\x00\x18ftypqt  " + b"\x00" * 8, "video/quicktime"),
    (b"\x00\x00\x00\x18ftypheic" + b"\x00" * 8, "image/heic"),
    (b"\x00\x00\x00\x1cftypavif\x00\x00\x00\x00avifmif1miaf", "image/avif"),
    (b"\x00\x00\x00\x18ftypavis" + b"\x00" * 8, "image/avif"),
    (b"\x00\x00\x00\x18ftypisom" + b"\x00" * 8, "video/mp4"),
    (b"\x00\x00\x00\x18ftypM4V " + b"\x00" * 8, "video/mp4"),
    (b"\x00\x00\x00\x18ftypmp41" + b"\x00" * 8, "video/mp4"),
    (b"\x00\x00\x00\x18ftypcrx " + b"\x00" * 8, "application/octet-stream"),
    (b"\x1a\x45\xdf\xa3" + b"\x00" * 8, "video/webm"),
    (PDF_BYTES, "application/pdf"),
    (b"ID3\x03\x00", "audio/mpeg"),
    (b"PK\x03\x04rest", "application/zip"),
    (b"hello world\n", "text/plain; charset=utf-8"),
    (b"\x00\x01\x02\x03", "application/octet-stream"),
    (b"", "application/octet-stream"),
])
def test_sniff_content_type(data, expected):
    assert sniff_content_type(data) == expected


@pytest.mark.parametrize("content_type, extension", [
    ("image/png", ".png"),
    ("image/jpeg", ".jpeg"),
    ("video/mp4", ".mp4"),
    ("image/avif", ".avif"),
    ("text/plain; charset=utf-8", ".txt"),
    ("application/x-unknown", ".bin"),
])
def test_extension_for(content_type, extension):
    assert extension_for(content_type) == extension


def test_read_upload_within_limit():
    upload = UploadFile(io.BytesIO(b"abc"), filename="a.txt")
    assert asyncio.run(read_upload(upload, 3)) == b"abc"


def test_read_upload_too_large():
    upload = UploadFile(io.BytesIO(b"abcd"), filename="a.txt")
    with pytest.raises(ValidationError, match="too large"):
        asyncio.run(read_upload(upload, 3))


def test_read_upload_empty():
    upload = UploadFile(io.BytesIO(b""), filename="a.txt")
    with pytest.raises(ValidationError, match="empty"):
        asyncio.run(read_upload(upload, 3))
