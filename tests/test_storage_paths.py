"""Storage path layout and upload input checks."""

import io

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from app.api.v1.resources.service import (
    build_storage_path,
    normalize_external_url,
    read_pdf_upload,
    sanitize_filename,
)
from app.core.exceptions import ValidationError


def make_upload(content: bytes, filename: str = "paper.pdf", content_type: str = "application/pdf") -> UploadFile:
    return UploadFile(
        file=io.BytesIO(content),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


def test_sanitize_replaces_each_unsafe_character() -> None:
    assert sanitize_filename("my file?!.pdf") == "my_file__.pdf"
    assert sanitize_filename("Unit-1_notes.v2.pdf") == "Unit-1_notes.v2.pdf"
    assert sanitize_filename("résumé.pdf") == "r_sum_.pdf"


def test_path_with_unit() -> None:
    assert build_storage_path(3, 17, 42, "my file?!.pdf", timestamp_ms=1700000000123) == (
        "3/17/42/1700000000123-my_file__.pdf"
    )


def test_path_without_unit() -> None:
    assert build_storage_path(3, 17, None, "paper.pdf", timestamp_ms=5) == "3/17/5-paper.pdf"


def test_path_timestamp_defaults_to_now() -> None:
    path = build_storage_path(1, 2, None, "a.pdf")
    timestamp = path.split("/")[-1].split("-")[0]
    assert timestamp.isdigit() and len(timestamp) >= 13


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("https://example.org/x", "https://example.org/x"),
        ("http://example.org/x", "http://example.org/x"),
        ("HTTPS://Example.org", "HTTPS://Example.org"),
        ("example.org/x", "https://example.org/x"),
        ("  drive.google.com/file  ", "https://drive.google.com/file"),
    ],
)
def test_normalize_external_url(raw, expected) -> None:
    assert normalize_external_url(raw) == expected


@pytest.mark.asyncio
async def test_pdf_upload_accepted() -> None:
    content = await read_pdf_upload(make_upload(b"%PDF-1.7 body"), max_bytes=1024)
    assert content == b"%PDF-1.7 body"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "upload, message",
    [
        (None, "No file uploaded"),
        (make_upload(b"", filename=""), "No file uploaded"),
        (make_upload(b""), "No file uploaded"),
        (make_upload(b"hello", filename="a.txt", content_type="text/plain"), "Only PDF files are allowed"),
    ],
)
async def test_pdf_upload_rejected(upload, message) -> None:
    with pytest.raises(ValidationError) as exc_info:
        await read_pdf_upload(upload, max_bytes=1024)
    assert exc_info.value.message == message
    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
async def test_pdf_upload_size_limit() -> None:
    limit = 10 * 1024 * 1024
    await read_pdf_upload(make_upload(b"x" * limit), max_bytes=limit)
    with pytest.raises(ValidationError) as exc_info:
        await read_pdf_upload(make_upload(b"x" * (limit + 1)), max_bytes=limit)
    assert exc_info.value.message == "File too large (max 10 MB)"
