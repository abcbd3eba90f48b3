from datetime import date, datetime

import pytest

from kost_backoffice.core.errors import UploadError
from kost_backoffice.utils import cloudinary_utils
from kost_backoffice.utils.formatting import (
    format_currency,
    format_date_indonesian,
    format_raw_number,
    month_in_roman,
)


@pytest.mark.parametrize(
    "amount, expected",
    [(0, "Rp 0"), (750, "Rp 750"), (1_000_000, "Rp 1.000.000"), (1_250_000.4, "Rp 1.250.000"), (None, "Rp 0")],
)
def test_format_currency(amount, expected):
    assert format_currency(amount) == expected


def test_format_date_indonesian():
    assert format_date_indonesian(date(2025, 1, 1)) == "Rabu, 1 Januari 2025"
    assert format_date_indonesian(datetime(2025, 8, 17, 10, 0)) == "Minggu, 17 Agustus 2025"
    assert format_date_indonesian("2025-12-25") == "Kamis, 25 Desember 2025"
    assert format_date_indonesian(None) == ""


def test_month_in_roman():
    assert month_in_roman(date(2025, 11, 1)) == "XI"


def test_format_raw_number_drops_trailing_zero():
    assert format_raw_number(1_000_000.0) == 1000000
    assert isinstance(format_raw_number(1_000_000.0), int)
    assert format_raw_number(12.5) == 12.5


# ---------------- cloudinary ----------------
def test_cloudinary_upload_returns_secure_url(monkeypatch):
    calls = {}

    def fake_upload(content, **options):
        calls.update(options)
        return {"secure_url": "https://res.cloudinary.com/demo/raw/upload/x.docx", "public_id": "x.docx"}

    monkeypatch.setattr(cloudinary_utils.cloudinary.uploader, "upload", fake_upload)
    result = cloudinary_utils.upload_document(b"bytes", "x.docx")

    assert result == {"url": "https://res.cloudinary.com/demo/raw/upload/x.docx", "public_id": "x.docx"}
    assert calls["resource_type"] == "raw"
    assert calls["public_id"] == "x.docx"


def test_cloudinary_failure_becomes_upload_error(monkeypatch):
    def fake_upload(content, **options):
        raise RuntimeError("Must supply api_key")

    monkeypatch.setattr(cloudinary_utils.cloudinary.uploader, "upload", fake_upload)

    with pytest.raises(UploadError) as excinfo:
        cloudinary_utils.upload_document(b"bytes", "x.docx")
    assert "Must supply api_key" in excinfo.value.message


def test_cloudinary_response_without_url(monkeypatch):
    monkeypatch.setattr(cloudinary_utils.cloudinary.uploader, "upload", lambda content, **options: {})

    with pytest.raises(UploadError):
        cloudinary_utils.upload_document(b"bytes", "x.docx")
