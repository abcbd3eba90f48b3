import io
import os
import tempfile
import zipfile
from datetime import date, datetime, timezone

# Settings are read at import time, so they must be in place first
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="kost-logs-"))
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("JWT_ALGORITHM", "HS256")
os.environ.pop("REDIS_URL", None)

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from kost_backoffice.core.errors import TemplateMissingError, UploadError
from kost_backoffice.db.session import Base
from kost_backoffice.models.booking import Booking
from kost_backoffice.models.booking_document import BookingDocument  # noqa: F401 (registers mapper)
from kost_backoffice.models.enums import DurationType, RentalStatus
from kost_backoffice.schemas.booking import (
    BookingOut,
    ContactInfo,
    Pricing,
    RentalPeriod,
    RoomInfo,
)

W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"

BOOKING_ID = "5f0c2b9e-8d61-4c1a-9a57-3f2e1d0c9b8a"


def make_docx(*paragraphs: str, extra_parts=None) -> bytes:
    """
    Build a minimal .docx. Each paragraph is the raw inner XML of a <w:p>,
    or plain text which is wrapped in a single run.
    """
    body = []
    for paragraph in paragraphs:
        if not paragraph.startswith("<"):
            paragraph = f"<w:r><w:t>{paragraph}</w:t></w:r>"
        body.append(f"<w:p>{paragraph}</w:p>")

    document = (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<w:document xmlns:w="{W_NS}"><w:body>{"".join(body)}</w:body></w:document>'
    )

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        archive.writestr("[Content_Types].xml", "<Types/>")
        archive.writestr("word/document.xml", document)
        for name, content in (extra_parts or {}).items():
            archive.writestr(name, content)
    return buffer.getvalue()


def read_part(docx: bytes, name: str = "word/document.xml") -> str:
    with zipfile.ZipFile(io.BytesIO(docx)) as archive:
        return archive.read(name).decode("utf-8")


def corrupt_member(docx: bytes, name: str = "word/document.xml") -> bytes:
    """Invert the stored bytes of one member, leaving the zip index intact."""
    with zipfile.ZipFile(io.BytesIO(docx)) as archive:
        info = archive.getinfo(name)

    data = bytearray(docx)
    offset = info.header_offset
    name_length = int.from_bytes(data[offset + 26:offset + 28], "little")
    extra_length = int.from_bytes(data[offset + 28:offset + 30], "little")
    start = offset + 30 + name_length + extra_length
    for index in range(start, start + info.compress_size):
        data[index] ^= 0xFF
    return bytes(data)


def make_snapshot(**overrides) -> BookingOut:
    """A complete booking snapshot; override pieces to make it incomplete."""
    values = dict(
        id=BOOKING_ID,
        rental_status=RentalStatus.PENDING,
        room=RoomInfo(room_number="A-12", type="Deluxe"),
        contact_info=ContactInfo(name="Rina Putri", phone="081234567890", email="rina@example.com"),
        rental_period=RentalPeriod(
            start_date=date(2025, 1, 1),
            end_date=date(2025, 1, 31),
            duration_type=DurationType.MONTHLY,
        ),
        pricing=Pricing(amount=1_000_000, paid_amount=400_000),
    )
    values.update(overrides)
    return BookingOut(**values)


class FrozenClock:
    def __init__(self, moment=None):
        self.moment = moment or datetime(2025, 3, 14, 9, 30, tzinfo=timezone.utc)

    def __call__(self):
        return self.moment


class FakeFileStore:
    """Collects uploads in memory; uploads whose name starts with a prefix in `fail_prefixes` fail."""

    def __init__(self, fail_prefixes=()):
        self.fail_prefixes = tuple(fail_prefixes)
        self.uploads = {}

    async def upload(self, content: bytes, file_name: str) -> str:
        if file_name.startswith(self.fail_prefixes):
            raise UploadError(f"storage rejected {file_name}")
        self.uploads[file_name] = content
        return f"https://files.example.com/{file_name}"


class InMemoryTemplateSource:
    def __init__(self, templates):
        self.templates = templates

    async def load(self, template_name: str) -> bytes:
        if template_name not in self.templates:
            raise TemplateMissingError(f"Template '{template_name}' not found", template_path=template_name)
        return self.templates[template_name]


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def make_booking(db_session):
    def factory(**overrides):
        values = dict(
            id=BOOKING_ID,
            rental_status=RentalStatus.PENDING,
            room_number="A-12",
            room_type="Deluxe",
            contact_name="Rina Putri",
            contact_phone="081234567890",
            contact_email="rina@example.com",
            start_date=date(2025, 1, 1),
            end_date=date(2025, 1, 31),
            duration_type=DurationType.MONTHLY,
            amount=1_000_000,
            paid_amount=400_000,
        )
        values.update(overrides)
        booking = Booking(**values)
        db_session.add(booking)
        db_session.commit()
        return booking.id

    return factory


@pytest.fixture
def bare_session():
    """A session on a database without tables, so every query fails."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    db = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield db
    finally:
        db.close()
