"""
Completeness checks run before a booking is approved or documents are
generated from it.

Both profiles are pure functions over a BookingOut snapshot. The per-field
predicate `is_field_missing` is also used on its own to drive the
"missing" indicators next to each field in the admin UI.
"""
from enum import Enum
from typing import List

from pydantic import BaseModel

from kost_backoffice.models.booking import ROOM_NUMBER_UNSET
from kost_backoffice.schemas.booking import BookingOut


class BookingField(str, Enum):
    ROOM_NUMBER = "room_number"
    ROOM_TYPE = "room_type"
    PRICE = "price"
    PAID_AMOUNT = "paid_amount"
    GUEST_NAME = "guest_name"
    PHONE = "phone"
    START_DATE = "start_date"
    END_DATE = "end_date"


FIELD_LABELS = {
    BookingField.ROOM_NUMBER: "Nomor Kamar",
    BookingField.ROOM_TYPE: "Tipe Kamar",
    BookingField.PRICE: "Harga Sewa",
    BookingField.PAID_AMOUNT: "Jumlah Bayar",
    BookingField.GUEST_NAME: "Nama Tamu",
    BookingField.PHONE: "Nomor Telepon",
    BookingField.START_DATE: "Tanggal Mulai",
    BookingField.END_DATE: "Tanggal Selesai",
}

APPROVAL_FIELDS = (
    BookingField.ROOM_NUMBER,
    BookingField.ROOM_TYPE,
    BookingField.PRICE,
    BookingField.PAID_AMOUNT,
)

DOCUMENT_FIELDS = (
    BookingField.GUEST_NAME,
    BookingField.PHONE,
    BookingField.ROOM_NUMBER,
    BookingField.ROOM_TYPE,
    BookingField.START_DATE,
    BookingField.END_DATE,
    BookingField.PRICE,
    BookingField.PAID_AMOUNT,
)

APPROVAL_MESSAGE = "Field berikut harus diisi: {labels}"
DOCUMENT_MESSAGE = "Data berikut harus dilengkapi untuk generate dokumen: {labels}"


class ValidationResult(BaseModel):
    valid: bool
    missing_fields: List[BookingField] = []
    missing_field_labels: List[str] = []
    message: str = ""


def _blank(value) -> bool:
    return value is None or str(value).strip() == ""


def _not_positive(value) -> bool:
    return value is None or value <= 0


def is_field_missing(booking: BookingOut, field) -> bool:
    field = BookingField(field)

    if field == BookingField.ROOM_NUMBER:
        room_number = booking.room.room_number
        return _blank(room_number) or room_number.strip() == ROOM_NUMBER_UNSET
    if field == BookingField.ROOM_TYPE:
        return _blank(booking.room.type)
    if field == BookingField.PRICE:
        return _not_positive(booking.pricing.amount)
    if field == BookingField.PAID_AMOUNT:
        return _not_positive(booking.pricing.paid_amount)
    if field == BookingField.GUEST_NAME:
        return _blank(booking.contact_info.name)
    if field == BookingField.PHONE:
        return _blank(booking.contact_info.phone)
    if field == BookingField.START_DATE:
        return booking.rental_period.start_date is None
    if field == BookingField.END_DATE:
        return booking.rental_period.end_date is None

    raise ValueError(f"No missing-field rule for {field}")


def _validate(booking: BookingOut, fields, message_template: str) -> ValidationResult:
    missing = [field for field in fields if is_field_missing(booking, field)]
    if not missing:
        return ValidationResult(valid=True)

    labels = [FIELD_LABELS[field] for field in missing]
    return ValidationResult(
        valid=False,
        missing_fields=missing,
        missing_field_labels=labels,
        message=message_template.format(labels=", ".join(labels)),
    )


def validate_for_approval(booking: BookingOut) -> ValidationResult:
    return _validate(booking, APPROVAL_FIELDS, APPROVAL_MESSAGE)


def validate_for_documents(booking: BookingOut) -> ValidationResult:
    return _validate(booking, DOCUMENT_FIELDS, DOCUMENT_MESSAGE)


def missing_field_map(booking: BookingOut) -> dict:
    return {field.value: is_field_missing(booking, field) for field in BookingField}
