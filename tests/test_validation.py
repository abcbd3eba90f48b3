from datetime import date

import pytest
from conftest import make_snapshot

from kost_backoffice.schemas.booking import ContactInfo, Pricing, RentalPeriod, RoomInfo
from kost_backoffice.services.validation import (
    BookingField,
    FIELD_LABELS,
    is_field_missing,
    missing_field_map,
    validate_for_approval,
    validate_for_documents,
)


def test_complete_booking_passes_both_profiles():
    booking = make_snapshot()
    assert validate_for_approval(booking).valid
    assert validate_for_documents(booking).valid


@pytest.mark.parametrize("room_number", ["", "   ", "Belum diset"])
def test_room_number_missing_variants(room_number):
    booking = make_snapshot(room=RoomInfo(room_number=room_number, type="Deluxe"))
    assert is_field_missing(booking, BookingField.ROOM_NUMBER)


def test_approval_lists_exact_missing_labels():
    booking = make_snapshot(
        room=RoomInfo(room_number="Belum diset", type=""),
        pricing=Pricing(amount=0, paid_amount=0),
    )
    result = validate_for_approval(booking)

    assert not result.valid
    assert result.missing_field_labels == ["Nomor Kamar", "Tipe Kamar", "Harga Sewa", "Jumlah Bayar"]
    assert result.message == "Field berikut harus diisi: Nomor Kamar, Tipe Kamar, Harga Sewa, Jumlah Bayar"


def test_approval_ignores_contact_and_dates():
    booking = make_snapshot(
        contact_info=ContactInfo(),
        rental_period=RentalPeriod(start_date=None, end_date=None),
    )
    assert validate_for_approval(booking).valid


def test_document_profile_is_a_superset():
    booking = make_snapshot(
        contact_info=ContactInfo(name=" ", phone=None),
        rental_period=RentalPeriod(start_date=date(2025, 1, 1), end_date=None),
    )
    result = validate_for_documents(booking)

    assert not result.valid
    assert result.missing_field_labels == ["Nama Tamu", "Nomor Telepon", "Tanggal Selesai"]
    assert result.message.startswith("Data berikut harus dilengkapi untuk generate dokumen:")


def test_field_predicate_accepts_plain_strings():
    booking = make_snapshot(pricing=Pricing(amount=500_000, paid_amount=0))
    assert is_field_missing(booking, "paid_amount")
    assert not is_field_missing(booking, "price")


def test_missing_field_map_covers_every_field():
    fields = missing_field_map(make_snapshot(room=RoomInfo(room_number="", type="Deluxe")))
    assert set(fields) == {field.value for field in BookingField}
    assert fields["room_number"] is True
    assert fields["room_type"] is False


def test_every_field_has_a_label():
    assert set(FIELD_LABELS) == set(BookingField)
