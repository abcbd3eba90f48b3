from contextlib import contextmanager
from typing import List, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from kost_backoffice.core.errors import BookingNotFoundError, PersistenceError
from kost_backoffice.models.booking import Booking
from kost_backoffice.models.booking_document import BookingDocument
from kost_backoffice.models.enums import RentalStatus
from kost_backoffice.schemas.booking import BookingOut, DocumentCreate, DocumentOut

UPDATABLE_COLUMNS = {
    "room_number",
    "room_type",
    "contact_name",
    "contact_email",
    "contact_phone",
    "contact_whatsapp",
    "start_date",
    "end_date",
    "duration_type",
    "amount",
    "paid_amount",
    "currency",
    "notes",
}


class BookingStore(Protocol):
    async def get_by_id(self, booking_id: str) -> Optional[BookingOut]: ...

    async def list_all(self, status: Optional[RentalStatus] = None) -> List[BookingOut]: ...

    async def update_status(self, booking_id: str, status: RentalStatus) -> BookingOut: ...

    async def update_fields(self, booking_id: str, patch: dict) -> BookingOut: ...

    async def append_document(self, booking_id: str, document: DocumentCreate) -> DocumentOut: ...

    async def delete(self, booking_id: str) -> None: ...


class SqlBookingStore:
    """
    Booking Store backed by the `bookings` / `booking_documents` tables.

    Every write is a single commit. The methods are coroutines but run on
    the event loop thread, so concurrent document pipelines appending to the
    same booking are serialised here.
    """

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _guard(self, action: str):
        """Turn any database failure inside the block into a PersistenceError."""
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(f"Failed to {action}: {e}") from e

    def _get_model(self, booking_id: str) -> Booking:
        booking = self.db.query(Booking).filter(Booking.id == booking_id).first()
        if not booking:
            raise BookingNotFoundError(booking_id)
        return booking

    async def get_by_id(self, booking_id: str) -> Optional[BookingOut]:
        with self._guard("load booking"):
            booking = self.db.query(Booking).filter(Booking.id == booking_id).first()
            # documents load lazily, so the snapshot is built inside the guard
            return BookingOut.from_model(booking) if booking else None

    async def list_all(self, status: Optional[RentalStatus] = None) -> List[BookingOut]:
        with self._guard("list bookings"):
            query = self.db.query(Booking)
            if status is not None:
                query = query.filter(Booking.rental_status == status)
            bookings = query.order_by(Booking.created_at.desc()).all()
            return [BookingOut.from_model(b) for b in bookings]

    async def update_status(self, booking_id: str, status: RentalStatus) -> BookingOut:
        with self._guard("update booking status"):
            booking = self._get_model(booking_id)
            booking.rental_status = status
            self.db.commit()
            self.db.refresh(booking)
            return BookingOut.from_model(booking)

    async def update_fields(self, booking_id: str, patch: dict) -> BookingOut:
        unknown = set(patch) - UPDATABLE_COLUMNS
        if unknown:
            raise PersistenceError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        with self._guard("update booking"):
            booking = self._get_model(booking_id)
            for column, value in patch.items():
                setattr(booking, column, value)
            self.db.commit()
            self.db.refresh(booking)
            return BookingOut.from_model(booking)

    async def append_document(self, booking_id: str, document: DocumentCreate) -> DocumentOut:
        with self._guard("save document"):
            booking = self._get_model(booking_id)
            record = BookingDocument(
                booking_id=booking.id,
                type=document.type,
                file_name=document.file_name,
                file_url=document.file_url,
            )
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
            return DocumentOut.model_validate(record)

    async def delete(self, booking_id: str) -> None:
        with self._guard("delete booking"):
            booking = self._get_model(booking_id)
            self.db.delete(booking)
            self.db.commit()
