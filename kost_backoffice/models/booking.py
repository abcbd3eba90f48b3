import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Date, DateTime, Float, Text, Enum
from sqlalchemy.orm import relationship

from kost_backoffice.db.session import Base
from kost_backoffice.models.enums import RentalStatus, DurationType

ROOM_NUMBER_UNSET = "Belum diset"


def _utcnow():
    return datetime.now(timezone.utc)


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=True)  # customer account that placed it

    rental_status = Column(
        Enum(RentalStatus, name="rentalstatus"),
        nullable=False,
        default=RentalStatus.PENDING,
    )

    # Room
    room_number = Column(String, nullable=False, default=ROOM_NUMBER_UNSET)
    room_type = Column(String, nullable=True)

    # Contact info (filled by staff)
    contact_name = Column(String, nullable=True)
    contact_email = Column(String, nullable=True)
    contact_phone = Column(String, nullable=True)
    contact_whatsapp = Column(String, nullable=True)

    # Rental period, end_date is always derived from start_date + duration_type
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    duration_type = Column(
        Enum(DurationType, name="durationtype"),
        nullable=False,
        default=DurationType.MONTHLY,
    )

    # Pricing
    amount = Column(Float, nullable=False, default=0.0)
    paid_amount = Column(Float, nullable=False, default=0.0)
    currency = Column(String(3), nullable=False, default="IDR")

    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    documents = relationship(
        "BookingDocument",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="BookingDocument.seq",
    )
