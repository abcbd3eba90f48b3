import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship

from kost_backoffice.db.session import Base
from kost_backoffice.models.enums import DocumentType


class BookingDocument(Base):
    __tablename__ = "booking_documents"

    # Append order of documents within a booking
    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(36), unique=True, index=True, nullable=False, default=lambda: str(uuid.uuid4()))
    booking_id = Column(String(36), ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)

    type = Column(Enum(DocumentType, name="documenttype"), nullable=False)
    file_name = Column(String, nullable=False)
    file_url = Column(String, nullable=False)  # Cloudinary secure_url

    uploaded_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    booking = relationship("Booking", back_populates="documents")
