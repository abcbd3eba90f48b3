from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from kost_backoffice.models.enums import (
    BookingAction,
    DocumentType,
    DurationType,
    RentalStatus,
)
from kost_backoffice.utils.payment_status import PaymentSummary, resolve_payment


class RoomInfo(BaseModel):
    room_number: str = ""
    type: str = ""


class ContactInfo(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    whatsapp: Optional[str] = None


class RentalPeriod(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    duration_type: DurationType = DurationType.MONTHLY


class Pricing(BaseModel):
    amount: float = 0.0
    paid_amount: float = 0.0
    currency: str = "IDR"


class DocumentCreate(BaseModel):
    type: DocumentType
    file_name: str
    file_url: str


class DocumentOut(DocumentCreate):
    id: str
    uploaded_at: datetime

    model_config = {"from_attributes": True}


class BookingOut(BaseModel):
    id: str
    user_id: Optional[str] = None
    rental_status: RentalStatus
    room: RoomInfo
    contact_info: ContactInfo = ContactInfo()
    rental_period: RentalPeriod
    pricing: Pricing
    documents: List[DocumentOut] = []
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @computed_field
    @property
    def payment(self) -> PaymentSummary:
        return resolve_payment(self.pricing.amount, self.pricing.paid_amount)

    @classmethod
    def from_model(cls, booking) -> "BookingOut":
        return cls(
            id=booking.id,
            user_id=booking.user_id,
            rental_status=booking.rental_status,
            room=RoomInfo(
                room_number=booking.room_number or "",
                type=booking.room_type or "",
            ),
            contact_info=ContactInfo(
                name=booking.contact_name,
                email=booking.contact_email,
                phone=booking.contact_phone,
                whatsapp=booking.contact_whatsapp,
            ),
            rental_period=RentalPeriod(
                start_date=booking.start_date,
                end_date=booking.end_date,
                duration_type=booking.duration_type,
            ),
            pricing=Pricing(
                amount=booking.amount or 0.0,
                paid_amount=booking.paid_amount or 0.0,
                currency=booking.currency or "IDR",
            ),
            documents=[DocumentOut.model_validate(d) for d in booking.documents],
            notes=booking.notes,
            created_at=booking.created_at,
            updated_at=booking.updated_at,
        )


class BookingPatch(BaseModel):
    """Editable booking fields. end_date is derived, so it is not accepted."""

    model_config = ConfigDict(extra="forbid")

    room_number: Optional[str] = None
    room_type: Optional[str] = None

    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_whatsapp: Optional[str] = None

    start_date: Optional[date] = None
    duration_type: Optional[DurationType] = None

    amount: Optional[float] = Field(default=None, ge=0)
    paid_amount: Optional[float] = Field(default=None, ge=0)
    currency: Optional[str] = None

    notes: Optional[str] = None


# ---------------- REQUESTS ----------------
class TransitionRequest(BaseModel):
    action: BookingAction


class GenerateDocumentRequest(BaseModel):
    type: DocumentType


# ---------------- RESULTS ----------------
class TransitionResult(BaseModel):
    success: bool
    message: str
    missing_fields: Optional[List[str]] = None
    booking: Optional[BookingOut] = None


class EditResult(BaseModel):
    success: bool
    booking: Optional[BookingOut] = None
    error: Optional[str] = None


class DocumentResult(BaseModel):
    success: bool
    document: Optional[DocumentOut] = None
    error: Optional[str] = None
    missing_fields: Optional[List[str]] = None


class GeneratedDocuments(BaseModel):
    slip: Optional[DocumentOut] = None
    receipt: Optional[DocumentOut] = None
    invoice: Optional[DocumentOut] = None


class GenerateAllResult(BaseModel):
    success: bool
    documents: GeneratedDocuments = GeneratedDocuments()
    errors: List[str] = []
    missing_fields: Optional[List[str]] = None


class MissingFieldsOut(BaseModel):
    booking_id: str
    fields: Dict[str, bool]
