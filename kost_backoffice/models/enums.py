from enum import Enum


class RentalStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    CANCEL = "CANCEL"


class BookingAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    CANCEL = "cancel"
    REACTIVATE = "reactivate"


class DurationType(str, Enum):
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    SEMESTER = "SEMESTER"
    YEARLY = "YEARLY"


class DocumentType(str, Enum):
    BOOKING_SLIP = "BOOKING_SLIP"
    RECEIPT = "RECEIPT"
    SOP = "SOP"          # uploaded by staff, never generated
    INVOICE = "INVOICE"


# Derived only, never stored
class PaymentStatus(str, Enum):
    UNPAID = "UNPAID"
    PARTIAL = "PARTIAL"
    PAID = "PAID"


GENERATED_DOCUMENT_TYPES = (
    DocumentType.BOOKING_SLIP,
    DocumentType.RECEIPT,
    DocumentType.INVOICE,
)
