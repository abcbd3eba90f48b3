import threading
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Optional

from kost_backoffice.core.config import DOCUMENT_TIMEZONE
from kost_backoffice.models.enums import DocumentType
from kost_backoffice.utils.formatting import month_in_roman

# "SR" doubles as the contract series marker on the booking slip
DOCUMENT_PREFIXES = {
    DocumentType.BOOKING_SLIP: "SR",
    DocumentType.INVOICE: "INV",
    DocumentType.RECEIPT: "RCP",
}

FILE_NAME_STEMS = {
    DocumentType.BOOKING_SLIP: "booking-slip",
    DocumentType.INVOICE: "invoice",
    DocumentType.RECEIPT: "receipt",
}

ID_FRAGMENT_LENGTH = 8


def local_now() -> datetime:
    return datetime.now(DOCUMENT_TIMEZONE)


@dataclass(frozen=True)
class DocumentNumber:
    number: str
    file_name: str
    timestamp: int


@dataclass(frozen=True)
class ContractMetadata:
    month_roman: str
    year: str


class DocumentNumberingService:
    """
    Issues PREFIX-idFragment-epochMillis document numbers.

    The millisecond part never repeats within the process: when the clock has
    not moved past the last issued value, the last value + 1 is used.
    No cross-process sequence authority exists.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock or local_now
        self._lock = threading.Lock()
        self._last_timestamp = 0

    def _next_timestamp(self) -> int:
        millis = int(self._clock().timestamp() * 1000)
        with self._lock:
            if millis <= self._last_timestamp:
                millis = self._last_timestamp + 1
            self._last_timestamp = millis
        return millis

    def issue(self, booking_id: str, document_type: DocumentType) -> DocumentNumber:
        document_type = DocumentType(document_type)
        if document_type not in DOCUMENT_PREFIXES:
            raise ValueError(f"{document_type.value} documents are uploaded, not numbered")

        fragment = booking_id[:ID_FRAGMENT_LENGTH]
        timestamp = self._next_timestamp()

        return DocumentNumber(
            number=f"{DOCUMENT_PREFIXES[document_type]}-{fragment}-{timestamp}",
            file_name=f"{FILE_NAME_STEMS[document_type]}-{fragment}-{timestamp}.docx",
            timestamp=timestamp,
        )

    def next_number(self, booking_id: str, document_type: DocumentType) -> str:
        return self.issue(booking_id, document_type).number

    def now(self) -> datetime:
        return self._clock()

    @staticmethod
    def contract_metadata(start_date: date) -> ContractMetadata:
        return ContractMetadata(month_roman=month_in_roman(start_date), year=f"{start_date.year:04d}")
