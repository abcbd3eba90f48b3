"""
Booking slip / invoice / receipt generation.

One document pipeline is: load template -> render -> upload -> record.
The steps of a pipeline run in order; "generate all" runs the three
pipelines concurrently and reports each one separately, so one failed
upload never hides or rolls back the documents that did succeed.
"""
import asyncio
import uuid
from datetime import datetime
from typing import Optional, Union

from kost_backoffice.core import config
from kost_backoffice.core.errors import (
    BookingNotFoundError,
    DocumentEngineError,
    DocumentTimeoutError,
    PersistenceError,
    UploadError,
    ValidationError,
)
from kost_backoffice.core.logging_config import get_logger
from kost_backoffice.models.enums import GENERATED_DOCUMENT_TYPES, DocumentType
from kost_backoffice.schemas.booking import (
    BookingOut,
    DocumentCreate,
    DocumentOut,
    DocumentResult,
    GenerateAllResult,
    GeneratedDocuments,
)
from kost_backoffice.services.booking_store import BookingStore
from kost_backoffice.services.document_numbering import DocumentNumberingService
from kost_backoffice.services.file_store import FileStore
from kost_backoffice.services.template_engine import (
    TEMPLATE_NAMES,
    TemplateRenderingEngine,
    TemplateSource,
)
from kost_backoffice.services.validation import validate_for_documents
from kost_backoffice.utils.formatting import (
    format_currency,
    format_date_indonesian,
    format_raw_number,
)
from kost_backoffice.utils.payment_status import resolve_payment
from kost_backoffice.utils.rental_period import describe_duration

logger = get_logger()

DOCUMENT_LABELS = {
    DocumentType.BOOKING_SLIP: "Booking Slip",
    DocumentType.RECEIPT: "Receipt",
    DocumentType.INVOICE: "Invoice",
}

RESULT_SLOTS = {
    DocumentType.BOOKING_SLIP: "slip",
    DocumentType.RECEIPT: "receipt",
    DocumentType.INVOICE: "invoice",
}

ALLOWED_UPLOAD_TYPES = {
    "application/pdf": "pdf",
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "docx",
}


# =====================================================================
# TEMPLATE DATA
# =====================================================================
def _common_data(booking: BookingOut, company: dict) -> dict:
    period = booking.rental_period
    return {
        "guestName": booking.contact_info.name or "",
        "bookingId": booking.id,
        "startDate": format_date_indonesian(period.start_date),
        "endDate": format_date_indonesian(period.end_date),
        **company,
    }


def _billing_data(booking: BookingOut) -> dict:
    amount = booking.pricing.amount
    payment = resolve_payment(amount, booking.pricing.paid_amount)
    start_date = booking.rental_period.start_date

    return {
        "bookDate": format_date_indonesian(start_date),
        "bookDateRaw": start_date.isoformat() if start_date else "",
        "description": f"Sewa Kamar Kost - {booking.room.room_number}",
        "quantity": 1,
        "priceIdr": format_currency(amount),
        "totalPrice": format_currency(amount),
        "unpaidPrice": format_currency(payment.remaining_balance),
        "priceIdrRaw": format_raw_number(amount),
        "totalPriceRaw": format_raw_number(amount),
        "unpaidPriceRaw": format_raw_number(payment.remaining_balance),
        "paymentStatus": payment.status.value,
    }


def _booking_slip_data(booking: BookingOut, number: str, issued_at: datetime) -> dict:
    period = booking.rental_period
    contract = DocumentNumberingService.contract_metadata(period.start_date)

    return {
        "noRent": number,
        "monthInRomanNumber": contract.month_roman,
        "year": contract.year,
        "renterPhoneNumber": booking.contact_info.phone or "",
        "roomNumber": booking.room.room_number,
        "startDateRaw": period.start_date.isoformat(),
        "endDateRaw": period.end_date.isoformat(),
        "durasiSewa": describe_duration(period.start_date, period.end_date, period.duration_type),
        "rentPriceIdr": format_currency(booking.pricing.amount),
        "rentPriceIdrRaw": format_raw_number(booking.pricing.amount),
        "contractDate": format_date_indonesian(issued_at),
    }


def _invoice_data(booking: BookingOut, number: str, issued_at: datetime) -> dict:
    paid_amount = booking.pricing.paid_amount
    remaining = resolve_payment(booking.pricing.amount, paid_amount).remaining_balance

    return {
        **_billing_data(booking),
        "invoiceNumber": number,
        "dpPrice": format_currency(paid_amount),
        "dpPriceRaw": format_raw_number(paid_amount),
        "finalTotal": format_currency(remaining),
        "finalTotalRaw": format_raw_number(remaining),
        "invoiceDate": format_date_indonesian(issued_at),
    }


def _receipt_data(booking: BookingOut, number: str, issued_at: datetime) -> dict:
    paid_amount = booking.pricing.paid_amount

    # A receipt totals what was actually paid
    return {
        **_billing_data(booking),
        "receiptNumber": number,
        "paidPrice": format_currency(paid_amount),
        "paidPriceRaw": format_raw_number(paid_amount),
        "finalTotal": format_currency(paid_amount),
        "finalTotalRaw": format_raw_number(paid_amount),
        "receiptDate": format_date_indonesian(issued_at),
    }


TEMPLATE_DATA_BUILDERS = {
    DocumentType.BOOKING_SLIP: _booking_slip_data,
    DocumentType.INVOICE: _invoice_data,
    DocumentType.RECEIPT: _receipt_data,
}


def build_template_data(
    booking: BookingOut,
    document_type: DocumentType,
    number: str,
    issued_at: datetime,
    company: Optional[dict] = None,
) -> dict:
    company = config.company_info() if company is None else company
    if issued_at.tzinfo is not None:
        issued_at = issued_at.astimezone(config.DOCUMENT_TIMEZONE)
    return {
        **_common_data(booking, company),
        **TEMPLATE_DATA_BUILDERS[document_type](booking, number, issued_at),
    }


# =====================================================================
# ORCHESTRATOR
# =====================================================================
class DocumentGenerationOrchestrator:
    def __init__(
        self,
        store: BookingStore,
        file_store: FileStore,
        template_source: TemplateSource,
        engine: Optional[TemplateRenderingEngine] = None,
        numbering: Optional[DocumentNumberingService] = None,
        timeout: float = config.DOCUMENT_STEP_TIMEOUT_SECONDS,
        company: Optional[dict] = None,
    ):
        self.store = store
        self.file_store = file_store
        self.template_source = template_source
        self.engine = engine or TemplateRenderingEngine()
        self.numbering = numbering or DocumentNumberingService()
        self.timeout = timeout
        self.company = config.company_info() if company is None else company

    # ---------------- helpers ----------------
    async def _bounded(self, awaitable, step: str):
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout)
        except asyncio.TimeoutError:
            raise DocumentTimeoutError(step, self.timeout)

    async def _load_valid(self, booking_id: str) -> BookingOut:
        booking = await self.store.get_by_id(booking_id)
        if booking is None:
            raise BookingNotFoundError(booking_id)

        validation = validate_for_documents(booking)
        if not validation.valid:
            raise ValidationError(validation.message, missing_fields=validation.missing_field_labels)
        return booking

    async def _upload(self, content: bytes, file_name: str) -> str:
        try:
            return await self._bounded(self.file_store.upload(content, file_name), "Upload")
        except DocumentEngineError:
            raise
        except Exception as e:
            raise UploadError(f"Upload of {file_name} failed: {e}") from e

    async def _record(self, booking_id: str, document: DocumentCreate) -> DocumentOut:
        try:
            return await self.store.append_document(booking_id, document)
        except DocumentEngineError:
            raise
        except Exception as e:
            raise PersistenceError(f"Failed to save document {document.file_name}: {e}") from e

    @staticmethod
    def _describe(error: BaseException) -> str:
        if isinstance(error, DocumentEngineError):
            return error.message
        logger.opt(exception=error).error(f"Unexpected document pipeline failure: {error}")
        return str(error) or error.__class__.__name__

    async def _run_pipeline(self, booking: BookingOut, document_type: DocumentType) -> DocumentOut:
        issued = self.numbering.issue(booking.id, document_type)

        template = await self._bounded(
            self.template_source.load(TEMPLATE_NAMES[document_type]),
            "Template load",
        )
        data = build_template_data(booking, document_type, issued.number, self.numbering.now(), self.company)
        # Rendering is CPU-bound zip and regex work, keep it off the event loop
        content = await self._bounded(asyncio.to_thread(self.engine.render, template, data), "Render")

        url = await self._upload(content, issued.file_name)
        document = await self._record(
            booking.id,
            DocumentCreate(type=document_type, file_name=issued.file_name, file_url=url),
        )

        logger.bind(log_type="document").info(
            f"Document generated | Booking={booking.id} | {document_type.value} | {issued.number}"
        )
        return document

    # ---------------- public API ----------------
    async def generate_document(self, booking_id: str, document_type: Union[DocumentType, str]) -> DocumentResult:
        try:
            document_type = DocumentType(document_type)
        except ValueError:
            return DocumentResult(success=False, error=f"Unknown document type: {document_type}")

        if document_type not in GENERATED_DOCUMENT_TYPES:
            return DocumentResult(success=False, error=f"{document_type.value} documents are uploaded, not generated")

        try:
            booking = await self._load_valid(booking_id)
            document = await self._run_pipeline(booking, document_type)
        except ValidationError as e:
            return DocumentResult(success=False, error=e.message, missing_fields=e.missing_fields)
        except DocumentEngineError as e:
            logger.bind(log_type="document").warning(
                f"Document failed | Booking={booking_id} | {document_type.value} | {e.message}"
            )
            return DocumentResult(success=False, error=e.message)
        except Exception as e:
            return DocumentResult(success=False, error=self._describe(e))

        return DocumentResult(success=True, document=document)

    async def generate_all_documents(self, booking_id: str) -> GenerateAllResult:
        try:
            booking = await self._load_valid(booking_id)
        except ValidationError as e:
            return GenerateAllResult(success=False, errors=[e.message], missing_fields=e.missing_fields)
        except DocumentEngineError as e:
            return GenerateAllResult(success=False, errors=[e.message])

        results = await asyncio.gather(
            *(self._run_pipeline(booking, document_type) for document_type in GENERATED_DOCUMENT_TYPES),
            return_exceptions=True,
        )

        documents = {}
        errors = []
        for document_type, result in zip(GENERATED_DOCUMENT_TYPES, results):
            if isinstance(result, BaseException):
                message = f"{DOCUMENT_LABELS[document_type]}: {self._describe(result)}"
                errors.append(message)
                logger.bind(log_type="document").warning(f"Document failed | Booking={booking_id} | {message}")
            else:
                documents[RESULT_SLOTS[document_type]] = result

        return GenerateAllResult(
            success=not errors,
            documents=GeneratedDocuments(**documents),
            errors=errors,
        )

    async def upload_document(
        self,
        booking_id: str,
        document_type: Union[DocumentType, str],
        file_name: str,
        content: bytes,
        content_type: str,
    ) -> DocumentResult:
        """Attach a file staff already have (SOP, scanned receipts, ...)."""
        try:
            document_type = DocumentType(document_type)
        except ValueError:
            return DocumentResult(success=False, error=f"Unknown document type: {document_type}")

        try:
            extension = ALLOWED_UPLOAD_TYPES.get((content_type or "").lower())
            if extension is None:
                raise ValidationError("Format file tidak didukung. Gunakan PDF, JPG, PNG, atau DOCX.")
            if len(content) > config.MAX_UPLOAD_SIZE:
                raise ValidationError("File terlalu besar. Maksimal 10MB.")

            booking = await self.store.get_by_id(booking_id)
            if booking is None:
                raise BookingNotFoundError(booking_id)

            stored_name = f"{uuid.uuid4().hex}.{extension}"
            url = await self._upload(content, stored_name)
            document = await self._record(
                booking_id,
                DocumentCreate(type=document_type, file_name=file_name, file_url=url),
            )
        except DocumentEngineError as e:
            return DocumentResult(success=False, error=e.message)

        logger.bind(log_type="document").info(
            f"Document uploaded | Booking={booking_id} | {document_type.value} | {file_name}"
        )
        return DocumentResult(success=True, document=document)
