from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from sqlalchemy.orm import Session

from kost_backoffice.core.auth_utils import require_admin
from kost_backoffice.core.logging_config import get_logger
from kost_backoffice.core.redis import booking_cache_key, delete_cache, get_cache, set_cache
from kost_backoffice.db.session import get_db
from kost_backoffice.models.enums import DocumentType, RentalStatus
from kost_backoffice.schemas.booking import (
    BookingOut,
    BookingPatch,
    DocumentResult,
    EditResult,
    GenerateAllResult,
    GenerateDocumentRequest,
    MissingFieldsOut,
    TransitionRequest,
    TransitionResult,
)
from kost_backoffice.services.booking_store import SqlBookingStore
from kost_backoffice.services.document_generation import DocumentGenerationOrchestrator
from kost_backoffice.services.document_numbering import DocumentNumberingService
from kost_backoffice.services.file_store import CloudinaryFileStore
from kost_backoffice.services.lifecycle import BookingLifecycleController
from kost_backoffice.services.template_engine import FileSystemTemplateSource
from kost_backoffice.services.validation import missing_field_map

router = APIRouter(prefix="/admin/bookings", tags=["Admin Bookings"])
logger = get_logger()

# One numbering service per process keeps document numbers unique across requests
numbering = DocumentNumberingService()


# ---------------------------------------------------------------------
# COLLABORATORS
# ---------------------------------------------------------------------
def get_booking_store(db: Session = Depends(get_db)):
    return SqlBookingStore(db)


def get_file_store():
    return CloudinaryFileStore()


def get_template_source():
    return FileSystemTemplateSource()


def get_lifecycle(store=Depends(get_booking_store)):
    return BookingLifecycleController(store)


def get_orchestrator(
    store=Depends(get_booking_store),
    file_store=Depends(get_file_store),
    template_source=Depends(get_template_source),
):
    return DocumentGenerationOrchestrator(store, file_store, template_source, numbering=numbering)


async def get_booking_or_404(store, booking_id: str) -> BookingOut:
    booking = await store.get_by_id(booking_id)
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")
    return booking


# =====================================================================
# LIST BOOKINGS
# =====================================================================
@router.get("/", response_model=list[BookingOut])
async def list_bookings(
    token: str,
    status: Optional[RentalStatus] = None,
    store=Depends(get_booking_store),
):
    require_admin(token)
    return await store.list_all(status)


# =====================================================================
# BOOKING DETAIL
# =====================================================================
@router.get("/{booking_id}")
async def get_booking(booking_id: str, token: str, store=Depends(get_booking_store)):
    require_admin(token)

    cache_key = booking_cache_key(booking_id)
    cached = get_cache(cache_key)
    if cached:
        return cached

    booking = await get_booking_or_404(store, booking_id)
    data = booking.model_dump(mode="json")
    set_cache(cache_key, data)
    return data


# =====================================================================
# EDIT BOOKING
# =====================================================================
@router.put("/{booking_id}", response_model=EditResult)
async def edit_booking(
    booking_id: str,
    data: BookingPatch,
    token: str,
    store=Depends(get_booking_store),
    lifecycle: BookingLifecycleController = Depends(get_lifecycle),
):
    admin = require_admin(token)
    await get_booking_or_404(store, booking_id)

    result = await lifecycle.edit_fields(booking_id, data)
    delete_cache(booking_cache_key(booking_id))

    if not result.success:
        raise HTTPException(status_code=400, detail=result.error)

    logger.bind(log_type="admin").info(f"Admin {admin} edited booking {booking_id}")
    return result


# =====================================================================
# DELETE BOOKING
# =====================================================================
@router.delete("/{booking_id}")
async def delete_booking(
    booking_id: str,
    token: str,
    store=Depends(get_booking_store),
    lifecycle: BookingLifecycleController = Depends(get_lifecycle),
):
    admin = require_admin(token)
    await get_booking_or_404(store, booking_id)

    result = await lifecycle.delete(booking_id)
    delete_cache(booking_cache_key(booking_id))

    if not result.success:
        raise HTTPException(status_code=500, detail=result.message)

    logger.bind(log_type="admin").info(f"Admin {admin} deleted booking {booking_id}")
    return {"message": result.message}


# =====================================================================
# STATUS ACTIONS (approve / reject / cancel / reactivate)
# =====================================================================
@router.post("/{booking_id}/action", response_model=TransitionResult)
async def booking_action(
    booking_id: str,
    data: TransitionRequest,
    token: str,
    store=Depends(get_booking_store),
    lifecycle: BookingLifecycleController = Depends(get_lifecycle),
):
    admin = require_admin(token)
    await get_booking_or_404(store, booking_id)

    result = await lifecycle.transition(booking_id, data.action)
    delete_cache(booking_cache_key(booking_id))

    if not result.success:
        raise HTTPException(status_code=400, detail=result.model_dump(exclude_none=True))

    logger.bind(log_type="admin").info(f"Admin {admin} -> {data.action.value} booking {booking_id}")
    return result


# =====================================================================
# MISSING FIELD INDICATORS
# =====================================================================
@router.get("/{booking_id}/missing-fields", response_model=MissingFieldsOut)
async def missing_fields(booking_id: str, token: str, store=Depends(get_booking_store)):
    require_admin(token)
    booking = await get_booking_or_404(store, booking_id)
    return MissingFieldsOut(booking_id=booking_id, fields=missing_field_map(booking))


# =====================================================================
# GENERATE ONE DOCUMENT
# =====================================================================
@router.post("/{booking_id}/documents/generate", response_model=DocumentResult)
async def generate_document(
    booking_id: str,
    data: GenerateDocumentRequest,
    token: str,
    store=Depends(get_booking_store),
    orchestrator: DocumentGenerationOrchestrator = Depends(get_orchestrator),
):
    admin = require_admin(token)
    await get_booking_or_404(store, booking_id)

    result = await orchestrator.generate_document(booking_id, data.type)
    delete_cache(booking_cache_key(booking_id))

    if not result.success:
        status_code = 400 if result.missing_fields or data.type == DocumentType.SOP else 500
        raise HTTPException(status_code=status_code, detail=result.model_dump(exclude_none=True))

    logger.bind(log_type="admin").info(f"Admin {admin} generated {data.type.value} for booking {booking_id}")
    return result


# =====================================================================
# GENERATE ALL DOCUMENTS (partial success is reported, not raised)
# =====================================================================
@router.post("/{booking_id}/documents/generate-all", response_model=GenerateAllResult)
async def generate_all_documents(
    booking_id: str,
    token: str,
    store=Depends(get_booking_store),
    orchestrator: DocumentGenerationOrchestrator = Depends(get_orchestrator),
):
    admin = require_admin(token)
    await get_booking_or_404(store, booking_id)

    result = await orchestrator.generate_all_documents(booking_id)
    delete_cache(booking_cache_key(booking_id))

    if result.missing_fields:
        raise HTTPException(status_code=400, detail=result.model_dump(exclude_none=True))

    logger.bind(log_type="admin").info(
        f"Admin {admin} generated all documents for booking {booking_id} | errors={len(result.errors)}"
    )
    return result


# =====================================================================
# UPLOAD A STATIC DOCUMENT (SOP, scanned receipt, ...)
# =====================================================================
@router.post("/{booking_id}/documents/upload", response_model=DocumentResult)
async def upload_document(
    booking_id: str,
    token: str,
    file: UploadFile = File(...),
    document_type: DocumentType = Form(DocumentType.SOP),
    store=Depends(get_booking_store),
    orchestrator: DocumentGenerationOrchestrator = Depends(get_orchestrator),
):
    admin = require_admin(token)
    await get_booking_or_404(store, booking_id)

    content = await file.read()
    result = await orchestrator.upload_document(
        booking_id,
        document_type,
        file.filename,
        content,
        file.content_type,
    )
    delete_cache(booking_cache_key(booking_id))

    if not result.success:
        raise HTTPException(status_code=400, detail=result.error)

    logger.bind(log_type="admin").info(f"Admin {admin} uploaded {document_type.value} for booking {booking_id}")
    return result
