"""
Booking lifecycle: status transitions and field edits.

    PENDING  --approve-->    APPROVED   (approval profile must pass)
    PENDING  --reject-->     CANCEL
    APPROVED --cancel-->     CANCEL
    CANCEL   --reactivate--> APPROVED   (no re-validation)

Nothing ever moves back to PENDING and there are no self-transitions.
Every public method returns a result object instead of raising.
"""
from typing import Union

from pydantic import ValidationError as SchemaValidationError

from kost_backoffice.core.errors import (
    BookingNotFoundError,
    DocumentEngineError,
    InvalidTransitionError,
    ValidationError,
)
from kost_backoffice.core.logging_config import get_logger
from kost_backoffice.models.enums import BookingAction, RentalStatus
from kost_backoffice.schemas.booking import (
    BookingOut,
    BookingPatch,
    EditResult,
    TransitionResult,
)
from kost_backoffice.services.booking_store import BookingStore
from kost_backoffice.services.validation import validate_for_approval
from kost_backoffice.utils.payment_status import resolve_payment
from kost_backoffice.utils.rental_period import calculate_end_date

logger = get_logger()

# action -> (allowed source states, target state)
TRANSITIONS = {
    BookingAction.APPROVE: ({RentalStatus.PENDING}, RentalStatus.APPROVED),
    BookingAction.REJECT: ({RentalStatus.PENDING}, RentalStatus.CANCEL),
    BookingAction.CANCEL: ({RentalStatus.APPROVED}, RentalStatus.CANCEL),
    BookingAction.REACTIVATE: ({RentalStatus.CANCEL}, RentalStatus.APPROVED),
}

SUCCESS_MESSAGES = {
    BookingAction.APPROVE: "Booking approved successfully",
    BookingAction.REJECT: "Booking rejected successfully",
    BookingAction.CANCEL: "Booking cancelled successfully",
    BookingAction.REACTIVATE: "Booking reactivated successfully",
}

INVALID_ACTION_MESSAGE = "Invalid action. Must be approve, reject, cancel, or reactivate"

# Columns that cannot be cleared through an edit
NON_NULLABLE_FIELDS = {"room_number", "duration_type", "amount", "paid_amount", "currency"}


class BookingLifecycleController:
    def __init__(self, store: BookingStore):
        self.store = store

    async def _load(self, booking_id: str) -> BookingOut:
        booking = await self.store.get_by_id(booking_id)
        if booking is None:
            raise BookingNotFoundError(booking_id)
        return booking

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------
    async def transition(self, booking_id: str, action: Union[BookingAction, str]) -> TransitionResult:
        try:
            action = BookingAction(action)
        except ValueError:
            return TransitionResult(success=False, message=INVALID_ACTION_MESSAGE)

        sources, target = TRANSITIONS[action]

        try:
            booking = await self._load(booking_id)

            if booking.rental_status not in sources:
                raise InvalidTransitionError(
                    f"Cannot {action.value} a booking with status {booking.rental_status.value}"
                )

            if action == BookingAction.APPROVE:
                validation = validate_for_approval(booking)
                if not validation.valid:
                    raise ValidationError(
                        f"Tidak bisa approve booking! {validation.message}",
                        missing_fields=validation.missing_field_labels,
                    )

            if action == BookingAction.REACTIVATE and not validate_for_approval(booking).valid:
                logger.bind(log_type="booking").warning(
                    f"Reactivating booking {booking_id} that no longer passes approval checks"
                )

            updated = await self.store.update_status(booking_id, target)

        except ValidationError as e:
            logger.bind(log_type="booking").info(f"Approval blocked | Booking={booking_id} | {e.message}")
            return TransitionResult(success=False, message=e.message, missing_fields=e.missing_fields)
        except DocumentEngineError as e:
            logger.bind(log_type="booking").info(f"Transition rejected | Booking={booking_id} | {e.message}")
            return TransitionResult(success=False, message=e.message)

        logger.bind(log_type="booking").info(
            f"Booking {action.value} | Booking={booking_id} | {booking.rental_status.value} -> {target.value}"
        )
        return TransitionResult(success=True, message=SUCCESS_MESSAGES[action], booking=updated)

    async def approve(self, booking_id: str) -> TransitionResult:
        return await self.transition(booking_id, BookingAction.APPROVE)

    async def reject(self, booking_id: str) -> TransitionResult:
        return await self.transition(booking_id, BookingAction.REJECT)

    async def cancel(self, booking_id: str) -> TransitionResult:
        return await self.transition(booking_id, BookingAction.CANCEL)

    async def reactivate(self, booking_id: str) -> TransitionResult:
        return await self.transition(booking_id, BookingAction.REACTIVATE)

    # -------------------------------------------------------------------------
    # Edits
    # -------------------------------------------------------------------------
    async def edit_fields(self, booking_id: str, patch: Union[BookingPatch, dict]) -> EditResult:
        """
        Save field changes without running any validation gate, so staff can
        keep an incomplete booking as PENDING. end_date is re-derived whenever
        start_date or duration_type changes.
        """
        try:
            if not isinstance(patch, BookingPatch):
                patch = BookingPatch(**patch)
        except SchemaValidationError as e:
            return EditResult(success=False, error=str(e))

        changes = {
            key: value
            for key, value in patch.model_dump(exclude_unset=True).items()
            if not (value is None and key in NON_NULLABLE_FIELDS)
        }

        try:
            booking = await self._load(booking_id)
            if not changes:
                return EditResult(success=True, booking=booking)

            if "start_date" in changes or "duration_type" in changes:
                start_date = changes.get("start_date", booking.rental_period.start_date)
                duration_type = changes.get("duration_type", booking.rental_period.duration_type)
                changes["end_date"] = calculate_end_date(start_date, duration_type) if start_date else None

            amount = changes.get("amount", booking.pricing.amount)
            paid_amount = changes.get("paid_amount", booking.pricing.paid_amount)
            if resolve_payment(amount, paid_amount).overpaid:
                logger.bind(log_type="booking").warning(
                    f"Over-payment recorded | Booking={booking_id} | amount={amount} | paid={paid_amount}"
                )

            updated = await self.store.update_fields(booking_id, changes)

        except DocumentEngineError as e:
            return EditResult(success=False, error=e.message)

        logger.bind(log_type="booking").info(
            f"Booking edited | Booking={booking_id} | fields={', '.join(sorted(changes))}"
        )
        return EditResult(success=True, booking=updated)

    async def delete(self, booking_id: str) -> TransitionResult:
        try:
            await self.store.delete(booking_id)
        except DocumentEngineError as e:
            return TransitionResult(success=False, message=e.message)

        logger.bind(log_type="booking").info(f"Booking deleted | Booking={booking_id}")
        return TransitionResult(success=True, message="Booking deleted successfully")
