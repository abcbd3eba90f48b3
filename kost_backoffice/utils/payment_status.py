from pydantic import BaseModel

from kost_backoffice.models.enums import PaymentStatus


class PaymentSummary(BaseModel):
    status: PaymentStatus
    remaining_balance: float
    overpaid: bool = False


def _non_negative(value) -> float:
    if value is None:
        return 0.0
    return max(0.0, float(value))


def resolve_payment(amount, paid_amount) -> PaymentSummary:
    """
    Classify a booking's payment state.

    Over-payment is clamped to PAID with zero remaining and flagged
    through `overpaid`; it is never rejected here.
    """
    amount = _non_negative(amount)
    paid_amount = _non_negative(paid_amount)

    if paid_amount == 0:
        status = PaymentStatus.UNPAID
    elif paid_amount >= amount:
        status = PaymentStatus.PAID
    else:
        status = PaymentStatus.PARTIAL

    return PaymentSummary(
        status=status,
        remaining_balance=max(0.0, amount - paid_amount),
        overpaid=paid_amount > amount,
    )
