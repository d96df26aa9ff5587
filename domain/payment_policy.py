# domain/payment_policy.py

from typing import Optional, Tuple

PENDING = "pending"
CLEARED = "cleared"
PAYMENT_STATUSES = (PENDING, CLEARED)

FULL = "full"
HALF = "half"
BILL_MODES = (FULL, HALF)


def status_for_amount(amount_paid: float, grand_total: float) -> str:
    """
    Payment state derived from the amount on a full-bill order.

    Nothing paid is never "cleared", even against a zero total.
    """
    return CLEARED if amount_paid > 0 and amount_paid >= grand_total else PENDING


def cleared_payment(grand_total: float) -> Tuple[float, str]:
    """
    Clearing a payment always means "fully paid":
    the amount is forced to the grand total together with the status.
    """
    return grand_total, CLEARED


def persisted_payment(
        bill_mode: str,
        amount_paid: float,
        payment_status: str,
        grand_total: float,
) -> Tuple[float, str]:
    """
    (amount_paid, payment_status) as they must be written to the store.

    Half-bill orders do not track payment, whatever the editor holds.
    """
    if bill_mode == HALF:
        return 0, PENDING

    if status_for_amount(amount_paid, grand_total) == CLEARED:
        return amount_paid, CLEARED

    return amount_paid, payment_status


def outstanding(grand_total: float, amount_paid: float) -> float:
    # never negative: overpayment does not reduce other orders' balances
    return max(0, grand_total - amount_paid)


def is_cleared(payment_status: Optional[str]) -> bool:
    return payment_status == CLEARED


def validate_bill_mode(bill_mode: str) -> str:
    if bill_mode not in BILL_MODES:
        raise ValueError(f"Invalid bill mode: {bill_mode}")
    return bill_mode


def validate_payment_status(payment_status: str) -> str:
    if payment_status not in PAYMENT_STATUSES:
        raise ValueError(f"Invalid payment status: {payment_status}")
    return payment_status
