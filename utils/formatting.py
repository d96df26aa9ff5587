# utils/formatting.py
from datetime import datetime


def format_amount(n: float) -> str:
    """
    Two-decimal display value, e.g. 1234.5 -> "1234.50".
    """
    return f"{n:.2f}"


def format_balance(balance: float) -> str:
    # a negative balance (overpayment) is shown as nothing owed
    return format_amount(max(0, balance))


def format_timestamp(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000).strftime("%d/%m/%Y %H:%M")
