# utils/order_table.py

from typing import Iterable

import pandas as pd

from domain.models import OrderAggregate
from domain.payment_policy import FULL, is_cleared
from utils.formatting import format_amount, format_balance, format_timestamp

ORDER_COLUMNS = ["Client", "Date", "Products", "Bill", "Grand Total", "Paid", "Balance", "Status"]
LINE_ITEM_COLUMNS = ["Product", "Quantity", "Price", "Total"]


def orders_to_frame(orders: Iterable[OrderAggregate]) -> pd.DataFrame:
    """
    Raw (numeric) directory table, one row per order.
    """
    rows = [
        {
            "Id": order.id,
            "Client": order.display_name,
            "Date": format_timestamp(order.timestamp),
            "Products": len(order.products),
            "Bill": order.bill_mode,
            "Grand Total": order.grand_total,
            "Paid": order.amount_paid,
            "Balance": max(0, order.balance_due),
            "Status": "Cleared" if is_cleared(order.payment_status) else "Pending",
        }
        for order in orders
    ]
    return pd.DataFrame(rows, columns=["Id", *ORDER_COLUMNS])


def orders_display_frame(orders: Iterable[OrderAggregate]) -> pd.DataFrame:
    df = orders_to_frame(orders)[ORDER_COLUMNS].copy()
    for col in ("Grand Total", "Paid", "Balance"):
        df[col] = df[col].apply(format_amount)
    return df


def line_items_frame(order: OrderAggregate) -> pd.DataFrame:
    rows = [
        {
            "Product": item.name or "Unnamed Product",
            "Quantity": "" if item.count is None else item.count,
            "Price": "" if item.price is None else format_amount(item.price),
            "Total": format_amount(item.total),
        }
        for item in order.products
    ]
    return pd.DataFrame(rows, columns=LINE_ITEM_COLUMNS)


def order_summary(order: OrderAggregate) -> dict:
    """
    Figures shown under an order: grand total, and for full bills paid / balance.
    """
    summary = {"Grand Total": format_amount(order.grand_total)}
    if order.bill_mode == FULL:
        summary["Amount Paid"] = format_amount(order.amount_paid)
        summary["Balance"] = format_balance(order.balance_due)
    return summary
