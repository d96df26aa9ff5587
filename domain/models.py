# domain/models.py

import copy
import logging
import math
import time
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from domain.payment_policy import (
    CLEARED,
    FULL,
    HALF,
    PENDING,
    cleared_payment,
    persisted_payment,
    status_for_amount,
    validate_bill_mode,
    validate_payment_status,
)

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "count", "price")
UNNAMED_CLIENT = "Unnamed Client"


def parse_quantity(value: Any) -> Optional[float]:
    """
    Normalise a count / price value coming from a form or from the store.

    "" and None mean "not filled in yet" and stay None; anything else must be
    a finite, non-negative number (numeric strings are accepted).
    """
    if value is None:
        return None

    if isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")

    if isinstance(value, str):
        text = value.strip()
        if text == "":
            return None
        try:
            number = float(text)
        except ValueError:
            raise ValueError(f"Not a number: {value!r}") from None
        if number.is_integer() and "." not in text and "e" not in text.lower():
            number = int(number)
    elif isinstance(value, (int, float)):
        number = value
    else:
        raise ValueError(f"Not a number: {value!r}")

    if not math.isfinite(number):
        raise ValueError(f"Not a finite number: {value!r}")
    if number < 0:
        raise ValueError(f"Value must not be negative: {value!r}")

    return number


def _or_zero(value: Optional[float]) -> float:
    return 0 if value is None else value


def _now_ms() -> int:
    return int(time.time() * 1000)


def parse_timestamp(value: Any) -> int:
    """
    Epoch milliseconds from a stored timestamp (number, numeric string or ISO date).
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return int(value)

    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            return int(float(text))
        except ValueError:
            pass
        try:
            return int(datetime.fromisoformat(text.replace("Z", "+00:00")).timestamp() * 1000)
        except ValueError:
            pass

    logger.warning("Unreadable order timestamp %r, using 0", value)
    return 0


class LineItem:
    """
    One product entry of an order.

    ``total`` is kept equal to ``count * price`` (unset values count as 0)
    by the ``count`` / ``price`` setters; it cannot be assigned directly.
    """

    __slots__ = ("id", "name", "_count", "_price", "_total")

    def __init__(
            self,
            item_id: int,
            name: str = "",
            count: Any = None,
            price: Any = None,
    ):
        self.id = int(item_id)
        self.name = name or ""
        self._count = parse_quantity(count)
        self._price = parse_quantity(price)
        self._total = 0
        self._recompute()

    @property
    def count(self) -> Optional[float]:
        return self._count

    @count.setter
    def count(self, value: Any) -> None:
        self._count = parse_quantity(value)
        self._recompute()

    @property
    def price(self) -> Optional[float]:
        return self._price

    @price.setter
    def price(self, value: Any) -> None:
        self._price = parse_quantity(value)
        self._recompute()

    @property
    def total(self) -> float:
        return self._total

    def _recompute(self) -> None:
        self._total = _or_zero(self._count) * _or_zero(self._price)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            # unset values are written back the way the order forms store them
            "count": "" if self._count is None else self._count,
            "price": "" if self._price is None else self._price,
            "total": self._total,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], fallback_id: int = 1) -> "LineItem":
        raw_id = data.get("id")
        item_id = fallback_id if raw_id in (None, "") else int(raw_id)
        return cls(
            item_id=item_id,
            name=data.get("name") or "",
            count=data.get("count"),
            price=data.get("price"),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LineItem):
            return NotImplemented
        return (self.id, self.name, self._count, self._price) == (
            other.id, other.name, other._count, other._price
        )

    def __repr__(self) -> str:
        return (
            f"LineItem(id={self.id}, name={self.name!r}, count={self._count}, "
            f"price={self._price}, total={self._total})"
        )


class OrderAggregate:
    """
    A client's order: line items plus client and payment metadata.

    Derived values (line totals, ``grand_total``, ``payment_status``) are only
    changed through the methods below, which recompute them on every mutation.
    An order always keeps at least one line item while it is being edited.
    """

    def __init__(
            self,
            client_name: str = "",
            products: Optional[Iterable[LineItem]] = None,
            bill_mode: str = FULL,
            amount_paid: Any = 0,
            payment_status: str = PENDING,
            timestamp: Optional[int] = None,
            order_id: Optional[str] = None,
    ):
        self.id = order_id
        self.client_name = client_name or ""
        self._products: List[LineItem] = list(products or [])
        if not self._products:
            self._products.append(LineItem(item_id=1))
        self._bill_mode = validate_bill_mode(bill_mode)
        self._amount_paid = _or_zero(parse_quantity(amount_paid))
        self._payment_status = validate_payment_status(payment_status)
        self._timestamp = _now_ms() if timestamp is None else int(timestamp)
        self._grand_total = 0
        self._recompute()

    # ---------- read-only views ----------

    @property
    def products(self) -> Tuple[LineItem, ...]:
        return tuple(self._products)

    @property
    def grand_total(self) -> float:
        return self._grand_total

    @property
    def bill_mode(self) -> str:
        return self._bill_mode

    @property
    def amount_paid(self) -> float:
        return self._amount_paid

    @property
    def payment_status(self) -> str:
        return self._payment_status

    @property
    def timestamp(self) -> int:
        return self._timestamp

    @property
    def balance_due(self) -> float:
        paid = self._amount_paid if self._bill_mode == FULL else 0
        return self._grand_total - paid

    @property
    def has_billable_items(self) -> bool:
        return any(item.total > 0 for item in self._products)

    @property
    def display_name(self) -> str:
        return self.client_name or UNNAMED_CLIENT

    # ---------- line items ----------

    def get_line_item(self, item_id: int) -> Optional[LineItem]:
        return next((item for item in self._products if item.id == item_id), None)

    def add_line_item(self) -> LineItem:
        new_id = max((item.id for item in self._products), default=0) + 1
        item = LineItem(item_id=new_id)
        self._products.append(item)
        self._recompute()
        return item

    def remove_line_item(self, item_id: int) -> bool:
        """
        Remove a line item. The last remaining item is never removed.
        """
        if len(self._products) <= 1:
            return False

        remaining = [item for item in self._products if item.id != item_id]
        if len(remaining) == len(self._products):
            return False

        self._products = remaining
        self._recompute()
        return True

    def update_line_item(self, item_id: int, field: str, value: Any) -> Optional[LineItem]:
        if field not in EDITABLE_FIELDS:
            raise ValueError(f"Line item field cannot be edited: {field}")

        item = self.get_line_item(item_id)
        if item is None:
            logger.debug("No line item %s in order %s", item_id, self.id)
            return None

        if field == "name":
            item.name = value or ""
        else:
            setattr(item, field, value)
            self._recompute()

        return item

    # ---------- payment ----------

    def set_bill_mode(self, bill_mode: str) -> None:
        previous = self._bill_mode
        self._bill_mode = validate_bill_mode(bill_mode)
        if previous == HALF and self._bill_mode == FULL:
            # payment is tracked again from here on
            self._payment_status = status_for_amount(self._amount_paid, self._grand_total)

    def set_amount_paid(self, value: Any) -> None:
        self._amount_paid = _or_zero(parse_quantity(value))
        if self._bill_mode == FULL:
            self._payment_status = status_for_amount(self._amount_paid, self._grand_total)

    def clear_payment(self) -> None:
        self._recompute()
        self._amount_paid, self._payment_status = cleared_payment(self._grand_total)

    def prepare_for_persist(self) -> None:
        """
        Bring every derived field up to date right before a write to the store.
        """
        self._recompute()
        self._amount_paid, self._payment_status = persisted_payment(
            self._bill_mode,
            self._amount_paid,
            self._payment_status,
            self._grand_total,
        )

    def _recompute(self) -> None:
        self._grand_total = sum(item.total for item in self._products)
        if self._bill_mode == FULL and status_for_amount(self._amount_paid, self._grand_total) == CLEARED:
            self._payment_status = CLEARED

    # ---------- wire format ----------

    def to_dict(self) -> Dict[str, Any]:
        """
        Record as sent to the store. ``id`` is left out until the store assigns one.
        """
        grand_total = sum(item.total for item in self._products)
        amount_paid, payment_status = persisted_payment(
            self._bill_mode, self._amount_paid, self._payment_status, grand_total
        )

        record: Dict[str, Any] = {
            "clientName": self.client_name,
            "products": [item.to_dict() for item in self._products],
            "grandTotal": grand_total,
            "amountPaid": amount_paid,
            "paymentStatus": payment_status,
            "billMode": self._bill_mode,
            "timestamp": self._timestamp,
        }
        if self.id is not None:
            record = {"id": self.id, **record}
        return record

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OrderAggregate":
        products = [
            LineItem.from_dict(raw, fallback_id=index)
            for index, raw in enumerate(data.get("products") or [], start=1)
        ]
        raw_id = data.get("id")

        return cls(
            client_name=data.get("clientName") or "",
            products=products,
            bill_mode=data.get("billMode") or FULL,
            amount_paid=data.get("amountPaid"),
            payment_status=data.get("paymentStatus") or PENDING,
            timestamp=parse_timestamp(data.get("timestamp")),
            order_id=None if raw_id in (None, "") else str(raw_id),
        )

    def copy(self) -> "OrderAggregate":
        return copy.deepcopy(self)

    def __repr__(self) -> str:
        return (
            f"OrderAggregate(id={self.id!r}, client_name={self.client_name!r}, "
            f"items={len(self._products)}, grand_total={self._grand_total}, "
            f"amount_paid={self._amount_paid}, payment_status={self._payment_status!r}, "
            f"bill_mode={self._bill_mode!r})"
        )


__all__ = [
    "EDITABLE_FIELDS",
    "FULL",
    "HALF",
    "LineItem",
    "OrderAggregate",
    "UNNAMED_CLIENT",
    "parse_quantity",
    "parse_timestamp",
]
