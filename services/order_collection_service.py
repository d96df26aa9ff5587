# services/order_collection_service.py

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from domain.errors import OrderStoreError, PartialBulkDeleteError
from domain.models import OrderAggregate
from domain.payment_policy import HALF, is_cleared, outstanding
from services.record_store_client import RecordStoreClient

logger = logging.getLogger(__name__)

FILTER_ALL = "all"
FILTER_PENDING = "pending"
FILTER_CLEARED = "cleared"
FILTER_MODES = (FILTER_ALL, FILTER_PENDING, FILTER_CLEARED)


@dataclass(frozen=True)
class OrderStats:
    """
    Totals across a whole collection of orders (directory header).
    """
    count: int
    total_grand_amount: float
    total_received: float
    total_pending: float


def sort_newest_first(orders: Iterable[OrderAggregate]) -> List[OrderAggregate]:
    return sorted(orders, key=lambda order: order.timestamp, reverse=True)


def aggregate_stats(orders: Iterable[OrderAggregate]) -> OrderStats:
    orders = list(orders)
    return OrderStats(
        count=len(orders),
        total_grand_amount=sum(order.grand_total for order in orders),
        total_received=sum(order.amount_paid for order in orders),
        total_pending=sum(outstanding(order.grand_total, order.amount_paid) for order in orders),
    )


def filter_by_status(orders: Iterable[OrderAggregate], mode: str) -> List[OrderAggregate]:
    """
    "pending" is everything that is not explicitly cleared.
    """
    if mode == FILTER_ALL:
        return list(orders)
    if mode == FILTER_CLEARED:
        return [order for order in orders if is_cleared(order.payment_status)]
    if mode == FILTER_PENDING:
        return [order for order in orders if not is_cleared(order.payment_status)]
    raise ValueError(f"Invalid filter mode: {mode}")


class OrderCollectionController:
    """
    Owns the local copy of the order collection and keeps it in step with
    the remote store.

    Each method returns ``(ok, message)`` (or ``(ok, message, order)``) and
    never raises store errors. A failed call leaves the local list exactly as
    it was; the failure is kept in ``error`` / ``error_message`` until
    ``clear_error()``. Concurrent edits are not detected: last writer wins.
    """

    def __init__(
            self,
            client: RecordStoreClient,
            *,
            max_delete_workers: Optional[int] = None,
    ):
        if max_delete_workers is not None and max_delete_workers < 1:
            raise ValueError("max_delete_workers must be at least 1")

        self.client = client
        self.max_delete_workers = max_delete_workers
        self._orders: List[OrderAggregate] = []
        self.error: Optional[OrderStoreError] = None
        self.error_message = ""

    @property
    def orders(self) -> List[OrderAggregate]:
        return list(self._orders)

    def find(self, order_id: str) -> Optional[OrderAggregate]:
        return next((order for order in self._orders if order.id == order_id), None)

    def clear_error(self) -> None:
        self.error = None
        self.error_message = ""

    def _fail(self, error: OrderStoreError) -> str:
        self.error = error
        self.error_message = str(error)
        logger.error("Could not %s: %s", error.action, error)
        return self.error_message

    def _replace(self, saved: OrderAggregate) -> None:
        for index, order in enumerate(self._orders):
            if order.id == saved.id:
                self._orders[index] = saved
                return
        self._orders.append(saved)

    # ---------------------------------------------------------------------
    # Remote operations
    # ---------------------------------------------------------------------

    def refresh(self) -> Tuple[bool, str]:
        try:
            fetched = self.client.list_all()
        except OrderStoreError as e:
            return False, self._fail(e)

        self._orders = sort_newest_first(fetched)
        self.clear_error()
        return True, f"Loaded {len(self._orders)} orders"

    def load_order(self, order_id: str) -> Tuple[bool, str, Optional[OrderAggregate]]:
        """
        Fresh copy of one order for editing; the local list is not touched.
        """
        try:
            order = self.client.get_one(order_id)
        except OrderStoreError as e:
            return False, self._fail(e), None

        return True, "Loaded", order

    def create_order(self, draft: OrderAggregate) -> Tuple[bool, str, Optional[OrderAggregate]]:
        try:
            created = self.client.create(draft.copy())
        except OrderStoreError as e:
            return False, self._fail(e), None

        self._orders.insert(0, created)
        return True, "Order saved successfully!", created

    def update_order(self, order: OrderAggregate) -> Tuple[bool, str, Optional[OrderAggregate]]:
        if order.id is None:
            return False, "Order has not been saved yet", None

        try:
            saved = self.client.update(order.id, order.copy())
        except OrderStoreError as e:
            return False, self._fail(e), None

        self._replace(saved)
        return True, "Order updated successfully!", saved

    def delete_one(self, order_id: str) -> Tuple[bool, str]:
        try:
            self.client.delete(order_id)
        except OrderStoreError as e:
            return False, self._fail(e)

        self._orders = [order for order in self._orders if order.id != order_id]
        return True, "Order deleted"

    def delete_all(self) -> Tuple[bool, str]:
        """
        Delete every order with one concurrent request per order.

        Only a complete success clears the local list. On any failure the
        list is left as it was (stale) and a ``PartialBulkDeleteError`` is
        recorded; call ``refresh()`` to learn what the store still holds.
        """
        order_ids = [order.id for order in self._orders if order.id is not None]
        if not order_ids:
            self._orders = []
            return True, "No orders to delete"

        workers = self.max_delete_workers or len(order_ids)
        failed = set()

        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = {pool.submit(self.client.delete, order_id): order_id for order_id in order_ids}
            for future in as_completed(futures):
                order_id = futures[future]
                try:
                    future.result()
                except OrderStoreError as e:
                    logger.warning("Bulk delete of order %s failed: %s", order_id, e)
                    failed.add(order_id)

        if failed:
            failed_ids = [order_id for order_id in order_ids if order_id in failed]
            return False, self._fail(PartialBulkDeleteError(failed_ids, attempted=len(order_ids)))

        self._orders = []
        return True, f"Deleted {len(order_ids)} orders"

    def clear_payment(self, order_id: str) -> Tuple[bool, str]:
        """
        Mark an order fully paid: status cleared and amount paid set to the
        grand total, sent together in one whole-record update.
        """
        current = self.find(order_id)
        if current is None:
            return False, f"Order {order_id} is not loaded"

        if current.bill_mode == HALF:
            return False, "Half-bill orders do not track payment"

        updated = current.copy()
        updated.clear_payment()

        try:
            saved = self.client.update(order_id, updated)
        except OrderStoreError as e:
            return False, self._fail(e)

        self._replace(saved)
        return True, "Payment cleared"

    # ---------------------------------------------------------------------
    # Local views
    # ---------------------------------------------------------------------

    def stats(self) -> OrderStats:
        return aggregate_stats(self._orders)

    def filtered(self, mode: str) -> List[OrderAggregate]:
        return filter_by_status(self._orders, mode)
