"""Shared fixtures: an in-memory order store and HTTP response helpers."""

import json
import threading
from typing import Any, Dict, List, Optional, Set

import pytest
import requests

from domain.errors import CreateError, DeleteError, FetchError, NotFoundOrFetchError, UpdateError
from domain.models import LineItem, OrderAggregate


def make_response(status_code: int = 200, body: Any = None) -> requests.Response:
    resp = requests.Response()
    resp.status_code = status_code
    resp._content = b"" if body is None else json.dumps(body).encode("utf-8")
    return resp


def make_order(
        products=(("A", 2, 5), ("B", 1, 3)),
        client_name: str = "Asha",
        order_id: Optional[str] = None,
        timestamp: int = 1_700_000_000_000,
        amount_paid: float = 0,
        bill_mode: str = "full",
) -> OrderAggregate:
    items = [
        LineItem(item_id=index, name=name, count=count, price=price)
        for index, (name, count, price) in enumerate(products, start=1)
    ]
    order = OrderAggregate(
        client_name=client_name,
        products=items,
        bill_mode=bill_mode,
        timestamp=timestamp,
        order_id=order_id,
    )
    order.set_amount_paid(amount_paid)
    return order


class FakeRecordStore:
    """Stands in for RecordStoreClient; keeps records as wire dicts."""

    def __init__(self, orders: List[OrderAggregate] = ()):
        self.records: Dict[str, Dict[str, Any]] = {}
        self.fail_list = False
        self.fail_get = False
        self.fail_create = False
        self.fail_update_ids: Set[str] = set()
        self.fail_delete_ids: Set[str] = set()
        self.deleted: List[str] = []
        self.updates: List[Dict[str, Any]] = []
        self._next_id = 1
        self._lock = threading.Lock()
        for order in orders:
            self._store(order)

    def _store(self, order: OrderAggregate) -> OrderAggregate:
        if order.id is None:
            while str(self._next_id) in self.records:
                self._next_id += 1
            order.id = str(self._next_id)
        self.records[order.id] = order.to_dict()
        return OrderAggregate.from_dict(self.records[order.id])

    def list_all(self) -> List[OrderAggregate]:
        if self.fail_list:
            raise FetchError("Failed to fetch orders", status_code=500)
        return [OrderAggregate.from_dict(record) for record in self.records.values()]

    def get_one(self, order_id: str) -> OrderAggregate:
        if self.fail_get or order_id not in self.records:
            raise NotFoundOrFetchError(f"Failed to fetch order {order_id}", status_code=404)
        return OrderAggregate.from_dict(self.records[order_id])

    def create(self, draft: OrderAggregate) -> OrderAggregate:
        if self.fail_create:
            raise CreateError("Failed to create order", status_code=500)
        draft.prepare_for_persist()
        return self._store(draft)

    def update(self, order_id: str, order: OrderAggregate) -> OrderAggregate:
        if order_id in self.fail_update_ids:
            raise UpdateError(f"Failed to update order {order_id}", status_code=500)
        order.prepare_for_persist()
        order.id = order_id
        self.updates.append(order.to_dict())
        return self._store(order)

    def delete(self, order_id: str) -> None:
        with self._lock:
            if order_id in self.fail_delete_ids:
                raise DeleteError(f"Failed to delete order {order_id}", status_code=500)
            self.records.pop(order_id, None)
            self.deleted.append(order_id)


@pytest.fixture
def three_orders() -> List[OrderAggregate]:
    return [
        make_order(client_name="Oldest", order_id="1", timestamp=1_000),
        make_order(client_name="Middle", order_id="2", timestamp=2_000),
        make_order(client_name="Newest", order_id="3", timestamp=3_000),
    ]


@pytest.fixture
def store(three_orders) -> FakeRecordStore:
    return FakeRecordStore(three_orders)
