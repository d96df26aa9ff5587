# services/record_store_client.py

import logging
from typing import Any, List, Optional, Type

import requests

from domain.errors import (
    CreateError,
    DeleteError,
    FetchError,
    NotFoundOrFetchError,
    OrderStoreError,
    UpdateError,
)
from domain.models import OrderAggregate

logger = logging.getLogger(__name__)


def _row_id(row: Any) -> Any:
    return row.get("id") if isinstance(row, dict) else row


class RecordStoreClient:
    """
    CRUD gateway to the remote order collection (one REST resource).

    Every failure is raised as the operation's own ``OrderStoreError``
    subclass. Nothing is cached or retried here; callers own reconciliation.
    Updates are whole-record replacements, the store has no partial patch.
    """

    def __init__(
            self,
            base_url: str,
            *,
            session: Optional[requests.Session] = None,
            timeout_seconds: float = 10,
    ):
        if not base_url or not isinstance(base_url, str):
            raise ValueError("base_url must be a non-empty string")

        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout_seconds = timeout_seconds

    def _url(self, order_id: Optional[str] = None) -> str:
        if order_id is None:
            return self.base_url
        return f"{self.base_url}/{order_id}"

    def _request(
            self,
            method: str,
            url: str,
            error_cls: Type[OrderStoreError],
            failure_message: str,
            **kwargs: Any,
    ) -> requests.Response:
        try:
            resp = self.session.request(method, url, timeout=self.timeout_seconds, **kwargs)
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise error_cls(f"{failure_message}: {e}") from e

        if not resp.ok:
            logger.warning("%s %s returned HTTP %s", method, url, resp.status_code)
            raise error_cls(failure_message, status_code=resp.status_code)

        return resp

    @staticmethod
    def _decode(
            resp: requests.Response,
            error_cls: Type[OrderStoreError],
            failure_message: str,
    ) -> Any:
        try:
            return resp.json()
        except ValueError as e:
            raise error_cls(f"{failure_message}: invalid JSON in response") from e

    @staticmethod
    def _to_order(
            data: Any,
            error_cls: Type[OrderStoreError],
            failure_message: str,
    ) -> OrderAggregate:
        if not isinstance(data, dict):
            raise error_cls(f"{failure_message}: expected an order record")
        try:
            return OrderAggregate.from_dict(data)
        except (ValueError, TypeError) as e:
            raise error_cls(f"{failure_message}: malformed order record ({e})") from e

    # ---------------------------------------------------------------------
    # Operations
    # ---------------------------------------------------------------------

    def list_all(self) -> List[OrderAggregate]:
        """
        Every order in the store, in the store's own order (callers sort).

        Records that cannot be read are logged and left out.
        """
        message = "Failed to fetch orders"
        resp = self._request("GET", self._url(), FetchError, message)
        data = self._decode(resp, FetchError, message)

        if not isinstance(data, list):
            raise FetchError(f"{message}: expected a list of orders")

        orders = []
        for row in data:
            try:
                orders.append(self._to_order(row, FetchError, message))
            except FetchError as e:
                logger.warning("Skipping stored record %r: %s", _row_id(row), e)

        logger.info("Fetched %d orders", len(orders))
        return orders

    def get_one(self, order_id: str) -> OrderAggregate:
        message = f"Failed to fetch order {order_id}"
        resp = self._request("GET", self._url(order_id), NotFoundOrFetchError, message)
        data = self._decode(resp, NotFoundOrFetchError, message)
        return self._to_order(data, NotFoundOrFetchError, message)

    def create(self, draft: OrderAggregate) -> OrderAggregate:
        """
        POST a draft (without ``id``); the store assigns the id.
        """
        message = "Failed to create order"
        draft.prepare_for_persist()
        payload = draft.to_dict()
        payload.pop("id", None)

        resp = self._request("POST", self._url(), CreateError, message, json=payload)
        created = self._to_order(self._decode(resp, CreateError, message), CreateError, message)

        if created.id is None:
            raise CreateError(f"{message}: store did not assign an id")

        logger.info("Created order %s for %r", created.id, created.client_name)
        return created

    def update(self, order_id: str, order: OrderAggregate) -> OrderAggregate:
        """
        PUT the entire record under ``order_id`` (full replace, last writer wins).
        """
        message = f"Failed to update order {order_id}"
        order.prepare_for_persist()
        payload = order.to_dict()
        payload["id"] = order_id

        resp = self._request("PUT", self._url(order_id), UpdateError, message, json=payload)

        if not resp.content:
            updated = order.copy()
            updated.id = order_id
        else:
            updated = self._to_order(self._decode(resp, UpdateError, message), UpdateError, message)
            if updated.id is None:
                updated.id = order_id

        logger.info("Updated order %s", order_id)
        return updated

    def delete(self, order_id: str) -> None:
        self._request("DELETE", self._url(order_id), DeleteError, f"Failed to delete order {order_id}")
        logger.info("Deleted order %s", order_id)
