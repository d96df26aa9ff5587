# domain/errors.py

from typing import List, Optional


class OrderStoreError(Exception):
    """
    Base class for every failed call against the remote order store.
    """

    action = "access order store"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"{self.message} (HTTP {self.status_code})"
        return self.message


class FetchError(OrderStoreError):
    action = "load orders"


class NotFoundOrFetchError(FetchError):
    action = "load order"


class CreateError(OrderStoreError):
    action = "create order"


class UpdateError(OrderStoreError):
    action = "update order"


class DeleteError(OrderStoreError):
    action = "delete order"


class PartialBulkDeleteError(OrderStoreError):
    """
    One or more of the concurrent deletes issued by a bulk delete failed.

    Which orders survived is not reconciled locally; refresh to find out.
    """

    action = "delete orders"

    def __init__(self, failed_ids: List[str], attempted: int):
        super().__init__("Some orders could not be deleted")
        self.failed_ids = list(failed_ids)
        self.attempted = attempted
