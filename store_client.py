# store_client.py
import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from services.order_collection_service import OrderCollectionController
from services.record_store_client import RecordStoreClient

DEFAULT_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class StoreSettings:
    base_url: str
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    max_delete_workers: Optional[int] = None  # None: one request per order at once
    username: Optional[str] = None
    password: Optional[str] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "StoreSettings":
        load_dotenv()

        base_url = os.getenv("ORDER_STORE_URL")
        if not base_url:
            raise RuntimeError("ORDER_STORE_URL is not set in the environment")

        workers = os.getenv("ORDER_STORE_DELETE_WORKERS")

        return cls(
            base_url=base_url,
            timeout_seconds=float(os.getenv("ORDER_STORE_TIMEOUT") or DEFAULT_TIMEOUT_SECONDS),
            max_delete_workers=int(workers) if workers else None,
            username=os.getenv("APP_USERNAME"),
            password=os.getenv("APP_PASSWORD"),
            log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        )


def configure_logging(settings: StoreSettings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def get_record_store_client(settings: Optional[StoreSettings] = None) -> RecordStoreClient:
    settings = settings or StoreSettings.from_env()
    return RecordStoreClient(settings.base_url, timeout_seconds=settings.timeout_seconds)


def get_order_collection(settings: Optional[StoreSettings] = None) -> OrderCollectionController:
    settings = settings or StoreSettings.from_env()
    return OrderCollectionController(
        get_record_store_client(settings),
        max_delete_workers=settings.max_delete_workers,
    )
