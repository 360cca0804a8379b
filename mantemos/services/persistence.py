"""
Local authoritative persistence.
Every change notification rewrites the changed collection under its key.
"""
import json
from typing import List, Optional

import structlog
from pydantic import TypeAdapter, ValidationError

from ..schemas.orders import ServiceOrder
from ..schemas.settings import AppSettings
from ..schemas.technicians import Technician
from ..storage.provider import StorageProvider
from .events import ORDERS, SETTINGS, TECHNICIANS


logger = structlog.get_logger(__name__)

LOCAL_KEYS = {
    TECHNICIANS: "mantemos_technicians",
    ORDERS: "mantemos_orders",
    SETTINGS: "mantemos_settings",
}

technician_list = TypeAdapter(List[Technician])
order_list = TypeAdapter(List[ServiceOrder])


class LocalStateRepository:
    def __init__(self, provider: StorageProvider):
        self.provider = provider

    def _read(self, collection: str, adapter):
        raw = self.provider.get(LOCAL_KEYS[collection])
        if not raw:
            return None
        try:
            return adapter.validate_python(json.loads(raw))
        except (ValueError, ValidationError):
            # keep serving; the next save overwrites the unreadable document
            logger.warning("local_state_unreadable", key=LOCAL_KEYS[collection])
            return None

    def load_technicians(self) -> Optional[List[Technician]]:
        return self._read(TECHNICIANS, technician_list)

    def load_orders(self) -> Optional[List[ServiceOrder]]:
        return self._read(ORDERS, order_list)

    def load_settings(self) -> Optional[AppSettings]:
        return self._read(SETTINGS, TypeAdapter(AppSettings))

    def save(self, collection: str, payload) -> None:
        self.provider.put(LOCAL_KEYS[collection], json.dumps(payload))


def dump_technicians(technicians: List[Technician]) -> list:
    return technician_list.dump_python(technicians, mode="json", by_alias=True)


def dump_orders(orders: List[ServiceOrder]) -> list:
    return order_list.dump_python(orders, mode="json", by_alias=True)


def dump_settings(settings: AppSettings) -> dict:
    return settings.model_dump(mode="json", by_alias=True)
