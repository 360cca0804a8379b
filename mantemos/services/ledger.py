"""
Order ledger.

Orders are kept newest-first. The next order id is derived from the head of
the ledger (the most recently inserted order), not from the largest id, so a
ledger that is not newest-first (e.g. an unsorted import) can yield an id that
already exists. Use the "max" strategy to derive from the largest id instead.
"""
import re
import threading
import time
from typing import Dict, Iterable, List, Optional

import structlog

from ..schemas.orders import ServiceOrder
from ..schemas.technicians import Technician
from .events import ORDERS, ChangeNotifier


logger = structlog.get_logger(__name__)

ID_STRATEGY_HEAD = "head"
ID_STRATEGY_MAX = "max"
ID_WIDTH = 4

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_order_number(order_id: str) -> Optional[int]:
    """Leading integer of an order id ("0042" -> 42, "12abc" -> 12, "abc" -> None)."""
    match = _LEADING_INT.match(order_id or "")
    return int(match.group(1)) if match else None


def format_order_id(number: int) -> str:
    return str(number).zfill(ID_WIDTH)


def epoch_millis() -> int:
    return int(time.time() * 1000)


class OrderLedger:
    def __init__(
        self,
        notifier: ChangeNotifier,
        orders: Optional[Iterable[ServiceOrder]] = None,
        id_strategy: str = ID_STRATEGY_HEAD,
    ):
        if id_strategy not in (ID_STRATEGY_HEAD, ID_STRATEGY_MAX):
            raise ValueError(f"unknown order id strategy: {id_strategy}")
        self._notifier = notifier
        self._orders: List[ServiceOrder] = list(orders or [])
        self.id_strategy = id_strategy
        self._lock = threading.RLock()

    def _next_number(self) -> int:
        if self.id_strategy == ID_STRATEGY_MAX:
            numbers = [n for n in (parse_order_number(o.id) for o in self._orders) if n is not None]
            return max(numbers, default=0) + 1
        seed = parse_order_number(self._orders[0].id) if self._orders else None
        return (seed or 0) + 1

    def issue(
        self,
        technician: Technician,
        captured_fields: Dict[str, str],
        schema_revision: Optional[int] = None,
    ) -> ServiceOrder:
        with self._lock:
            order = ServiceOrder(
                id=format_order_id(self._next_number()),
                technician_id=technician.id,
                technician_name=technician.full_name,
                technician_registration_number=technician.registration_number,
                issued_at_epoch_millis=epoch_millis(),
                fields=dict(captured_fields),
                schema_revision=schema_revision,
            )
            self._orders = [order, *self._orders]
        logger.info(
            "order_issued",
            order_id=order.id,
            technician_id=technician.id,
            schema_revision=schema_revision,
        )
        self._notifier.notify(ORDERS)
        return order

    def get(self, order_id: str) -> Optional[ServiceOrder]:
        with self._lock:
            return next((o for o in self._orders if o.id == order_id), None)

    def list_all(self) -> List[ServiceOrder]:
        with self._lock:
            return list(self._orders)

    def list_by_technician(self, technician_id: str) -> List[ServiceOrder]:
        with self._lock:
            return [o for o in self._orders if o.technician_id == technician_id]

    def replace_all(self, orders: Iterable[ServiceOrder]) -> None:
        """Wholesale replacement (import, cloud pull). No id checks are made."""
        with self._lock:
            self._orders = list(orders)
        self._notifier.notify(ORDERS)

    def __len__(self) -> int:
        return len(self._orders)
