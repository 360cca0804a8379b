import threading
from typing import Callable, List

import structlog


logger = structlog.get_logger(__name__)

TECHNICIANS = "technicians"
ORDERS = "orders"
SETTINGS = "settings"

Listener = Callable[[str], None]


class ChangeNotifier:
    """Observer list shared by the stores. Listeners get the collection name."""

    def __init__(self) -> None:
        self._listeners: List[Listener] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: Listener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def notify(self, collection: str) -> None:
        with self._lock:
            targets = list(self._listeners)
        for listener in targets:
            try:
                listener(collection)
            except Exception:
                # one broken listener must not block the others
                logger.exception("change_listener_failed", collection=collection)
