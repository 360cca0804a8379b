"""
Technician identities and credential lookup.
"""
import random
import string
import threading
from typing import Iterable, List, Optional

import structlog

from ..schemas.technicians import Technician, TechnicianCreate
from .events import TECHNICIANS, ChangeNotifier


logger = structlog.get_logger(__name__)

_ID_ALPHABET = string.ascii_lowercase + string.digits


def new_opaque_id(length: int = 9) -> str:
    return "".join(random.choices(_ID_ALPHABET, k=length))


class CredentialVerifier:
    def verify(self, candidate: str, stored: Optional[str]) -> bool:
        raise NotImplementedError


class PlainTextVerifier(CredentialVerifier):
    """Exact string comparison; stored passwords are kept as entered."""

    def verify(self, candidate: str, stored: Optional[str]) -> bool:
        if not candidate or not candidate.strip() or stored is None:
            return False
        return candidate == stored


class IdentityStore:
    def __init__(
        self,
        notifier: ChangeNotifier,
        technicians: Optional[Iterable[Technician]] = None,
        verifier: Optional[CredentialVerifier] = None,
    ):
        self._notifier = notifier
        self._technicians: List[Technician] = list(technicians or [])
        self._verifier = verifier or PlainTextVerifier()
        self._lock = threading.RLock()

    def add(self, data: TechnicianCreate) -> Technician:
        technician = Technician(id=new_opaque_id(), **data.model_dump())
        with self._lock:
            self._technicians = [*self._technicians, technician]
        logger.info("technician_added", technician_id=technician.id, login=technician.login)
        self._notifier.notify(TECHNICIANS)
        return technician

    def remove(self, technician_id: str) -> None:
        with self._lock:
            kept = [t for t in self._technicians if t.id != technician_id]
            removed = len(kept) != len(self._technicians)
            self._technicians = kept
        if removed:
            logger.info("technician_removed", technician_id=technician_id)
            self._notifier.notify(TECHNICIANS)

    def find_by_credentials(self, login: str, password: str) -> Optional[Technician]:
        if not login or not login.strip():
            return None
        with self._lock:
            candidates = list(self._technicians)
        for technician in candidates:
            if technician.login == login and self._verifier.verify(password, technician.password):
                return technician
        return None

    def get(self, technician_id: str) -> Optional[Technician]:
        with self._lock:
            return next((t for t in self._technicians if t.id == technician_id), None)

    def list(self) -> List[Technician]:
        with self._lock:
            return list(self._technicians)

    def replace_all(self, technicians: Iterable[Technician]) -> None:
        with self._lock:
            self._technicians = list(technicians)
        self._notifier.notify(TECHNICIANS)
