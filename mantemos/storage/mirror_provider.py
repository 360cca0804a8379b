"""
Simulated cloud mirror.
Holds a whole-state snapshot under the cloud_* keys of a storage provider and
imposes network latency on every read and write.
"""
import asyncio
import json
from typing import Optional

from pydantic import ValidationError

from ..schemas.sync import Snapshot
from ..services.exceptions import MirrorCorruptError, StaleSnapshotError, TransportError
from .provider import StorageProvider


CLOUD_TECHNICIANS_KEY = "cloud_technicians"
CLOUD_ORDERS_KEY = "cloud_orders"
CLOUD_SETTINGS_KEY = "cloud_settings"
CLOUD_VERSION_KEY = "cloud_version"


class RemoteMirror:
    def __init__(
        self,
        backend: StorageProvider,
        push_latency_s: float = 0.8,
        pull_latency_s: float = 1.0,
    ):
        self.backend = backend
        self.push_latency_s = push_latency_s
        self.pull_latency_s = pull_latency_s
        self.online = True

    def set_online(self, online: bool) -> None:
        self.online = online

    def current_version(self) -> int:
        raw = self.backend.get(CLOUD_VERSION_KEY)
        try:
            return int(raw) if raw else 0
        except ValueError as exc:
            raise MirrorCorruptError() from exc

    async def write_snapshot(self, snapshot: Snapshot) -> int:
        """Replace the mirror wholesale. Returns the version now stored."""
        await asyncio.sleep(self.push_latency_s)
        if not self.online:
            raise TransportError()
        current = self.current_version()
        if snapshot.version <= current:
            raise StaleSnapshotError(snapshot.version, current)
        data = snapshot.model_dump(mode="json", by_alias=True)
        self.backend.put(CLOUD_ORDERS_KEY, json.dumps(data["orders"] or []))
        self.backend.put(CLOUD_TECHNICIANS_KEY, json.dumps(data["technicians"] or []))
        if data["settings"] is not None:
            self.backend.put(CLOUD_SETTINGS_KEY, json.dumps(data["settings"]))
        self.backend.put(CLOUD_VERSION_KEY, str(snapshot.version))
        return snapshot.version

    async def read_snapshot(self) -> Snapshot:
        """Read whatever the mirror holds; parts never pushed come back as None.

        Raises:
            TransportError: if the mirror is offline
            MirrorCorruptError: if a stored part does not parse as its model
        """
        await asyncio.sleep(self.pull_latency_s)
        if not self.online:
            raise TransportError()
        try:
            return Snapshot.model_validate({
                "technicians": _load(self.backend.get(CLOUD_TECHNICIANS_KEY)),
                "orders": _load(self.backend.get(CLOUD_ORDERS_KEY)),
                "settings": _load(self.backend.get(CLOUD_SETTINGS_KEY)),
                "version": self.current_version(),
            })
        except (ValueError, ValidationError) as exc:
            raise MirrorCorruptError() from exc


def _load(raw: Optional[str]):
    return json.loads(raw) if raw else None
