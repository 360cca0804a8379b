"""
Wiring of storage, stores and sync for one running process.
"""
import threading
from typing import Optional

import structlog
from starlette.requests import Request

from .config import Settings, settings as default_settings
from .services.events import ORDERS, SETTINGS, TECHNICIANS, ChangeNotifier
from .services.identity import IdentityStore
from .services.issuance import Clock, IssuanceWorkflow
from .services.ledger import OrderLedger
from .services.persistence import LocalStateRepository, dump_orders, dump_settings, dump_technicians
from .services.schema_store import SchemaStore
from .services.sync_engine import SyncEngine
from .storage.local_provider import LocalStorageProvider
from .storage.memory_provider import MemoryStorageProvider
from .storage.mirror_provider import RemoteMirror
from .storage.provider import StorageProvider


logger = structlog.get_logger(__name__)


def create_storage(config: Settings) -> StorageProvider:
    if config.storage_provider == "memory":
        return MemoryStorageProvider()
    if config.storage_provider == "local":
        return LocalStorageProvider(config.data_dir)
    raise ValueError(f"unknown storage provider: {config.storage_provider}")


class Workspace:
    def __init__(
        self,
        storage: StorageProvider,
        config: Settings = default_settings,
        mirror_storage: Optional[StorageProvider] = None,
        clock: Optional[Clock] = None,
    ):
        self.config = config
        self.repository = LocalStateRepository(storage)
        self.notifier = ChangeNotifier()

        self.identities = IdentityStore(self.notifier, self.repository.load_technicians())
        self.ledger = OrderLedger(
            self.notifier,
            self.repository.load_orders(),
            id_strategy=config.order_id_strategy,
        )
        self.schema = SchemaStore(self.notifier, self.repository.load_settings())
        self.workflow = IssuanceWorkflow(self.ledger, self.schema, clock=clock)

        # the mirror keys live beside the local ones unless a separate backend is given
        self.mirror = RemoteMirror(
            mirror_storage or storage,
            push_latency_s=config.sync_push_latency_ms / 1000,
            pull_latency_s=config.sync_pull_latency_ms / 1000,
        )
        self._persist_locks = {name: threading.Lock() for name in (TECHNICIANS, ORDERS, SETTINGS)}
        self.notifier.subscribe(self._persist)
        self.sync = SyncEngine(
            self.mirror,
            self.notifier,
            self.identities,
            self.ledger,
            self.schema,
            max_retries=config.sync_max_retries,
            retry_backoff_s=config.sync_retry_backoff_ms / 1000,
        )

    def _persist(self, collection: str) -> None:
        # read and write under the same lock: the last writer saves the newest state
        with self._persist_locks[collection]:
            if collection == TECHNICIANS:
                self.repository.save(TECHNICIANS, dump_technicians(self.identities.list()))
            elif collection == ORDERS:
                self.repository.save(ORDERS, dump_orders(self.ledger.list_all()))
            elif collection == SETTINGS:
                self.repository.save(SETTINGS, dump_settings(self.schema.get_settings()))


def build_workspace(config: Settings = default_settings) -> Workspace:
    workspace = Workspace(create_storage(config), config)
    logger.info(
        "workspace_loaded",
        storage=config.storage_provider,
        technicians=len(workspace.identities.list()),
        orders=len(workspace.ledger),
    )
    return workspace


def get_workspace(request: Request) -> Workspace:
    return request.app.state.workspace
