"""
Cloud mirror synchronization.

The local stores are authoritative. Every change to technicians, orders or
settings asks for a push of the full local snapshot to the mirror; the mirror
is replaced wholesale, there is no merge. One pull runs when the engine starts
and may overwrite local stores with whatever the mirror holds.

Pushes go through a single worker per engine: a change that arrives while a
push is in flight marks the engine dirty and the worker pushes again with the
newest snapshot once the current push completes. Each snapshot carries the
local version; the mirror refuses versions that are not newer than its own.
"""
import asyncio
import threading
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional, TypeVar

import structlog

from ..schemas.sync import Snapshot, SyncStatus
from ..storage.mirror_provider import RemoteMirror
from .events import ChangeNotifier
from .exceptions import MantemosError, MirrorCorruptError, StaleSnapshotError, TransportError
from .identity import IdentityStore
from .ledger import OrderLedger
from .schema_store import SchemaStore


logger = structlog.get_logger(__name__)

T = TypeVar("T")


class SyncEngine:
    def __init__(
        self,
        mirror: RemoteMirror,
        notifier: ChangeNotifier,
        identities: IdentityStore,
        ledger: OrderLedger,
        schema: SchemaStore,
        max_retries: int = 3,
        retry_backoff_s: float = 0.2,
    ):
        self.mirror = mirror
        self.identities = identities
        self.ledger = ledger
        self.schema = schema
        self.max_retries = max_retries
        self.retry_backoff_s = retry_backoff_s

        self._notifier = notifier
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._loop_thread: Optional[int] = None
        self._initial_pull: Optional[asyncio.Task] = None
        self._push_task: Optional[asyncio.Task] = None
        self._dirty = False
        self._applying = False
        self._in_flight = 0

        self.local_version = 0
        self.confirmed_version = 0
        self.failed = False
        self.last_error: Optional[str] = None
        self.last_push_at: Optional[datetime] = None
        self.last_pull_at: Optional[datetime] = None

        notifier.subscribe(self.on_change)

    # lifecycle

    def start(self) -> None:
        """Bind to the running loop and schedule the start-up pull."""
        self._loop = asyncio.get_running_loop()
        self._loop_thread = threading.get_ident()
        self._initial_pull = self._loop.create_task(self.pull())
        logger.info("sync_engine_started")

    async def wait_idle(self) -> None:
        while True:
            tasks = [t for t in (self._initial_pull, self._push_task) if t is not None and not t.done()]
            if not tasks:
                return
            await asyncio.gather(*tasks)

    async def stop(self) -> None:
        # no cancellation: in-flight work always runs to completion
        await self.wait_idle()
        self._notifier.unsubscribe(self.on_change)
        self._loop = None
        logger.info("sync_engine_stopped")

    # change triggers

    def on_change(self, collection: str) -> None:
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        if threading.get_ident() == self._loop_thread:
            self._handle_change(collection)
        else:
            loop.call_soon_threadsafe(self._handle_change, collection)

    def _handle_change(self, collection: str) -> None:
        if self._applying:
            return
        if not self.identities.list() and len(self.ledger) == 0:
            # never overwrite a populated mirror with an empty local state
            logger.debug("sync_push_skipped_empty", collection=collection)
            return
        self.local_version += 1
        self.request_push()

    def request_push(self) -> None:
        self._dirty = True
        if self._push_task is None or self._push_task.done():
            self._push_task = asyncio.get_running_loop().create_task(self._push_worker())

    async def _push_worker(self) -> None:
        if self._initial_pull is not None and not self._initial_pull.done():
            await self._initial_pull
        while self._dirty:
            self._dirty = False
            await self.push()

    # operations

    def snapshot(self) -> Snapshot:
        return Snapshot(
            technicians=self.identities.list(),
            orders=self.ledger.list_all(),
            settings=self.schema.get_settings(),
            version=self.local_version,
        )

    async def push(self) -> bool:
        """Replace the mirror with the current local snapshot. Returns True once confirmed."""
        snapshot = self.snapshot()
        if snapshot.version <= self.confirmed_version:
            return True
        try:
            version = await self._with_retry("push", lambda: self.mirror.write_snapshot(snapshot))
        except (StaleSnapshotError, MirrorCorruptError) as exc:
            self._record_failure("push", exc)
            return False
        except TransportError as exc:
            self._record_failure("push", exc)
            return False
        self.confirmed_version = max(self.confirmed_version, version)
        self.last_push_at = datetime.now(timezone.utc)
        self._record_success()
        logger.info(
            "sync_push_completed",
            version=version,
            technicians=len(snapshot.technicians or []),
            orders=len(snapshot.orders or []),
        )
        return True

    async def pull(self) -> bool:
        """Overwrite local stores with the parts the mirror holds. Returns True on success."""
        try:
            snapshot = await self._with_retry("pull", self.mirror.read_snapshot)
        except (TransportError, MirrorCorruptError) as exc:
            # local stores stay as they are; the next push replaces the bad mirror
            self._record_failure("pull", exc)
            return False
        applied = self._apply(snapshot)
        self.confirmed_version = snapshot.version
        self.local_version = snapshot.version
        self.last_pull_at = datetime.now(timezone.utc)
        self._record_success()
        logger.info("sync_pull_completed", version=snapshot.version, applied=applied)
        # local parts the mirror lacks, or changes made while the pull was in flight
        has_data = bool(self.identities.list()) or len(self.ledger) > 0
        if has_data and (self._dirty or len(applied) < 3):
            self.local_version += 1
            self.request_push()
        return True

    def _apply(self, snapshot: Snapshot) -> list:
        applied = []
        self._applying = True
        try:
            if snapshot.orders is not None:
                self.ledger.replace_all(snapshot.orders)
                applied.append("orders")
            if snapshot.technicians is not None:
                self.identities.replace_all(snapshot.technicians)
                applied.append("technicians")
            if snapshot.settings is not None:
                self.schema.replace_settings(snapshot.settings)
                applied.append("settings")
        finally:
            self._applying = False
        return applied

    async def _with_retry(self, operation: str, call: Callable[[], Awaitable[T]]) -> T:
        self._in_flight += 1
        try:
            attempt = 0
            while True:
                try:
                    return await call()
                except TransportError as exc:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise
                    delay = self.retry_backoff_s * (2 ** (attempt - 1))
                    logger.warning("sync_retry", operation=operation, attempt=attempt, delay_s=delay, error=str(exc))
                    await asyncio.sleep(delay)
        finally:
            self._in_flight -= 1

    def _record_failure(self, operation: str, exc: MantemosError) -> None:
        self.failed = True
        self.last_error = f"{operation}: {exc.message}"
        logger.error("sync_failed", operation=operation, error=exc.message)

    def _record_success(self) -> None:
        self.failed = False
        self.last_error = None

    def status(self) -> SyncStatus:
        return SyncStatus(
            syncing=self._in_flight > 0,
            pending=self._dirty,
            failed=self.failed,
            last_error=self.last_error,
            last_push_at=self.last_push_at,
            last_pull_at=self.last_pull_at,
            local_version=self.local_version,
            confirmed_version=self.confirmed_version,
        )
