"""
Form schema and branding settings.
The field list is ordered: new fields go last and capture forms follow that order.
"""
import threading
from typing import List, Optional, Tuple

import structlog

from ..schemas.settings import AppSettings, FieldCreate, FieldDefinition
from .events import SETTINGS, ChangeNotifier
from .identity import new_opaque_id


logger = structlog.get_logger(__name__)


class SchemaStore:
    def __init__(self, notifier: ChangeNotifier, settings: Optional[AppSettings] = None):
        self._notifier = notifier
        self._settings = settings or AppSettings()
        self._lock = threading.RLock()

    @property
    def revision(self) -> int:
        """Bumped on every change and stored with the settings document."""
        with self._lock:
            return self._settings.schema_revision

    def _commit(self, settings: AppSettings) -> AppSettings:
        # caller holds the lock; never goes backwards, keeps a newer incoming revision
        revision = max(self._settings.schema_revision + 1, settings.schema_revision)
        self._settings = settings.model_copy(update={"schema_revision": revision})
        return self._settings

    def add_field(self, data: FieldCreate) -> FieldDefinition:
        field = FieldDefinition(id=new_opaque_id(), **data.model_dump())
        with self._lock:
            current = self._settings
            self._commit(current.model_copy(update={"fields": [*current.fields, field]}))
        self._notifier.notify(SETTINGS)
        logger.info("field_added", field_id=field.id, label=field.label)
        return field

    def remove_field(self, field_id: str) -> None:
        with self._lock:
            current = self._settings
            kept = [f for f in current.fields if f.id != field_id]
            if len(kept) == len(current.fields):
                return
            self._commit(current.model_copy(update={"fields": kept}))
        self._notifier.notify(SETTINGS)
        logger.info("field_removed", field_id=field_id)

    def list_fields(self) -> List[FieldDefinition]:
        with self._lock:
            return list(self._settings.fields)

    def capture(self) -> Tuple[int, List[FieldDefinition]]:
        """Revision and field list read together, for projecting a submitted form."""
        with self._lock:
            return self._settings.schema_revision, list(self._settings.fields)

    def get_settings(self) -> AppSettings:
        with self._lock:
            return self._settings.model_copy(deep=True)

    def update_settings(self, **changes) -> AppSettings:
        """Apply branding changes. The field list is only changed through add/remove.

        Raises:
            pydantic.ValidationError: if the merged document is not valid settings
        """
        changes.pop("fields", None)
        changes.pop("schema_revision", None)
        with self._lock:
            data = self._settings.model_dump()
            data.update(changes)
            updated = self._commit(AppSettings.model_validate(data))
        self._notifier.notify(SETTINGS)
        return updated.model_copy(deep=True)

    def replace_settings(self, settings: AppSettings) -> None:
        with self._lock:
            self._commit(settings)
        self._notifier.notify(SETTINGS)
