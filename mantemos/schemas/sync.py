from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .orders import ServiceOrder
from .settings import AppSettings
from .technicians import Technician


class Snapshot(BaseModel):
    """Full local state as pushed to (or read from) the cloud mirror.

    A part left as None means "not present": for a mirror read it was never
    pushed, for an import the key was missing from the document.
    """

    technicians: Optional[List[Technician]] = None
    orders: Optional[List[ServiceOrder]] = None
    settings: Optional[AppSettings] = None
    version: int = 0


class BackupDocument(BaseModel):
    technicians: Optional[List[Technician]] = None
    orders: Optional[List[ServiceOrder]] = None
    settings: Optional[AppSettings] = None


class ImportResult(BaseModel):
    imported: List[str]


class SyncStatus(BaseModel):
    syncing: bool
    pending: bool
    failed: bool
    last_error: Optional[str] = Field(default=None, alias="lastError")
    last_push_at: Optional[datetime] = Field(default=None, alias="lastPushAt")
    last_pull_at: Optional[datetime] = Field(default=None, alias="lastPullAt")
    local_version: int = Field(alias="localVersion")
    confirmed_version: int = Field(alias="confirmedVersion")

    class Config:
        populate_by_name = True
