"""
Backup export and import.
Import replaces each store whose key is present in the document; nothing is
applied unless the whole document parses.
"""
import json
from datetime import date
from typing import List, Optional, Union

import structlog
from pydantic import ValidationError

from ..schemas.sync import BackupDocument
from .exceptions import ImportParseFailure
from .identity import IdentityStore
from .ledger import OrderLedger
from .persistence import dump_orders, dump_settings, dump_technicians
from .schema_store import SchemaStore


logger = structlog.get_logger(__name__)


def export_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"backup_mantemos_{today.strftime('%d_%m_%Y')}.json"


def export_snapshot(identities: IdentityStore, ledger: OrderLedger, schema: SchemaStore) -> dict:
    return {
        "technicians": dump_technicians(identities.list()),
        "orders": dump_orders(ledger.list_all()),
        "settings": dump_settings(schema.get_settings()),
    }


def import_snapshot(
    raw: Union[str, bytes],
    identities: IdentityStore,
    ledger: OrderLedger,
    schema: SchemaStore,
) -> List[str]:
    """
    Apply a backup document.

    Args:
        raw: JSON text of a {technicians, orders, settings} document

    Returns:
        Names of the stores that were replaced

    Raises:
        ImportParseFailure: if the document is not valid JSON or does not fit
            the data model; no store is modified in that case
    """
    try:
        payload = json.loads(raw)
        if not isinstance(payload, dict):
            raise ImportParseFailure("Backup file must contain a JSON object.")
        document = BackupDocument.model_validate(payload)
    except (ValueError, ValidationError) as exc:
        logger.warning("import_failed", error=str(exc))
        raise ImportParseFailure() from exc

    imported = []
    if document.technicians is not None:
        identities.replace_all(document.technicians)
        imported.append("technicians")
    if document.orders is not None:
        ledger.replace_all(document.orders)
        imported.append("orders")
    if document.settings is not None:
        schema.replace_settings(document.settings)
        imported.append("settings")
    logger.info("import_completed", imported=imported)
    return imported
