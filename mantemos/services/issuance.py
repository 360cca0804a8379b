"""
Order issuance: shift admission, form projection, ledger append.
"""
from datetime import time
from typing import Callable, Dict, List, Mapping, Optional

import structlog

from ..schemas.orders import ServiceOrder
from ..schemas.settings import FieldDefinition
from ..schemas.technicians import Technician
from .exceptions import ShiftClosedError
from .ledger import OrderLedger
from .schema_store import SchemaStore
from .time_rules import current_time_of_day, is_within_shift


logger = structlog.get_logger(__name__)

Clock = Callable[[], time]


def project_inputs(fields: List[FieldDefinition], form_inputs: Mapping[str, str]) -> Dict[str, str]:
    """Map captured inputs onto the active fields, keyed by label.

    A value is looked up by field id first, then by label. Fields without a
    value are recorded as empty strings; inputs matching no field are dropped.
    """
    data: Dict[str, str] = {}
    for field in fields:
        value = form_inputs.get(field.id)
        if value is None:
            value = form_inputs.get(field.label)
        data[field.label] = "" if value is None else str(value)
    return data


class IssuanceWorkflow:
    def __init__(self, ledger: OrderLedger, schema: SchemaStore, clock: Optional[Clock] = None):
        self.ledger = ledger
        self.schema = schema
        self.clock = clock or current_time_of_day

    def can_issue(self, technician: Technician) -> bool:
        try:
            return is_within_shift(self.clock(), technician.shift_start, technician.shift_end)
        except ValueError:
            logger.warning(
                "shift_unparseable",
                technician_id=technician.id,
                shift_start=technician.shift_start,
                shift_end=technician.shift_end,
            )
            return False

    def submit(self, technician: Technician, form_inputs: Mapping[str, str]) -> ServiceOrder:
        """Issue an order, or raise ShiftClosedError without writing anything."""
        if not self.can_issue(technician):
            logger.info("order_rejected_shift_closed", technician_id=technician.id)
            raise ShiftClosedError()
        revision, fields = self.schema.capture()
        return self.ledger.issue(technician, project_inputs(fields, form_inputs), schema_revision=revision)
