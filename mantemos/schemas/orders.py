from typing import Dict, Literal, Optional

from pydantic import BaseModel, Field

from .settings import AppSettings


ORDER_STATUS_COMPLETED = "Completed"


class ServiceOrder(BaseModel):
    id: str
    technician_id: str = Field(alias="technicianId")
    technician_name: str = Field(alias="technicianName")
    technician_registration_number: str = Field(alias="technicianRegistrationNumber")
    issued_at_epoch_millis: int = Field(alias="issuedAtEpochMillis")
    fields: Dict[str, Optional[str]] = Field(default_factory=dict)
    status: Literal["Completed"] = ORDER_STATUS_COMPLETED
    # settings revision the fields were captured against; absent on imported legacy orders
    schema_revision: Optional[int] = Field(default=None, alias="schemaRevision")

    class Config:
        populate_by_name = True


class OrderSubmit(BaseModel):
    # keyed by field id (label also accepted)
    fields: Dict[str, str] = Field(default_factory=dict)


class ShiftStatus(BaseModel):
    within_shift: bool = Field(alias="withinShift")
    now: str
    shift_start: str = Field(alias="shiftStart")
    shift_end: str = Field(alias="shiftEnd")

    class Config:
        populate_by_name = True


class OrderDocument(BaseModel):
    order: ServiceOrder
    settings: AppSettings
