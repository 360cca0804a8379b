from typing import Optional

from pydantic import BaseModel, Field


# 24h "HH:mm", as produced by a time input
SHIFT_TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class TechnicianBase(BaseModel):
    full_name: str = Field(alias="fullName")
    registration_number: str = Field(alias="registrationNumber")
    login: str
    shift_start: str = Field(alias="shiftStart")
    shift_end: str = Field(alias="shiftEnd")

    class Config:
        populate_by_name = True


class TechnicianCreate(TechnicianBase):
    password: str
    shift_start: str = Field(alias="shiftStart", pattern=SHIFT_TIME_PATTERN)
    shift_end: str = Field(alias="shiftEnd", pattern=SHIFT_TIME_PATTERN)


class Technician(TechnicianBase):
    id: str
    password: Optional[str] = None


class TechnicianResponse(TechnicianBase):
    id: str
