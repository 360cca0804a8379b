from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class FieldKind(str, Enum):
    short_text = "short-text"
    long_text = "long-text"
    number = "number"


class BorderStyle(str, Enum):
    none = "none"
    md = "md"
    lg = "lg"
    xl = "xl"
    xxl = "2xl"


class FieldDefinition(BaseModel):
    id: str
    label: str
    kind: FieldKind = FieldKind.short_text
    required: bool = True


class FieldCreate(BaseModel):
    label: str = Field(min_length=1)
    kind: FieldKind = FieldKind.short_text
    required: bool = True


DEFAULT_FIELDS: List[FieldDefinition] = [
    FieldDefinition(id="1", label="Location", kind=FieldKind.short_text),
    FieldDefinition(id="2", label="Sector", kind=FieldKind.short_text),
    FieldDefinition(id="3", label="Company", kind=FieldKind.short_text),
    FieldDefinition(id="4", label="Operator", kind=FieldKind.short_text),
    FieldDefinition(id="5", label="Equipment", kind=FieldKind.short_text),
    FieldDefinition(id="6", label="Problem Description", kind=FieldKind.long_text),
]


class AppSettings(BaseModel):
    logo_data_uri: Optional[str] = Field(default=None, alias="logoDataUri")
    fields: List[FieldDefinition] = Field(default_factory=lambda: [f.model_copy() for f in DEFAULT_FIELDS])
    company_name: str = Field(default="MantemOS", alias="companyName")
    app_title: str = Field(default="MantemOS", alias="appTitle")
    primary_color: str = Field(default="#2563eb", alias="primaryColor")
    border_style: BorderStyle = Field(default=BorderStyle.xxl, alias="borderStyle")
    cloud_sync_enabled: bool = Field(default=False, alias="cloudSyncEnabled")
    # bumped on every change to this document; orders record the revision they were captured against
    schema_revision: int = Field(default=0, alias="schemaRevision")

    class Config:
        populate_by_name = True


class SettingsUpdate(BaseModel):
    """Branding changes. Only keys present in the request body are applied.

    logoDataUri may be sent as null to clear the logo; the other keys may be
    omitted but not nulled.
    """

    logo_data_uri: Optional[str] = Field(default=None, alias="logoDataUri")
    company_name: Optional[str] = Field(default=None, alias="companyName")
    app_title: Optional[str] = Field(default=None, alias="appTitle")
    primary_color: Optional[str] = Field(default=None, alias="primaryColor")
    border_style: Optional[BorderStyle] = Field(default=None, alias="borderStyle")
    cloud_sync_enabled: Optional[bool] = Field(default=None, alias="cloudSyncEnabled")

    @field_validator("company_name", "app_title", "primary_color", "border_style", "cloud_sync_enabled")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value

    class Config:
        populate_by_name = True
