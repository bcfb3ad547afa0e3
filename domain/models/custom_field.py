"""Custom field configuration - admin-defined extra attributes per visitor"""
from typing import Optional, Literal
from datetime import datetime
from sqlmodel import SQLModel, Field, Column
from uuid import UUID, uuid4

from domain.models.columns import UTCDateTime, utc_now

FieldType = Literal["text", "textarea", "number", "date", "boolean"]

FIELD_TYPE_LABELS = {
    "text": "Texto corto",
    "textarea": "Texto largo",
    "number": "Número",
    "date": "Fecha",
    "boolean": "Sí/No",
}


class CustomFieldConfigBase(SQLModel):
    field_name: str = Field(index=True, unique=True)  # Machine key: lowercase + underscores
    field_label: str
    field_type: str = Field(default="text")  # text, textarea, number, date, boolean
    is_required: bool = Field(default=False)
    display_order: int = Field(default=0, index=True)

class CustomFieldConfig(CustomFieldConfigBase, table=True):
    __tablename__ = "custom_field_config"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(UTCDateTime(), nullable=False))

class CustomFieldConfigCreate(CustomFieldConfigBase):
    field_type: FieldType = "text"

class CustomFieldConfigRead(CustomFieldConfigBase):
    id: UUID
    created_at: datetime

class CustomFieldConfigUpdate(SQLModel):
    # field_name is fixed once created
    field_label: Optional[str] = None
    field_type: Optional[FieldType] = None
    is_required: Optional[bool] = None
    display_order: Optional[int] = None
