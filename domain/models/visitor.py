"""Visitor model - people pre-authorized (or not) to enter, keyed by cedula"""
import re
from typing import Optional, Dict, Any
from datetime import date, datetime
from sqlmodel import SQLModel, Field, Column
from sqlalchemy import JSON
from uuid import UUID, uuid4

from domain.errors import ValidationError
from domain.models.columns import UTCDateTime, utc_now

ID_NUMBER_RE = re.compile(r"^\d+$")


class VisitorBase(SQLModel):
    id_number: str = Field(index=True, unique=True)  # Cedula, digits only
    full_name: str
    company: Optional[str] = None
    authorization_expiry: date  # Authorized up to this date
    authorized: bool = Field(default=True)
    notes: Optional[str] = None  # Observaciones
    additional_data: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    photo_url: Optional[str] = None

class Visitor(VisitorBase, table=True):
    __tablename__ = "visitors"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    # Only advanced by register_entry
    last_entry_at: Optional[datetime] = Field(default=None, sa_column=Column(UTCDateTime(), index=True))
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(UTCDateTime(), nullable=False))
    updated_at: datetime = Field(default_factory=utc_now, sa_column=Column(UTCDateTime(), nullable=False))

class VisitorCreate(VisitorBase):
    pass

class VisitorRead(VisitorBase):
    id: UUID
    last_entry_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

class VisitorUpdate(SQLModel):
    id_number: Optional[str] = None
    full_name: Optional[str] = None
    company: Optional[str] = None
    authorization_expiry: Optional[date] = None
    authorized: Optional[bool] = None
    notes: Optional[str] = None
    additional_data: Optional[Dict[str, Any]] = None
    photo_url: Optional[str] = None


def clean_id_number(value: Optional[str]) -> str:
    """Strip a cedula and reject anything that is not a run of digits"""
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError("Por favor ingrese un número de cédula")
    if not ID_NUMBER_RE.match(cleaned):
        raise ValidationError("La cédula solo puede contener dígitos")
    return cleaned
