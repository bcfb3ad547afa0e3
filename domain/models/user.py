"""Back-office users: profile rows and role assignments (auth lives in Supabase)"""
from typing import Optional, Literal
from datetime import datetime
from sqlmodel import SQLModel, Field, Column
from pydantic import BaseModel
from uuid import UUID, uuid4

from domain.models.columns import UTCDateTime, utc_now

RoleName = Literal["admin", "super_admin"]


class UserProfile(SQLModel, table=True):
    __tablename__ = "user_profile"

    id: UUID = Field(primary_key=True)  # Same id as Supabase auth.users
    full_name: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(UTCDateTime(), nullable=False))

class UserRole(SQLModel, table=True):
    __tablename__ = "user_role"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(index=True, unique=True)
    role: str = Field(default="admin")  # admin, super_admin
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(UTCDateTime(), nullable=False))


class UserCreate(BaseModel):
    email: str
    password: str
    full_name: str
    role: RoleName = "admin"

class UserRead(BaseModel):
    id: UUID
    email: str
    full_name: str
    role: Optional[RoleName] = None  # None until a role is assigned
    created_at: datetime
