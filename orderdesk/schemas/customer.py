# orderdesk/schemas/customer.py
import uuid
from datetime import datetime

from pydantic import ConfigDict, EmailStr, field_validator
from sqlmodel import SQLModel, Field


class CustomerCreate(SQLModel):
    """
    Payload for creating a customer.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=150)
    tax_id: str | None = Field(default=None, max_length=20)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=30)
    address: str | None = Field(default=None, max_length=250)
    notes: str | None = None

    @field_validator("name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_none(cls, v):
        # Import sheets send "" for missing emails
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("tax_id", "phone", "address", "notes")
    @classmethod
    def normalize_optional(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class CustomerUpdate(SQLModel):
    """
    Partial update; omitted fields are left unchanged.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=150)
    tax_id: str | None = Field(default=None, max_length=20)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=30)
    address: str | None = Field(default=None, max_length=250)
    notes: str | None = None
    is_active: bool | None = None

    @field_validator("name")
    @classmethod
    def not_empty(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v


class CustomerRead(SQLModel):
    id: uuid.UUID
    name: str
    tax_id: str | None
    email: str | None
    phone: str | None
    address: str | None
    notes: str | None
    is_active: bool
    created_at: datetime


class CustomerBulkCreate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    customers: list[dict]


class BulkFailure(SQLModel):
    index: int
    reason: str


class BulkResult(SQLModel):
    """
    Result of a bulk import. Valid rows are created even if others fail.
    """

    created: int
    failed: list[BulkFailure]
