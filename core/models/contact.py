# =============================================================================
# core/models/contact.py - Contact Schemas
# =============================================================================
# Saved recipients. The voice parser also uses contacts to fill in a phone
# number when the user only says a name ("call Mom at 9").
# =============================================================================

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from .reminder import validate_phone_number


class ContactCreate(BaseModel):
    """
    Schema for creating a contact.

    Example:
        {"name": "Mom", "phone_number": "+447700900123", "relationship": "Mother"}
    """

    name: str = Field(..., min_length=1, max_length=100)
    phone_number: str = Field(..., description="E.164 phone number")
    relationship: str | None = Field(default=None, max_length=50)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be blank")
        return v

    @field_validator("phone_number")
    @classmethod
    def check_phone_number(cls, v: str) -> str:
        return validate_phone_number(v)


class ContactUpdate(BaseModel):
    """Schema for updating a contact. Only provided fields change."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    phone_number: str | None = None
    relationship: str | None = Field(default=None, max_length=50)

    @field_validator("phone_number")
    @classmethod
    def check_phone_number(cls, v: str | None) -> str | None:
        return validate_phone_number(v) if v is not None else None


class ContactResponse(BaseModel):
    id: UUID
    user_id: UUID
    name: str
    phone_number: str
    relationship: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class ContactList(BaseModel):
    contacts: list[ContactResponse] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)
