"""User data models for userservice."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class User(BaseModel):
    """Canonical User model (one row of the users table)."""

    id: Optional[int] = Field(None, description="Generated user identifier (null until persisted)")
    email: str = Field(..., description="User email address (unique, case-insensitive)")
    first_name: str = Field(..., description="Given name")
    last_name: str = Field(..., description="Family name")
    phone_number: str = Field(..., description="Phone number as entered")
    created_on: Optional[datetime] = Field(None, description="Creation timestamp (system-set)")
    updated_on: Optional[datetime] = Field(None, description="Last update timestamp (system-set)")
    version: int = Field(0, description="Optimistic-concurrency token, incremented on every update")


class UserRequest(BaseModel):
    """Create/update payload for a user."""

    email: str = Field(..., alias="email")
    first_name: str = Field(..., alias="firstName")
    last_name: str = Field(..., alias="lastName")
    phone_number: str = Field(..., alias="phoneNumber")

    class Config:
        """Pydantic configuration."""
        populate_by_name = True

    @field_validator("email", "first_name", "last_name", "phone_number")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("must not be blank")
        return value.strip()


class UserRecord(BaseModel):
    """Outward-facing view of a user (no version token)."""

    id: int
    email: str
    first_name: str = Field(..., alias="firstName")
    last_name: str = Field(..., alias="lastName")
    phone_number: str = Field(..., alias="phoneNumber")
    created_on: Optional[datetime] = Field(None, alias="createdOn")
    updated_on: Optional[datetime] = Field(None, alias="updatedOn")

    class Config:
        """Pydantic configuration."""
        populate_by_name = True
