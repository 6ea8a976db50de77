"""Event payloads published by userservice."""

from datetime import datetime
from pydantic import BaseModel, Field, field_serializer, field_validator

EVENT_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class UserEmailUpdatedEvent(BaseModel):
    """Emitted after a user's email address has changed."""

    user_id: int = Field(..., alias="userId")
    old_email: str = Field(..., alias="oldEmail")
    new_email: str = Field(..., alias="newEmail")
    updated_at: datetime = Field(default_factory=datetime.utcnow, alias="updatedAt")

    class Config:
        """Pydantic configuration."""
        populate_by_name = True

    @field_validator("old_email", "new_email")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("email cannot be blank")
        return value

    @field_validator("updated_at", mode="before")
    @classmethod
    def _parse_timestamp(cls, value):
        if isinstance(value, str):
            try:
                return datetime.strptime(value, EVENT_TIMESTAMP_FORMAT)
            except ValueError:
                return value
        return value

    @field_serializer("updated_at")
    def _format_timestamp(self, value: datetime) -> str:
        return value.strftime(EVENT_TIMESTAMP_FORMAT)
