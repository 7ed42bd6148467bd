"""
Pydantic schemas for account operations.
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class AccountCreate(BaseModel):
    """Request to create an account."""
    name: str = Field(min_length=1, max_length=100)
    currency: str = Field(min_length=3, max_length=3)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, value: str) -> str:
        if not value.isalpha():
            raise ValueError("currency must be a 3-letter code")
        return value.upper()


class AccountResponse(BaseModel):
    id: int
    name: str
    currency: str
    is_archived: bool
    archived_at: datetime | None
    created_at: datetime

    model_config = {"from_attributes": True}
