"""
Pydantic schemas for exchange rates.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class ExchangeRateCreate(BaseModel):
    currency: str = Field(min_length=3, max_length=3)
    as_of: date
    rate: Decimal = Field(gt=0, decimal_places=6)


class ExchangeRateResponse(BaseModel):
    id: int
    currency: str
    as_of: date
    rate: Decimal
    created_at: datetime

    model_config = {"from_attributes": True}
