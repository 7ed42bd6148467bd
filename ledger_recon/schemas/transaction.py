"""
Pydantic schemas for posting deposits, withdrawals and transfers.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator, model_validator


class DepositRequest(BaseModel):
    account_id: int
    amount: Decimal = Field(gt=0, decimal_places=4)
    currency: str = Field(min_length=3, max_length=3)
    remarks: str = Field(min_length=1, max_length=255)
    posted_by: str = Field(min_length=1, max_length=100)
    posted_at: datetime | None = None

    @field_validator("currency")
    @classmethod
    def upper_currency(cls, value: str) -> str:
        return value.upper()


class WithdrawalRequest(DepositRequest):
    pass


class TransferRequest(BaseModel):
    """
    Move money between two accounts.

    `amount` is taken from the source account in its currency; the
    destination is credited amount * exchange_rate. The amount is
    entered twice to catch typing mistakes.
    """
    from_account_id: int
    to_account_id: int
    amount: Decimal = Field(gt=0, decimal_places=4)
    amount_confirm: Decimal = Field(gt=0, decimal_places=4)
    charges: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=4)
    exchange_rate: Decimal = Field(default=Decimal("1"), gt=0, decimal_places=6)
    trx: str = Field(default="", max_length=100)
    remarks: str = Field(default="", max_length=255)
    posted_by: str = Field(min_length=1, max_length=100)
    posted_at: datetime | None = None

    @model_validator(mode="after")
    def check_transfer(self):
        if self.from_account_id == self.to_account_id:
            raise ValueError("Cannot transfer to the same account")
        if self.amount != self.amount_confirm:
            raise ValueError("amount and amount_confirm do not match")
        return self


class DepositResponse(BaseModel):
    deposit_id: int
    account_id: int
    deposit_amount: Decimal
    currency: str
    deposit_date: datetime
    deposit_by: str
    remarks: str
    recorded_at: datetime

    model_config = {"from_attributes": True}


class WithdrawalResponse(BaseModel):
    withdrawal_id: int
    account_id: int
    withdrawal_amount: Decimal
    currency: str
    withdrawal_date: datetime
    withdrawal_by: str
    remarks: str
    recorded_at: datetime

    model_config = {"from_attributes": True}


class TransferResponse(BaseModel):
    id: int
    from_account: int
    to_account: int
    amount: Decimal
    charges: Decimal
    exchange_rate: Decimal
    transfer_date: datetime
    trx: str
    remarks: str
    added_by: str
    recorded_at: datetime

    model_config = {"from_attributes": True}
