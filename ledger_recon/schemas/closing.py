"""
Pydantic schemas for closing-day runs.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field, model_validator

from ledger_recon.models.enums import ClosingStatus


class CloseDayRequest(BaseModel):
    """
    Request to close a day.

    Re-closing a date that is already closed needs override=True
    and a reason; the reason goes to the audit log.
    """
    close_date: date
    reset_date: date | None = None
    override: bool = False
    override_reason: str | None = Field(default=None, max_length=255)
    requested_by: str = Field(default="system", min_length=1, max_length=100)

    @model_validator(mode="after")
    def check_override_reason(self):
        if self.override and not (self.override_reason or "").strip():
            raise ValueError("override requires a non-empty override_reason")
        return self


class SnapshotResponse(BaseModel):
    account_id: int
    close_date: date
    revision: int
    currency: str
    total_credits: Decimal
    total_debits: Decimal
    balance: Decimal
    entry_count: int

    model_config = {"from_attributes": True}


class ClosingRunResponse(BaseModel):
    id: int
    close_date: date
    reset_date: date
    revision: int
    status: ClosingStatus
    read_as_of: datetime
    is_override: bool
    override_reason: str | None
    requested_by: str
    error_message: str | None
    notification_error: str | None
    created_at: datetime
    persisted_at: datetime | None
    notified_at: datetime | None
    snapshots: list[SnapshotResponse] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class ClosingStatementResponse(BaseModel):
    """
    The aggregated statement of a closed day.

    Holds every account's totals as persisted in the snapshots.
    This is what the notifier receives.
    """
    run_id: int
    close_date: date
    reset_date: date
    revision: int
    status: ClosingStatus
    account_count: int
    snapshots: list[SnapshotResponse]
