"""
Pydantic schemas for reports, statements and balances.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from ledger_recon.models.enums import BalanceStatus
from ledger_recon.schemas.ledger import (
    BalanceSummary,
    LedgerEntryResponse,
    SourceWarning,
)


class DetailedTransactionsResponse(BaseModel):
    """
    One page of the reconciliation report.

    `summary` covers every entry matching the date range, account
    and type filter. Search and paging never change it. Without an
    account filter its amounts are in the base currency.
    """
    transactions: list[LedgerEntryResponse]
    summary: BalanceSummary
    total_count: int
    page: int
    page_size: int
    total_pages: int
    degraded: bool = False
    warnings: list[SourceWarning] = Field(default_factory=list)


class AccountBalanceRow(BaseModel):
    account_id: int
    account_name: str
    currency: str
    total_credits: Decimal
    total_debits: Decimal
    balance: Decimal
    status: BalanceStatus
    is_archived: bool = False


class AccountBalancesResponse(BaseModel):
    reset_date: date
    balances: list[AccountBalanceRow]
    degraded: bool = False
    warnings: list[SourceWarning] = Field(default_factory=list)


class StatementResponse(BaseModel):
    """Account statement from the reset date through to_date."""
    account_id: int
    account_name: str
    currency: str
    from_date: date
    to_date: date
    total_credits: Decimal
    total_debits: Decimal
    balance: Decimal
    transactions: list[LedgerEntryResponse]


class SourceTableStatus(BaseModel):
    table: str
    type: str
    error: str | None = None
    missing_columns: list[str] = Field(default_factory=list)


class SourceValidationReport(BaseModel):
    total_expected: int
    total_valid: int
    valid_tables: list[SourceTableStatus]
    missing_tables: list[SourceTableStatus]
    invalid_tables: list[SourceTableStatus]
