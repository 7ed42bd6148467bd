"""
Ledger schemas.

SourceEntry is what an adapter produces from one source row:
a direction and an amount in the row's own currency. LedgerEntry
is the normalized form every layer above the aggregator works
with: one of credit/debit set, in the account's ledger currency.
"""

from datetime import date, datetime, time, timedelta
from decimal import Decimal

from pydantic import BaseModel, Field, model_validator

from ledger_recon.models.enums import CATEGORY_RANK, EntryType, SourceCategory

ZERO = Decimal("0")


class SourceEntry(BaseModel):
    """One adapter output row, before currency conversion."""
    account_id: int
    timestamp: datetime
    category: SourceCategory
    subcategory: str | None = None
    direction: EntryType
    original_amount: Decimal = Field(gt=0)
    original_currency: str = Field(min_length=3, max_length=3)
    description: str = ""
    reference: str = ""
    actor: str = ""
    remarks: str = ""
    # Primary key of the source row and position within the row
    # (a transfer row expands into up to three entries).
    source_id: int
    sub_index: int = 0


class LedgerEntry(BaseModel):
    """A normalized credit or debit against one account."""
    account_id: int
    account_name: str
    timestamp: datetime
    category: SourceCategory
    subcategory: str | None = None
    credit: Decimal = ZERO
    debit: Decimal = ZERO
    original_amount: Decimal
    original_currency: str
    converted_amount: Decimal
    ledger_currency: str
    description: str = ""
    reference: str = ""
    actor: str = ""
    remarks: str = ""
    source_id: int
    sub_index: int = 0

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def exactly_one_side(self) -> "LedgerEntry":
        if self.credit < 0 or self.debit < 0:
            raise ValueError("credit and debit must not be negative")
        if (self.credit != ZERO) == (self.debit != ZERO):
            raise ValueError(
                "exactly one of credit and debit must be non-zero"
            )
        return self

    @property
    def is_transfer(self) -> bool:
        return self.category == SourceCategory.TRANSFER

    @property
    def amount(self) -> Decimal:
        return self.credit if self.credit != ZERO else self.debit

    @property
    def type_category(self) -> str:
        """credit / debit / transfer, as the report colours rows."""
        if self.is_transfer:
            return "transfer"
        return "credit" if self.credit != ZERO else "debit"

    @property
    def type_label(self) -> str:
        return self.subcategory or self.category.value

    @property
    def sort_key(self) -> tuple:
        return (
            self.timestamp,
            CATEGORY_RANK[self.category],
            self.source_id,
            self.sub_index,
            self.account_id,
        )


class LedgerQuery(BaseModel):
    """
    Which slice of the ledger to build.

    `reset_date` is always applied as a floor on top of `from_date`.
    `read_as_of` excludes source rows recorded after that instant;
    closing runs use it so every account is read at the same cut.
    """
    reset_date: date
    from_date: date | None = None
    to_date: date | None = None
    account_id: int | None = None
    type_filter: str | None = None
    read_as_of: datetime | None = None

    @property
    def floor_date(self) -> date:
        if self.from_date is None:
            return self.reset_date
        return max(self.from_date, self.reset_date)

    @property
    def start(self) -> datetime:
        return datetime.combine(self.floor_date, time.min)

    @property
    def end(self) -> datetime | None:
        """Exclusive upper bound: midnight after to_date."""
        if self.to_date is None:
            return None
        return datetime.combine(self.to_date + timedelta(days=1), time.min)


class BalanceSummary(BaseModel):
    """
    Totals over a set of entries, all in `currency`.

    For one account that is its ledger currency. Across several
    accounts every amount is converted into the base currency.
    """
    account_id: int | None = None
    currency: str | None = None
    from_date: date
    to_date: date | None = None
    total_credits: Decimal = ZERO
    total_debits: Decimal = ZERO
    total_transfers: Decimal = ZERO
    net_balance: Decimal = ZERO
    entry_count: int = 0


class SourceWarning(BaseModel):
    """Why a report is degraded: shown as a banner by the UI."""
    source: str
    account_id: int | None = None
    on_date: date | None = None
    message: str


class LedgerResult(BaseModel):
    entries: list[LedgerEntry]
    summary: BalanceSummary
    degraded: bool = False
    warnings: list[SourceWarning] = Field(default_factory=list)


# --- Response Schemas ---

class LedgerEntryResponse(BaseModel):
    """One row of a report or statement."""
    date: datetime
    account_id: int
    account: str
    transaction_type: str
    type_category: str
    category: SourceCategory
    subcategory: str | None
    description: str
    reference: str
    credit: Decimal
    debit: Decimal
    currency: str
    original_amount: Decimal
    original_currency: str
    staff_name: str
    remarks: str
    running_balance: Decimal | None = None

    @classmethod
    def from_entry(
        cls, entry: LedgerEntry, running_balance: Decimal | None = None
    ) -> "LedgerEntryResponse":
        return cls(
            date=entry.timestamp,
            account_id=entry.account_id,
            account=entry.account_name,
            transaction_type=entry.type_label,
            type_category=entry.type_category,
            category=entry.category,
            subcategory=entry.subcategory,
            description=entry.description,
            reference=entry.reference,
            credit=entry.credit,
            debit=entry.debit,
            currency=entry.ledger_currency,
            original_amount=entry.original_amount,
            original_currency=entry.original_currency,
            staff_name=entry.actor,
            remarks=entry.remarks,
            running_balance=running_balance,
        )
