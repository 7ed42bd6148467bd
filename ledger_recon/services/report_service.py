"""
Report service — the reconciliation report.

Two stages, strictly in this order:
1. Build the full ledger (aggregate, convert, sort, summarize,
   running balances) for the date range, account and type filter
2. Search and page over that finished list

Nothing in stage 2 can change a total or a running balance, so
every page of every search shows the same numbers for the same row.
"""

import math
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy.orm import Session

from ledger_recon.config import get_settings
from ledger_recon.schemas.ledger import (
    LedgerEntry,
    LedgerEntryResponse,
    LedgerQuery,
    SourceWarning,
)
from ledger_recon.schemas.report import DetailedTransactionsResponse
from ledger_recon.services.exceptions import ValidationError
from ledger_recon.services.ledger_service import LedgerService, effective_reset_date
from ledger_recon.services.statement_service import running_balances


def searchable_text(entry: LedgerEntry) -> str:
    return " ".join((
        entry.type_label,
        entry.category.value,
        entry.account_name,
        entry.description,
        entry.remarks,
        entry.reference,
        entry.actor,
    )).casefold()


def search_rows(
    rows: list[tuple[LedgerEntry, Decimal | None]], term: str | None
) -> list[tuple[LedgerEntry, Decimal | None]]:
    """Case-insensitive substring match; keeps the incoming order."""
    if term is None or not term.strip():
        return rows
    needle = term.strip().casefold()
    return [row for row in rows if needle in searchable_text(row[0])]


def paginate(items: list, page: int, page_size: int) -> list:
    """Slice one page (1-based) out of an already ordered list."""
    if page < 1:
        raise ValidationError("page must be 1 or greater")
    if page_size < 1:
        raise ValidationError("page_size must be 1 or greater")
    start = (page - 1) * page_size
    return items[start:start + page_size]


class ReportService:

    def __init__(self, db: Session, ledger_service: LedgerService | None = None):
        self.db = db
        self.ledger_service = ledger_service or LedgerService(db)
        self.settings = get_settings()

    def get_detailed_transactions(
        self,
        from_date: date | None,
        to_date: date | None,
        account_id: int | None = None,
        type_filter: str | None = None,
        reset_date: date | None = None,
        search: str | None = None,
        page: int = 1,
        page_size: int | None = None,
    ) -> DetailedTransactionsResponse:
        """
        The detailed transactions report.

        The summary reflects the type-filtered subset the caller
        asked for. For one account it is in that account's currency;
        across accounts every amount is converted into the base
        currency. Running balances are only meaningful for a single
        account and are left empty otherwise. They run over the
        type-filtered stream and carry its balance from the reset date
        into the window.
        """
        page_size = page_size or self.settings.DEFAULT_PAGE_SIZE
        if page_size > self.settings.MAX_PAGE_SIZE:
            raise ValidationError(
                f"page_size must not exceed {self.settings.MAX_PAGE_SIZE}"
            )
        if page < 1 or page_size < 1:
            raise ValidationError("page and page_size must be 1 or greater")

        # --- Stage 1: full ledger ---
        floor = effective_reset_date(reset_date)
        result = self.ledger_service.build_ledger(LedgerQuery(
            reset_date=floor,
            from_date=from_date,
            to_date=to_date,
            account_id=account_id,
            type_filter=type_filter,
        ))
        summary = result.summary
        warnings = list(result.warnings)
        if account_id is not None:
            opening, opening_warnings = self._opening_balance(
                account_id, floor, from_date, type_filter
            )
            warnings.extend(opening_warnings)
            running = running_balances(result.entries, opening)
        else:
            ledger = self.ledger_service
            summary, summary_warnings = ledger.summarize_in_currency(
                result.entries,
                self.settings.BASE_CURRENCY,
                result.summary.from_date,
                to_date,
            )
            warnings.extend(summary_warnings)
            running = [None] * len(result.entries)
        rows = list(zip(result.entries, running))

        # --- Stage 2: search and page ---
        matched = search_rows(rows, search)
        total_count = len(matched)
        page_rows = paginate(matched, page, page_size)

        return DetailedTransactionsResponse(
            transactions=[
                LedgerEntryResponse.from_entry(entry, running_balance=value)
                for entry, value in page_rows
            ],
            summary=summary,
            total_count=total_count,
            page=page,
            page_size=page_size,
            total_pages=math.ceil(total_count / page_size) if total_count else 0,
            degraded=bool(warnings),
            warnings=warnings,
        )

    def _opening_balance(
        self,
        account_id: int,
        floor: date,
        from_date: date | None,
        type_filter: str | None,
    ) -> tuple[Decimal, list[SourceWarning]]:
        """
        Balance carried into the window from the reset date.

        Its warnings belong to the report: a source missing here
        shifts every running balance on the page.
        """
        if from_date is None or from_date <= floor:
            return Decimal("0"), []
        result = self.ledger_service.build_ledger(LedgerQuery(
            reset_date=floor,
            to_date=from_date - timedelta(days=1),
            account_id=account_id,
            type_filter=type_filter,
        ))
        return result.summary.net_balance, result.warnings
