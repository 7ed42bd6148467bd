"""
Reporting API endpoints.

Reports are best effort: when a source fails they still answer,
with `degraded` set and a warning per failure, so the UI can show
a banner instead of an error page.
"""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ledger_recon.models.base import get_db
from ledger_recon.schemas.report import (
    AccountBalancesResponse,
    DetailedTransactionsResponse,
    SourceValidationReport,
)
from ledger_recon.services.exceptions import AccountNotFound
from ledger_recon.services.report_service import ReportService
from ledger_recon.services.source_validation_service import SourceValidationService
from ledger_recon.services.statement_service import StatementService

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/transactions", response_model=DetailedTransactionsResponse)
def get_detailed_transactions(
    from_date: date | None = None,
    to_date: date | None = None,
    account_id: int | None = None,
    type_filter: str | None = Query(
        default=None,
        alias="type",
        description="credit, debit, transfer, a category or a subcategory",
    ),
    reset_date: date | None = None,
    search: str | None = None,
    page: int = Query(default=1, ge=1),
    page_size: int | None = Query(default=None, ge=1),
    db: Session = Depends(get_db),
):
    """
    Detailed transactions across every source, one page at a time.

    The summary covers every row matching the dates, account and
    type, whatever the page or search term.
    """
    service = ReportService(db)
    try:
        return service.get_detailed_transactions(
            from_date,
            to_date,
            account_id=account_id,
            type_filter=type_filter,
            reset_date=reset_date,
            search=search,
            page=page,
            page_size=page_size,
        )
    except AccountNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/balances", response_model=AccountBalancesResponse)
def get_account_balances(
    reset_date: date | None = None,
    db: Session = Depends(get_db),
):
    """Current balance of every account, archived ones included."""
    service = StatementService(db)
    try:
        return service.get_account_balances(reset_date)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/sources", response_model=SourceValidationReport)
def validate_sources(db: Session = Depends(get_db)):
    """Check that every source table exists with the columns it needs."""
    return SourceValidationService(db).validate()
