"""
Account API endpoints: accounts, balances and statements.
"""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ledger_recon.models.base import get_db
from ledger_recon.schemas.account import AccountCreate, AccountResponse
from ledger_recon.schemas.report import AccountBalanceRow, StatementResponse
from ledger_recon.services.account_service import AccountService
from ledger_recon.services.exceptions import AccountNotFound, StatementAborted
from ledger_recon.services.statement_service import StatementService

router = APIRouter(prefix="/accounts", tags=["Accounts"])


@router.post("", response_model=AccountResponse, status_code=201)
def create_account(
    request: AccountCreate,
    db: Session = Depends(get_db),
):
    """Create a new account."""
    service = AccountService(db)
    try:
        account = service.create_account(request)
        db.commit()
        return account
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))


@router.get("", response_model=list[AccountResponse])
def list_accounts(
    include_archived: bool = False,
    db: Session = Depends(get_db),
):
    """List accounts, active ones only unless include_archived is set."""
    return AccountService(db).list_accounts(include_archived)


@router.get("/{account_id}", response_model=AccountResponse)
def get_account(
    account_id: int,
    db: Session = Depends(get_db),
):
    """Get account details."""
    service = AccountService(db)
    try:
        return service.get_account(account_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/{account_id}/archive", response_model=AccountResponse)
def archive_account(
    account_id: int,
    db: Session = Depends(get_db),
):
    """
    Archive an account.

    The account keeps its history and stays in balances and
    closings, but takes no new postings.
    """
    service = AccountService(db)
    try:
        account = service.archive_account(account_id)
        db.commit()
        return account
    except AccountNotFound as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/{account_id}/balance", response_model=AccountBalanceRow)
def get_account_balance(
    account_id: int,
    reset_date: date | None = None,
    db: Session = Depends(get_db),
):
    """Get account balance derived from the source records."""
    service = StatementService(db)
    try:
        return service.get_account_balance(account_id, reset_date)
    except AccountNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/{account_id}/statement", response_model=StatementResponse)
def get_account_statement(
    account_id: int,
    to_date: date | None = None,
    reset_date: date | None = None,
    db: Session = Depends(get_db),
):
    """
    Account statement from the reset date through to_date (today
    by default), with a running balance on every row.

    Refused with 422 rather than shown incomplete when a source or
    an exchange rate is missing.
    """
    service = StatementService(db)
    try:
        return service.compute_statement(
            account_id, to_date or date.today(), reset_date=reset_date
        )
    except AccountNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StatementAborted as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
