"""
Transaction API endpoints.

The service commits each posting while it holds the account locks,
so these routes only roll back on error.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ledger_recon.models.base import get_db
from ledger_recon.services.exceptions import AccountNotFound
from ledger_recon.services.transaction_service import TransactionService
from ledger_recon.schemas.transaction import (
    DepositRequest,
    DepositResponse,
    WithdrawalRequest,
    WithdrawalResponse,
    TransferRequest,
    TransferResponse,
)

router = APIRouter(prefix="/transactions", tags=["Transactions"])


@router.post("/deposit", response_model=DepositResponse, status_code=201)
def deposit(
    request: DepositRequest,
    db: Session = Depends(get_db),
):
    """Deposit money into an account."""
    service = TransactionService(db)
    try:
        record = service.deposit(request)
        return record
    except AccountNotFound as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/withdraw", response_model=WithdrawalResponse, status_code=201)
def withdraw(
    request: WithdrawalRequest,
    db: Session = Depends(get_db),
):
    """Withdraw money from an account."""
    service = TransactionService(db)
    try:
        record = service.withdraw(request)
        return record
    except AccountNotFound as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/transfer", response_model=TransferResponse, status_code=201)
def transfer(
    request: TransferRequest,
    db: Session = Depends(get_db),
):
    """Transfer money between two accounts."""
    service = TransactionService(db)
    try:
        record = service.transfer(request)
        return record
    except AccountNotFound as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
