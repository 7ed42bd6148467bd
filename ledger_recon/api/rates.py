"""
Exchange rate API endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ledger_recon.models.base import get_db
from ledger_recon.schemas.rates import ExchangeRateCreate, ExchangeRateResponse
from ledger_recon.services.currency_service import CurrencyService

router = APIRouter(prefix="/rates", tags=["Rates"])


@router.post("", response_model=ExchangeRateResponse, status_code=201)
def record_rate(
    request: ExchangeRateCreate,
    db: Session = Depends(get_db),
):
    """
    Record an exchange rate: units of the base currency per one
    unit of `currency`, effective from `as_of`.
    """
    service = CurrencyService(db)
    try:
        rate = service.record_rate(request)
        db.commit()
        return rate
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))


@router.get("", response_model=list[ExchangeRateResponse])
def list_rates(
    currency: str | None = None,
    db: Session = Depends(get_db),
):
    """List recorded rates, newest first."""
    return CurrencyService(db).list_rates(currency)
