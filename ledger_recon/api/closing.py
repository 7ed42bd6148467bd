"""
Closing-day API endpoints.
"""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ledger_recon.models.base import get_db
from ledger_recon.schemas.closing import (
    CloseDayRequest,
    ClosingRunResponse,
    ClosingStatementResponse,
)
from ledger_recon.services.closing_service import ClosingService
from ledger_recon.services.exceptions import (
    ClosingNotFound,
    SnapshotConflict,
    StatementAborted,
)

router = APIRouter(prefix="/closing", tags=["Closing"])


@router.post("", response_model=ClosingStatementResponse, status_code=201)
def close_day(
    request: CloseDayRequest,
    db: Session = Depends(get_db),
):
    """
    Close a day: snapshot every account and email the statement.

    A date that is already closed is refused with 409 unless the
    request sets override with a reason. A statement that cannot
    be computed completely is refused with 422; the run is kept
    as FAILED.
    """
    service = ClosingService(db)
    try:
        return service.close_day_and_email(
            request.close_date,
            reset_date=request.reset_date,
            override=request.override,
            override_reason=request.override_reason,
            requested_by=request.requested_by,
        )
    except SnapshotConflict as e:
        raise HTTPException(status_code=409, detail=str(e))
    except StatementAborted as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/{close_date}", response_model=ClosingRunResponse)
def get_closing(
    close_date: date,
    db: Session = Depends(get_db),
):
    """Latest closing run for a date, with its snapshots."""
    service = ClosingService(db)
    try:
        return service.get_closing(close_date)
    except ClosingNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
