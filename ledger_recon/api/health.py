"""
Health check endpoint.

Used by load balancers, monitoring systems, and humans
to verify the application is running and responsive.
"""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from ledger_recon.config import get_settings
from ledger_recon.models.base import get_db

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(db: Session = Depends(get_db)):
    """
    Return application health status including database connectivity.

    Also reports the configured reset date and base currency, the
    two settings every balance depends on.
    """
    try:
        db.execute(text("SELECT 1"))
        db_status = "healthy"
    except Exception:
        db_status = "unhealthy"

    settings = get_settings()
    return {
        "status": "healthy" if db_status == "healthy" else "degraded",
        "service": "ledger-recon",
        "database": db_status,
        "reset_date": settings.PERMANENT_RESET_DATE.isoformat(),
        "base_currency": settings.BASE_CURRENCY,
    }
