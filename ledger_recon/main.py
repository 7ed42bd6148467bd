"""
Account Ledger Reconciliation — FastAPI Application.

This is the entry point for the application.
All routers are registered here.
"""

import logging

from fastapi import FastAPI

from ledger_recon.config import get_settings
from ledger_recon.logging import setup_logging
from ledger_recon.api.accounts import router as accounts_router
from ledger_recon.api.closing import router as closing_router
from ledger_recon.api.health import router as health_router
from ledger_recon.api.rates import router as rates_router
from ledger_recon.api.reports import router as reports_router
from ledger_recon.api.transactions import router as transactions_router

settings = get_settings()
setup_logging(settings.LOG_LEVEL)

logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description=(
        "Aggregates transactions from every source into one ledger: "
        "reports, statements and closing-day snapshots"
    ),
)

# Register routers
app.include_router(health_router)
app.include_router(accounts_router)
app.include_router(transactions_router)
app.include_router(rates_router)
app.include_router(reports_router)
app.include_router(closing_router)

logger.info(
    f"{settings.APP_NAME} {settings.APP_VERSION} ({settings.ENVIRONMENT}): "
    f"reset date {settings.PERMANENT_RESET_DATE}, "
    f"base currency {settings.BASE_CURRENCY}"
)
