"""
Server entry point.

Usage:
    python -m ledger_recon
"""

import uvicorn

from ledger_recon.config import get_settings

if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "ledger_recon.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
