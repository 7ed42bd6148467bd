"""Business logic services."""

from ledger_recon.services.account_service import AccountService
from ledger_recon.services.closing_service import ClosingService
from ledger_recon.services.currency_service import CurrencyNormalizer, CurrencyService
from ledger_recon.services.ledger_service import LedgerService
from ledger_recon.services.report_service import ReportService
from ledger_recon.services.source_validation_service import SourceValidationService
from ledger_recon.services.statement_service import StatementService
from ledger_recon.services.transaction_service import TransactionService

__all__ = [
    "AccountService",
    "ClosingService",
    "CurrencyNormalizer",
    "CurrencyService",
    "LedgerService",
    "ReportService",
    "SourceValidationService",
    "StatementService",
    "TransactionService",
]
