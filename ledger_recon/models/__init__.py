"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from ledger_recon.models.base import Base
from ledger_recon.models.enums import (
    EntryType,
    SourceCategory,
    TransferLeg,
    ResidencePaymentKind,
    OperationalDepartment,
    ChequeType,
    ChequeStatus,
    ClosingStatus,
    BalanceStatus,
)
from ledger_recon.models.audit_log import AuditLog
from ledger_recon.models.account import Account
from ledger_recon.models.exchange_rate import ExchangeRate
from ledger_recon.models.sources import (
    Deposit,
    Withdrawal,
    Transfer,
    CustomerPayment,
    SupplierPayment,
    Expense,
    Loan,
    Salary,
    Refund,
    Cheque,
    ResidencePayment,
    OperationalCharge,
)
from ledger_recon.models.closing import ClosingRun, ClosingSnapshot

__all__ = [
    "Base",
    "EntryType",
    "SourceCategory",
    "TransferLeg",
    "ResidencePaymentKind",
    "OperationalDepartment",
    "ChequeType",
    "ChequeStatus",
    "ClosingStatus",
    "BalanceStatus",
    "AuditLog",
    "Account",
    "ExchangeRate",
    "Deposit",
    "Withdrawal",
    "Transfer",
    "CustomerPayment",
    "SupplierPayment",
    "Expense",
    "Loan",
    "Salary",
    "Refund",
    "Cheque",
    "ResidencePayment",
    "OperationalCharge",
    "ClosingRun",
    "ClosingSnapshot",
]
