"""
Shared enumerations for database models and schemas.

Using Python enums mapped to database enums ensures that
only valid values can be stored.
"""

import enum


class EntryType(str, enum.Enum):
    """Direction of a ledger entry."""
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"


class SourceCategory(str, enum.Enum):
    """
    Transaction categories that feed the ledger.

    Declaration order is the tie-break rank used when two
    entries share a timestamp.
    """
    DEPOSIT = "deposit"
    CUSTOMER_PAYMENT = "customer_payment"
    RESIDENCE_PAYMENT = "residence_payment"
    TRANSFER = "transfer"
    CHEQUE = "cheque"
    WITHDRAWAL = "withdrawal"
    EXPENSE = "expense"
    LOAN = "loan"
    SUPPLIER_PAYMENT = "supplier_payment"
    SALARY = "salary"
    REFUND = "refund"
    OPERATIONAL_CHARGE = "operational_charge"


CATEGORY_RANK: dict[SourceCategory, int] = {
    category: rank for rank, category in enumerate(SourceCategory)
}


class TransferLeg(str, enum.Enum):
    """Subcategories a single transfer row expands into."""
    TRANSFER_OUT = "transfer_out"
    TRANSFER_IN = "transfer_in"
    TRANSFER_CHARGES = "transfer_charges"


class ResidencePaymentKind(str, enum.Enum):
    TAWJEEH_PAYMENT = "tawjeeh_payment"
    INSURANCE_PAYMENT = "insurance_payment"
    RESIDENCE_FINE = "residence_fine"
    CANCELLATION = "cancellation"


class OperationalDepartment(str, enum.Enum):
    TAWJEEH_OPERATION = "tawjeeh_operation"
    ILOE_OPERATION = "iloe_operation"
    EVISA_CHARGE = "evisa_charge"
    AMER_TRANSACTION = "amer_transaction"
    TASHEEL_TRANSACTION = "tasheel_transaction"
    CANCELLATION_TRANSACTION = "cancellation_transaction"


class ChequeType(str, enum.Enum):
    PAYABLE = "payable"
    RECEIVABLE = "receivable"


class ChequeStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"


class ClosingStatus(str, enum.Enum):
    """Lifecycle of one closing-day run."""
    REQUESTED = "REQUESTED"
    COMPUTING = "COMPUTING"
    PERSISTED = "PERSISTED"
    NOTIFIED = "NOTIFIED"
    NOTIFICATION_FAILED = "NOTIFICATION_FAILED"
    FAILED = "FAILED"


class BalanceStatus(str, enum.Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    ZERO = "zero"
