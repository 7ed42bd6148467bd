"""
Source record models.

Each table belongs to the workflow that posts it (cash desk,
payroll, residence processing, ...). Column names differ from
table to table on purpose: they mirror how each workflow stores
its own records. The source adapters are the only code that knows
these shapes; everything above them sees LedgerEntry.

Rows are append-only. `recorded_at` is the moment a row was posted
and is what a closing run uses as its consistent read cut-off.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    String, DateTime, Numeric, ForeignKey,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column

from ledger_recon.models.base import Base
from ledger_recon.models.enums import (
    ChequeStatus,
    ChequeType,
    OperationalDepartment,
    ResidencePaymentKind,
)


class Deposit(Base):
    __tablename__ = "deposits"

    deposit_id: Mapped[int] = mapped_column(primary_key=True)
    account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id"), nullable=False, index=True
    )
    deposit_amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False
    )
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    deposit_date: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, index=True
    )
    deposit_by: Mapped[str] = mapped_column(String(100), nullable=False)
    remarks: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )


class Withdrawal(Base):
    __tablename__ = "withdrawals"

    withdrawal_id: Mapped[int] = mapped_column(primary_key=True)
    account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id"), nullable=False, index=True
    )
    withdrawal_amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False
    )
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    withdrawal_date: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, index=True
    )
    withdrawal_by: Mapped[str] = mapped_column(String(100), nullable=False)
    remarks: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )


class Transfer(Base):
    """
    Money moved between two accounts.

    `amount` is in the source account's currency; the destination
    receives amount * exchange_rate in its own currency. Charges are
    taken from the source account on top of the amount.
    """

    __tablename__ = "transfers"

    id: Mapped[int] = mapped_column(primary_key=True)
    from_account: Mapped[int] = mapped_column(
        ForeignKey("accounts.id"), nullable=False, index=True
    )
    to_account: Mapped[int] = mapped_column(
        ForeignKey("accounts.id"), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(19, 4), nullable=False)
    charges: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    exchange_rate: Mapped[Decimal] = mapped_column(
        Numeric(19, 6), nullable=False, default=Decimal("1")
    )
    transfer_date: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, index=True
    )
    trx: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    remarks: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    added_by: Mapped[str] = mapped_column(String(100), nullable=False)
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )


class CustomerPayment(Base):
    __tablename__ = "customer_payments"

    pay_id: Mapped[int] = mapped_column(primary_key=True)
    customer_name: Mapped[str] = mapped_column(String(150), nullable=False)
    payment_amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False
    )
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    paid_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, index=True
    )
    account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id"), nullable=False, index=True
    )
    staff_name: Mapped[str] = mapped_column(String(100), nullable=False)
    remarks: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )


class SupplierPayment(Base):
    __tablename__ = "supplier_payments"

    payment_id: Mapped[int] = mapped_column(primary_key=True)
    supplier_name: Mapped[str] = mapped_column(String(150), nullable=False)
    payment_amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False
    )
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    time_creation: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, index=True
    )
    account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id"), nullable=False, index=True
    )
    payment_detail: Mapped[str] = mapped_column(
        String(255), nullable=False, default=""
    )
    staff_name: Mapped[str] = mapped_column(String(100), nullable=False)
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )


class Expense(Base):
    __tablename__ = "expenses"

    expense_id: Mapped[int] = mapped_column(primary_key=True)
    expense_type: Mapped[str] = mapped_column(String(100), nullable=False)
    expense_amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False
    )
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    time_creation: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, index=True
    )
    account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id"), nullable=False, index=True
    )
    expense_remark: Mapped[str] = mapped_column(
        String(255), nullable=False, default=""
    )
    staff_name: Mapped[str] = mapped_column(String(100), nullable=False)
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )


class Loan(Base):
    """Money lent out to a customer from an account."""

    __tablename__ = "loans"

    loan_id: Mapped[int] = mapped_column(primary_key=True)
    customer_name: Mapped[str] = mapped_column(String(150), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(19, 4), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    loan_date: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, index=True
    )
    account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id"), nullable=False, index=True
    )
    remarks: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    staff_name: Mapped[str] = mapped_column(String(100), nullable=False)
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )


class Salary(Base):
    """Payroll payment. Always paid in the account's own currency."""

    __tablename__ = "salaries"

    salary_id: Mapped[int] = mapped_column(primary_key=True)
    paid_to_employee: Mapped[str] = mapped_column(String(100), nullable=False)
    salary_amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False
    )
    salary_date: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, index=True
    )
    account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id"), nullable=False, index=True
    )
    paid_by_employee: Mapped[str] = mapped_column(String(100), nullable=False)
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )


class Refund(Base):
    __tablename__ = "refunds"

    refund_id: Mapped[int] = mapped_column(primary_key=True)
    customer_name: Mapped[str] = mapped_column(String(150), nullable=False)
    refund_amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False
    )
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    refund_date: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, index=True
    )
    account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id"), nullable=False, index=True
    )
    reason: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    staff_name: Mapped[str] = mapped_column(String(100), nullable=False)
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )


class Cheque(Base):
    """
    A cheque issued (payable) or received (receivable).

    Only paid cheques move money, on their paid date, in the
    currency of the account they are drawn on.
    """

    __tablename__ = "cheques"

    id: Mapped[int] = mapped_column(primary_key=True)
    cheque_type: Mapped[ChequeType] = mapped_column(
        SAEnum(ChequeType, name="cheque_type_enum"), nullable=False
    )
    number: Mapped[str] = mapped_column(String(50), nullable=False)
    cheque_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    payee: Mapped[str] = mapped_column(String(150), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(19, 4), nullable=False)
    bank: Mapped[str | None] = mapped_column(String(100), nullable=True)
    account_id: Mapped[int | None] = mapped_column(
        ForeignKey("accounts.id"), nullable=True, index=True
    )
    cheque_status: Mapped[ChequeStatus] = mapped_column(
        SAEnum(ChequeStatus, name="cheque_status_enum"),
        nullable=False,
        default=ChequeStatus.PENDING,
    )
    paid_date: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True, index=True
    )
    created_by: Mapped[str] = mapped_column(String(100), nullable=False)
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )


class ResidencePayment(Base):
    """Customer payment collected against a residence file."""

    __tablename__ = "residence_payments"

    id: Mapped[int] = mapped_column(primary_key=True)
    residence_ref: Mapped[str] = mapped_column(String(50), nullable=False)
    customer_name: Mapped[str] = mapped_column(String(150), nullable=False)
    kind: Mapped[ResidencePaymentKind] = mapped_column(
        SAEnum(ResidencePaymentKind, name="residence_payment_kind_enum"),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(19, 4), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    payment_date: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, index=True
    )
    account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id"), nullable=False, index=True
    )
    staff_name: Mapped[str] = mapped_column(String(100), nullable=False)
    remarks: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )


class OperationalCharge(Base):
    """Government or partner fee paid out by one department."""

    __tablename__ = "operational_charges"

    charge_id: Mapped[int] = mapped_column(primary_key=True)
    department: Mapped[OperationalDepartment] = mapped_column(
        SAEnum(OperationalDepartment, name="operational_department_enum"),
        nullable=False,
    )
    charge_amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False
    )
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    charged_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, index=True
    )
    account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id"), nullable=False, index=True
    )
    reference_no: Mapped[str] = mapped_column(
        String(100), nullable=False, default=""
    )
    description: Mapped[str] = mapped_column(
        String(255), nullable=False, default=""
    )
    staff_name: Mapped[str] = mapped_column(String(100), nullable=False)
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
