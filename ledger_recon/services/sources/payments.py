"""
Payment sources: customers, suppliers, expenses, loans, payroll, refunds.

Customer payments are the only money coming in here; everything
else leaves the account.
"""

from ledger_recon.models.enums import EntryType, SourceCategory
from ledger_recon.models.sources import (
    CustomerPayment,
    Expense,
    Loan,
    Refund,
    Salary,
    SupplierPayment,
)
from ledger_recon.schemas.ledger import SourceEntry
from ledger_recon.services.sources.base import SourceAdapter, register_adapter


@register_adapter
class CustomerPaymentAdapter(SourceAdapter):
    category = SourceCategory.CUSTOMER_PAYMENT
    model = CustomerPayment
    date_column = "paid_at"
    columns = (
        "pay_id", "customer_name", "payment_amount", "currency",
        "staff_name", "remarks",
    )

    def to_entries(self, row, currencies):
        yield SourceEntry(
            account_id=row.account_id,
            timestamp=row.paid_at,
            category=self.category,
            direction=EntryType.CREDIT,
            original_amount=row.payment_amount,
            original_currency=row.currency,
            description=f"Payment from {row.customer_name}",
            reference=f"CP-{row.pay_id}",
            actor=row.staff_name,
            remarks=row.remarks,
            source_id=row.pay_id,
        )


@register_adapter
class SupplierPaymentAdapter(SourceAdapter):
    category = SourceCategory.SUPPLIER_PAYMENT
    model = SupplierPayment
    date_column = "time_creation"
    columns = (
        "payment_id", "supplier_name", "payment_amount", "currency",
        "payment_detail", "staff_name",
    )

    def to_entries(self, row, currencies):
        yield SourceEntry(
            account_id=row.account_id,
            timestamp=row.time_creation,
            category=self.category,
            direction=EntryType.DEBIT,
            original_amount=row.payment_amount,
            original_currency=row.currency,
            description=f"Payment to {row.supplier_name}",
            reference=f"SP-{row.payment_id}",
            actor=row.staff_name,
            remarks=row.payment_detail,
            source_id=row.payment_id,
        )


@register_adapter
class ExpenseAdapter(SourceAdapter):
    """
    Expense types are user-defined, so they only appear in the
    description; filter expenses by the "expense" category.
    """

    category = SourceCategory.EXPENSE
    model = Expense
    date_column = "time_creation"
    columns = (
        "expense_id", "expense_type", "expense_amount", "currency",
        "expense_remark", "staff_name",
    )

    def to_entries(self, row, currencies):
        yield SourceEntry(
            account_id=row.account_id,
            timestamp=row.time_creation,
            category=self.category,
            direction=EntryType.DEBIT,
            original_amount=row.expense_amount,
            original_currency=row.currency,
            description=f"Expense: {row.expense_type}",
            reference=f"EXP-{row.expense_id}",
            actor=row.staff_name,
            remarks=row.expense_remark,
            source_id=row.expense_id,
        )


@register_adapter
class LoanAdapter(SourceAdapter):
    category = SourceCategory.LOAN
    model = Loan
    date_column = "loan_date"
    columns = (
        "loan_id", "customer_name", "amount", "currency",
        "remarks", "staff_name",
    )

    def to_entries(self, row, currencies):
        yield SourceEntry(
            account_id=row.account_id,
            timestamp=row.loan_date,
            category=self.category,
            direction=EntryType.DEBIT,
            original_amount=row.amount,
            original_currency=row.currency,
            description=f"Loan to {row.customer_name}",
            reference=f"LN-{row.loan_id}",
            actor=row.staff_name,
            remarks=row.remarks,
            source_id=row.loan_id,
        )


@register_adapter
class SalaryAdapter(SourceAdapter):
    """Salaries carry no currency: they are paid in the account's own."""

    category = SourceCategory.SALARY
    model = Salary
    date_column = "salary_date"
    columns = (
        "salary_id", "paid_to_employee", "salary_amount", "paid_by_employee",
    )

    def to_entries(self, row, currencies):
        yield SourceEntry(
            account_id=row.account_id,
            timestamp=row.salary_date,
            category=self.category,
            direction=EntryType.DEBIT,
            original_amount=row.salary_amount,
            original_currency=currencies[row.account_id],
            description=f"Salary paid to {row.paid_to_employee}",
            reference=f"SAL-{row.salary_id}",
            actor=row.paid_by_employee,
            source_id=row.salary_id,
        )


@register_adapter
class RefundAdapter(SourceAdapter):
    category = SourceCategory.REFUND
    model = Refund
    date_column = "refund_date"
    columns = (
        "refund_id", "customer_name", "refund_amount", "currency",
        "reason", "staff_name",
    )

    def to_entries(self, row, currencies):
        yield SourceEntry(
            account_id=row.account_id,
            timestamp=row.refund_date,
            category=self.category,
            direction=EntryType.DEBIT,
            original_amount=row.refund_amount,
            original_currency=row.currency,
            description=f"Refund to {row.customer_name}",
            reference=f"RF-{row.refund_id}",
            actor=row.staff_name,
            remarks=row.reason,
            source_id=row.refund_id,
        )
