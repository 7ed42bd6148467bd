"""
Residence processing sources.

Residence payments are collected from customers (money in), one
subcategory per kind of payment. Operational charges are the fees
each department pays out to government and partner portals (money
out), one subcategory per department.
"""

from ledger_recon.models.enums import (
    EntryType,
    OperationalDepartment,
    ResidencePaymentKind,
    SourceCategory,
)
from ledger_recon.models.sources import OperationalCharge, ResidencePayment
from ledger_recon.schemas.ledger import SourceEntry
from ledger_recon.services.sources.base import SourceAdapter, register_adapter


@register_adapter
class ResidencePaymentAdapter(SourceAdapter):
    category = SourceCategory.RESIDENCE_PAYMENT
    model = ResidencePayment
    date_column = "payment_date"
    columns = (
        "id", "residence_ref", "customer_name", "kind", "amount",
        "currency", "staff_name", "remarks",
    )
    subcategories = tuple(kind.value for kind in ResidencePaymentKind)

    def to_entries(self, row, currencies):
        label = row.kind.value.replace("_", " ")
        yield SourceEntry(
            account_id=row.account_id,
            timestamp=row.payment_date,
            category=self.category,
            subcategory=row.kind.value,
            direction=EntryType.CREDIT,
            original_amount=row.amount,
            original_currency=row.currency,
            description=f"{label.capitalize()} from {row.customer_name}",
            reference=row.residence_ref,
            actor=row.staff_name,
            remarks=row.remarks,
            source_id=row.id,
        )


@register_adapter
class OperationalChargeAdapter(SourceAdapter):
    category = SourceCategory.OPERATIONAL_CHARGE
    model = OperationalCharge
    date_column = "charged_at"
    columns = (
        "charge_id", "department", "charge_amount", "currency",
        "reference_no", "description", "staff_name",
    )
    subcategories = tuple(dept.value for dept in OperationalDepartment)

    def to_entries(self, row, currencies):
        yield SourceEntry(
            account_id=row.account_id,
            timestamp=row.charged_at,
            category=self.category,
            subcategory=row.department.value,
            direction=EntryType.DEBIT,
            original_amount=row.charge_amount,
            original_currency=row.currency,
            description=row.description or row.department.value,
            reference=row.reference_no or f"OPC-{row.charge_id}",
            actor=row.staff_name,
            source_id=row.charge_id,
        )
