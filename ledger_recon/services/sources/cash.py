"""
Cash desk sources: deposits, withdrawals, transfers, cheques.
"""

from decimal import Decimal, ROUND_HALF_UP

from ledger_recon.models.enums import (
    ChequeStatus,
    ChequeType,
    EntryType,
    SourceCategory,
    TransferLeg,
)
from ledger_recon.models.sources import Cheque, Deposit, Transfer, Withdrawal
from ledger_recon.schemas.ledger import SourceEntry
from ledger_recon.services.sources.base import SourceAdapter, register_adapter

FOUR_PLACES = Decimal("0.0001")


@register_adapter
class DepositAdapter(SourceAdapter):
    category = SourceCategory.DEPOSIT
    model = Deposit
    date_column = "deposit_date"
    columns = ("deposit_id", "deposit_amount", "currency", "deposit_by", "remarks")

    def to_entries(self, row, currencies):
        yield SourceEntry(
            account_id=row.account_id,
            timestamp=row.deposit_date,
            category=self.category,
            direction=EntryType.CREDIT,
            original_amount=row.deposit_amount,
            original_currency=row.currency,
            description="Deposit",
            reference=f"DEP-{row.deposit_id}",
            actor=row.deposit_by,
            remarks=row.remarks,
            source_id=row.deposit_id,
        )


@register_adapter
class WithdrawalAdapter(SourceAdapter):
    category = SourceCategory.WITHDRAWAL
    model = Withdrawal
    date_column = "withdrawal_date"
    columns = (
        "withdrawal_id", "withdrawal_amount", "currency",
        "withdrawal_by", "remarks",
    )

    def to_entries(self, row, currencies):
        yield SourceEntry(
            account_id=row.account_id,
            timestamp=row.withdrawal_date,
            category=self.category,
            direction=EntryType.DEBIT,
            original_amount=row.withdrawal_amount,
            original_currency=row.currency,
            description="Withdrawal",
            reference=f"WDR-{row.withdrawal_id}",
            actor=row.withdrawal_by,
            remarks=row.remarks,
            source_id=row.withdrawal_id,
        )


@register_adapter
class TransferAdapter(SourceAdapter):
    """
    One transfer row becomes two or three entries.

    Out: debit of `amount` on the source account, in its currency.
    Charges: debit of `charges` on the source account, if any.
    In: credit of amount * exchange_rate on the destination account,
    in the destination's currency.
    """

    category = SourceCategory.TRANSFER
    model = Transfer
    date_column = "transfer_date"
    account_columns = ("from_account", "to_account")
    columns = ("id", "amount", "charges", "exchange_rate", "trx", "remarks", "added_by")
    subcategories = tuple(leg.value for leg in TransferLeg)

    def to_entries(self, row, currencies):
        source_currency = currencies[row.from_account]
        target_currency = currencies[row.to_account]
        reference = row.trx or f"TRF-{row.id}"
        common = dict(
            timestamp=row.transfer_date,
            category=self.category,
            reference=reference,
            actor=row.added_by,
            remarks=row.remarks,
            source_id=row.id,
        )

        yield SourceEntry(
            account_id=row.from_account,
            subcategory=TransferLeg.TRANSFER_OUT.value,
            direction=EntryType.DEBIT,
            original_amount=row.amount,
            original_currency=source_currency,
            description=f"Transfer to account {row.to_account}",
            sub_index=0,
            **common,
        )
        if row.charges and row.charges > 0:
            yield SourceEntry(
                account_id=row.from_account,
                subcategory=TransferLeg.TRANSFER_CHARGES.value,
                direction=EntryType.DEBIT,
                original_amount=row.charges,
                original_currency=source_currency,
                description=f"Transfer charges to account {row.to_account}",
                sub_index=1,
                **common,
            )
        received = (row.amount * row.exchange_rate).quantize(
            FOUR_PLACES, rounding=ROUND_HALF_UP
        )
        yield SourceEntry(
            account_id=row.to_account,
            subcategory=TransferLeg.TRANSFER_IN.value,
            direction=EntryType.CREDIT,
            original_amount=received,
            original_currency=target_currency,
            description=f"Transfer from account {row.from_account}",
            sub_index=2,
            **common,
        )


@register_adapter
class ChequeAdapter(SourceAdapter):
    """Paid cheques only, dated by when they cleared."""

    category = SourceCategory.CHEQUE
    model = Cheque
    date_column = "paid_date"
    columns = (
        "id", "cheque_type", "number", "payee", "amount",
        "bank", "cheque_status", "created_by",
    )
    subcategories = tuple(kind.value for kind in ChequeType)

    def extra_criteria(self):
        return [
            Cheque.cheque_status == ChequeStatus.PAID,
            Cheque.account_id.is_not(None),
        ]

    def to_entries(self, row, currencies):
        receivable = row.cheque_type == ChequeType.RECEIVABLE
        yield SourceEntry(
            account_id=row.account_id,
            timestamp=row.paid_date,
            category=self.category,
            subcategory=row.cheque_type.value,
            direction=EntryType.CREDIT if receivable else EntryType.DEBIT,
            original_amount=row.amount,
            original_currency=currencies[row.account_id],
            description=f"Cheque {'from' if receivable else 'to'} {row.payee}",
            reference=f"CHQ-{row.number}",
            actor=row.created_by,
            remarks=row.bank or "",
            source_id=row.id,
        )
