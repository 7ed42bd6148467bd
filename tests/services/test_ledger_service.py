"""
Tests for the LedgerService aggregator.

Tests cover:
- Credit/debit exclusivity of every entry
- Deterministic ordering and its tie-break
- The reset-date floor under every filter combination
- Type filters and the filtered summary
- Degraded and strict handling of failing or hanging sources
- The read_as_of cut-off used by closing runs
"""

import threading
from datetime import date, datetime
from decimal import Decimal

import pytest

from ledger_recon.models import (
    Cheque,
    ChequeStatus,
    ChequeType,
    ExchangeRate,
    Expense,
    OperationalCharge,
    OperationalDepartment,
    ResidencePayment,
    ResidencePaymentKind,
    Salary,
)
from ledger_recon.schemas.ledger import LedgerEntry, LedgerQuery
from ledger_recon.services.exceptions import (
    AccountNotFound,
    StatementAborted,
    ValidationError,
)
from ledger_recon.services.ledger_service import (
    LedgerService,
    effective_reset_date,
)
from ledger_recon.services.sources import AdapterRegistry
from ledger_recon.services.sources.cash import DepositAdapter, WithdrawalAdapter

RESET = date(2025, 10, 1)


def at(day: str, hour: int = 10, minute: int = 0) -> datetime:
    return datetime.fromisoformat(day).replace(hour=hour, minute=minute)


class FailingAdapter(DepositAdapter):
    def list_entries(self, session, query, type_filter, currencies):
        raise RuntimeError("deposits database is down")


class HangingAdapter(DepositAdapter):
    """Blocks until released, to simulate a source that never answers."""

    def __init__(self):
        self.release = threading.Event()

    def list_entries(self, session, query, type_filter, currencies):
        self.release.wait(5)
        return []


# --- Entry Invariants ---

class TestLedgerEntry:

    def entry(self, **overrides):
        fields = dict(
            account_id=1,
            account_name="Main Cash",
            timestamp=at("2026-01-05"),
            category="deposit",
            original_amount=Decimal("10"),
            original_currency="AED",
            converted_amount=Decimal("10"),
            ledger_currency="AED",
            source_id=1,
        )
        fields.update(overrides)
        return LedgerEntry(**fields)

    def test_credit_only_is_valid(self):
        entry = self.entry(credit=Decimal("10"))
        assert entry.amount == Decimal("10")
        assert entry.type_category == "credit"

    def test_both_sides_rejected(self):
        with pytest.raises(ValueError, match="exactly one"):
            self.entry(credit=Decimal("10"), debit=Decimal("10"))

    def test_neither_side_rejected(self):
        with pytest.raises(ValueError, match="exactly one"):
            self.entry()

    def test_negative_amount_rejected(self):
        with pytest.raises(ValueError, match="negative"):
            self.entry(debit=Decimal("-5"))

    def test_transfer_rows_are_labelled_transfer(self):
        entry = self.entry(category="transfer", debit=Decimal("10"))
        assert entry.type_category == "transfer"


# --- Aggregation ---

class TestBuildLedger:

    def test_every_entry_has_exactly_one_side(
        self, db_session, make_account, deposit, withdrawal, transfer
    ):
        cash = make_account("Cash")
        bank = make_account("Bank")
        deposit(cash, "1000", at("2026-01-05"))
        withdrawal(cash, "300", at("2026-01-06"))
        transfer(cash, bank, "200", at("2026-01-07"), charges="5")

        result = LedgerService(db_session).build_ledger(
            LedgerQuery(reset_date=RESET)
        )

        assert len(result.entries) == 5
        for entry in result.entries:
            assert (entry.credit > 0) != (entry.debit > 0)
        assert result.degraded is False

    def test_summary_is_exact_decimal_arithmetic(
        self, db_session, make_account, deposit, withdrawal
    ):
        cash = make_account("Cash")
        deposit(cash, "0.1000", at("2026-01-05"))
        deposit(cash, "0.2000", at("2026-01-05", 11))
        withdrawal(cash, "0.3000", at("2026-01-06"))

        summary = LedgerService(db_session).build_ledger(
            LedgerQuery(reset_date=RESET, account_id=cash.id)
        ).summary

        assert summary.total_credits == Decimal("0.3")
        assert summary.total_debits == Decimal("0.3")
        assert summary.net_balance == Decimal("0")
        assert summary.entry_count == 3

    def test_all_sources_are_aggregated(
        self, db_session, make_account, deposit, add_row
    ):
        cash = make_account("Cash")
        deposit(cash, "500", at("2026-01-05"))
        add_row(Salary(
            paid_to_employee="Ali", salary_amount=Decimal("100"),
            salary_date=at("2026-01-06"), account_id=cash.id,
            paid_by_employee="Sara",
        ))
        add_row(ResidencePayment(
            residence_ref="RES-1", customer_name="Omar",
            kind=ResidencePaymentKind.TAWJEEH_PAYMENT, amount=Decimal("250"),
            currency="AED", payment_date=at("2026-01-07"),
            account_id=cash.id, staff_name="Sara",
        ))
        add_row(OperationalCharge(
            department=OperationalDepartment.EVISA_CHARGE,
            charge_amount=Decimal("75"), currency="AED",
            charged_at=at("2026-01-08"), account_id=cash.id,
            staff_name="Sara",
        ))
        add_row(Cheque(
            cheque_type=ChequeType.RECEIVABLE, number="000123",
            cheque_date=at("2026-01-02"), payee="Omar",
            amount=Decimal("40"), account_id=cash.id,
            cheque_status=ChequeStatus.PAID, paid_date=at("2026-01-09"),
            created_by="Sara",
        ))
        add_row(Cheque(
            cheque_type=ChequeType.PAYABLE, number="000124",
            cheque_date=at("2026-01-02"), payee="Supplier",
            amount=Decimal("999"), account_id=cash.id,
            cheque_status=ChequeStatus.PENDING, created_by="Sara",
        ))

        result = LedgerService(db_session).build_ledger(
            LedgerQuery(reset_date=RESET, account_id=cash.id)
        )

        categories = [e.category.value for e in result.entries]
        assert categories == [
            "deposit", "salary", "residence_payment",
            "operational_charge", "cheque",
        ]
        assert result.summary.total_credits == Decimal("790")
        assert result.summary.total_debits == Decimal("175")

    def test_unknown_account_rejected(self, db_session):
        with pytest.raises(AccountNotFound):
            LedgerService(db_session).build_ledger(
                LedgerQuery(reset_date=RESET, account_id=999)
            )

    def test_to_date_before_from_date_rejected(self, db_session):
        with pytest.raises(ValidationError, match="earlier than"):
            LedgerService(db_session).build_ledger(LedgerQuery(
                reset_date=RESET,
                from_date=date(2026, 2, 1),
                to_date=date(2026, 1, 1),
            ))

    def test_unknown_type_filter_rejected(self, db_session):
        with pytest.raises(ValidationError, match="Unknown transaction type"):
            LedgerService(db_session).build_ledger(
                LedgerQuery(reset_date=RESET, type_filter="lottery")
            )

    def test_inline_mode_gives_same_result(
        self, db_session, make_account, deposit, withdrawal
    ):
        cash = make_account("Cash")
        deposit(cash, "1000", at("2026-01-05"))
        withdrawal(cash, "300", at("2026-01-06"))
        query = LedgerQuery(reset_date=RESET)

        pooled = LedgerService(db_session).build_ledger(query)
        inline = LedgerService(db_session, max_workers=1).build_ledger(query)

        assert inline.entries == pooled.entries
        assert inline.summary == pooled.summary


# --- Ordering ---

class TestOrdering:

    def test_entries_sorted_by_timestamp(
        self, db_session, make_account, deposit, withdrawal
    ):
        cash = make_account("Cash")
        withdrawal(cash, "10", at("2026-01-07"))
        deposit(cash, "20", at("2026-01-05"))
        deposit(cash, "30", at("2026-01-06"))

        entries = LedgerService(db_session).build_ledger(
            LedgerQuery(reset_date=RESET)
        ).entries

        assert [e.timestamp for e in entries] == [
            at("2026-01-05"), at("2026-01-06"), at("2026-01-07"),
        ]

    def test_same_timestamp_breaks_on_category_then_row(
        self, db_session, make_account, deposit, withdrawal
    ):
        cash = make_account("Cash")
        same = at("2026-01-05")
        out = withdrawal(cash, "10", same)
        first = deposit(cash, "20", same)
        second = deposit(cash, "30", same)

        entries = LedgerService(db_session).build_ledger(
            LedgerQuery(reset_date=RESET)
        ).entries

        # Deposits rank before withdrawals; rows keep insertion order
        assert [(e.category.value, e.source_id) for e in entries] == [
            ("deposit", first.deposit_id),
            ("deposit", second.deposit_id),
            ("withdrawal", out.withdrawal_id),
        ]

    def test_order_is_stable_across_runs(
        self, db_session, make_account, deposit, transfer
    ):
        cash = make_account("Cash")
        bank = make_account("Bank")
        same = at("2026-01-05")
        deposit(cash, "100", same)
        transfer(cash, bank, "50", same, charges="1")
        transfer(bank, cash, "20", same)

        service = LedgerService(db_session)
        first = service.build_ledger(LedgerQuery(reset_date=RESET)).entries
        second = service.build_ledger(LedgerQuery(reset_date=RESET)).entries

        assert [e.sort_key for e in first] == [e.sort_key for e in second]
        assert [e.sort_key for e in first] == sorted(e.sort_key for e in first)


# --- Reset Date Floor ---

class TestResetDateFloor:

    @pytest.mark.parametrize("type_filter", [
        None, "credit", "debit", "transfer", "deposit", "transfer_out",
    ])
    @pytest.mark.parametrize("from_date", [None, date(2025, 1, 1)])
    @pytest.mark.parametrize("reset_date", [None, date(2024, 1, 1)])
    def test_nothing_before_reset_date_for_any_filter(
        self, db_session, make_account, deposit, withdrawal, transfer,
        type_filter, from_date, reset_date,
    ):
        cash = make_account("Cash")
        bank = make_account("Bank")
        deposit(cash, "1", at("2025-09-30", 23, 59))
        withdrawal(cash, "1", at("2025-09-15"))
        transfer(cash, bank, "1", at("2025-09-20"))
        deposit(cash, "5", at("2025-10-01", 0, 0))

        for account_id in (None, cash.id):
            result = LedgerService(db_session).build_ledger(LedgerQuery(
                reset_date=reset_date or RESET,
                from_date=from_date,
                account_id=account_id,
                type_filter=type_filter,
            ))
            assert all(e.timestamp >= datetime(2025, 10, 1) for e in result.entries)
            assert result.summary.from_date == RESET

    def test_caller_can_raise_the_floor(self):
        assert effective_reset_date(date(2026, 1, 1)) == date(2026, 1, 1)

    def test_caller_cannot_lower_the_floor(self):
        assert effective_reset_date(date(2020, 1, 1)) == RESET
        assert effective_reset_date(None) == RESET


# --- Type Filter ---

class TestTypeFilter:

    def test_transfer_filter_returns_only_transfers(
        self, db_session, make_account, deposit, withdrawal, transfer
    ):
        cash = make_account("Cash")
        bank = make_account("Bank")
        deposit(cash, "1000", at("2026-01-05"))
        withdrawal(cash, "300", at("2026-01-06"))
        transfer(cash, bank, "200", at("2026-01-07"))
        transfer(cash, bank, "100", at("2026-01-08"))

        result = LedgerService(db_session).build_ledger(LedgerQuery(
            reset_date=RESET, account_id=cash.id, type_filter="transfer",
        ))

        assert len(result.entries) == 2
        assert all(e.is_transfer for e in result.entries)
        # Summary is for the filtered subset
        assert result.summary.total_debits == Decimal("300")
        assert result.summary.total_credits == Decimal("0")
        assert result.summary.total_transfers == Decimal("300")
        assert result.summary.entry_count == 2

    def test_direction_filter_excludes_transfers(
        self, db_session, make_account, deposit, transfer
    ):
        cash = make_account("Cash")
        bank = make_account("Bank")
        deposit(cash, "1000", at("2026-01-05"))
        transfer(bank, cash, "200", at("2026-01-07"))

        result = LedgerService(db_session).build_ledger(LedgerQuery(
            reset_date=RESET, account_id=cash.id, type_filter="credit",
        ))

        assert [e.category.value for e in result.entries] == ["deposit"]

    def test_subcategory_filter(
        self, db_session, make_account, transfer
    ):
        cash = make_account("Cash")
        bank = make_account("Bank")
        transfer(cash, bank, "200", at("2026-01-07"), charges="5")

        result = LedgerService(db_session).build_ledger(LedgerQuery(
            reset_date=RESET, type_filter="transfer_charges",
        ))

        assert len(result.entries) == 1
        assert result.entries[0].debit == Decimal("5")

    def test_expenses_filter_by_category_not_type(
        self, db_session, make_account, add_row
    ):
        cash = make_account("Cash")
        add_row(Expense(
            expense_type="Office Rent",
            expense_amount=Decimal("750"),
            currency="AED",
            time_creation=at("2026-01-09"),
            account_id=cash.id,
            staff_name="accounts",
        ))
        service = LedgerService(db_session)

        result = service.build_ledger(LedgerQuery(
            reset_date=RESET, type_filter="expense",
        ))

        assert result.entries[0].subcategory is None
        assert result.entries[0].description == "Expense: Office Rent"
        with pytest.raises(ValidationError):
            service.build_ledger(LedgerQuery(
                reset_date=RESET, type_filter="Office Rent",
            ))


# --- Transfers ---

class TestTransfers:

    def test_transfer_expands_into_legs(
        self, db_session, make_account, transfer
    ):
        cash = make_account("Cash")
        bank = make_account("Bank")
        transfer(cash, bank, "200", at("2026-01-07"), charges="5", trx="TRX-9")

        entries = LedgerService(db_session).build_ledger(
            LedgerQuery(reset_date=RESET)
        ).entries

        assert [(e.subcategory, e.account_id) for e in entries] == [
            ("transfer_out", cash.id),
            ("transfer_charges", cash.id),
            ("transfer_in", bank.id),
        ]
        assert all(e.reference == "TRX-9" for e in entries)

    def test_cross_currency_transfer_credits_converted_amount(
        self, db_session, make_account, transfer
    ):
        dollars = make_account("USD Account", currency="USD")
        dirhams = make_account("AED Account", currency="AED")
        transfer(dollars, dirhams, "100", at("2026-01-07"), rate="3.67")

        entries = LedgerService(db_session).build_ledger(
            LedgerQuery(reset_date=RESET, account_id=dirhams.id)
        ).entries

        assert len(entries) == 1
        assert entries[0].credit == Decimal("367")
        assert entries[0].ledger_currency == "AED"


# --- Currency Conversion ---

class TestConversion:

    def test_entries_converted_to_ledger_currency(
        self, db_session, make_account, deposit, add_row
    ):
        cash = make_account("Cash")
        add_row(ExchangeRate(
            currency="USD", as_of=date(2026, 1, 1), rate=Decimal("3.67"),
        ))
        deposit(cash, "100", at("2026-01-05"), currency="USD")

        entry = LedgerService(db_session).build_ledger(
            LedgerQuery(reset_date=RESET)
        ).entries[0]

        assert entry.credit == Decimal("367.0000")
        assert entry.original_amount == Decimal("100")
        assert entry.original_currency == "USD"

    def test_missing_rate_degrades_report(
        self, db_session, make_account, deposit
    ):
        cash = make_account("Cash")
        deposit(cash, "100", at("2026-01-05"), currency="USD")
        deposit(cash, "50", at("2026-01-06"))

        result = LedgerService(db_session).build_ledger(
            LedgerQuery(reset_date=RESET)
        )

        assert result.degraded is True
        assert len(result.entries) == 1
        assert "USD" in result.warnings[0].message

    def test_missing_rate_aborts_strict_build(
        self, db_session, make_account, deposit
    ):
        cash = make_account("Cash")
        deposit(cash, "100", at("2026-01-05"), currency="USD")

        with pytest.raises(StatementAborted) as exc:
            LedgerService(db_session).build_ledger(
                LedgerQuery(reset_date=RESET), strict=True
            )
        assert exc.value.account_id == cash.id
        assert exc.value.source == "deposit"
        assert exc.value.on_date == date(2026, 1, 5)

    def test_amount_rounding_to_zero_is_dropped_with_warning(
        self, db_session, make_account, deposit, add_row
    ):
        usd = make_account("Dollar", currency="USD")
        add_row(ExchangeRate(
            currency="USD", as_of=date(2026, 1, 1), rate=Decimal("3.67"),
        ))
        deposit(usd, "10", at("2026-01-05"))
        deposit(usd, "0.0001", at("2026-01-06"), currency="AED")

        result = LedgerService(db_session).build_ledger(
            LedgerQuery(reset_date=RESET)
        )

        assert len(result.entries) == 1
        assert result.degraded is True
        assert "rounds to zero" in result.warnings[0].message

    def test_amount_rounding_to_zero_aborts_strict(
        self, db_session, make_account, deposit, add_row
    ):
        usd = make_account("Dollar", currency="USD")
        add_row(ExchangeRate(
            currency="USD", as_of=date(2026, 1, 1), rate=Decimal("3.67"),
        ))
        deposit(usd, "0.0001", at("2026-01-06"), currency="AED")

        with pytest.raises(StatementAborted, match="rounds to zero"):
            LedgerService(db_session).build_ledger(
                LedgerQuery(reset_date=RESET), strict=True
            )

    def test_single_account_summary_is_in_its_currency(
        self, db_session, make_account, deposit
    ):
        usd = make_account("Dollar", currency="USD")
        deposit(usd, "10", at("2026-01-05"))

        result = LedgerService(db_session).build_ledger(
            LedgerQuery(reset_date=RESET, account_id=usd.id)
        )

        assert result.summary.currency == "USD"


# --- Failing Sources ---

class TestSourceFailures:

    def test_failing_source_degrades_report(
        self, db_session, make_account, withdrawal
    ):
        cash = make_account("Cash")
        withdrawal(cash, "300", at("2026-01-06"))
        service = LedgerService(
            db_session,
            registry=AdapterRegistry([FailingAdapter(), WithdrawalAdapter()]),
        )

        result = service.build_ledger(LedgerQuery(reset_date=RESET))

        assert result.degraded is True
        assert result.warnings[0].source == "deposit"
        assert "down" in result.warnings[0].message
        assert [e.category.value for e in result.entries] == ["withdrawal"]

    def test_failing_source_aborts_strict_build(
        self, db_session, make_account
    ):
        cash = make_account("Cash")
        service = LedgerService(
            db_session,
            registry=AdapterRegistry([FailingAdapter(), WithdrawalAdapter()]),
        )

        with pytest.raises(StatementAborted, match="source=deposit"):
            service.build_ledger(
                LedgerQuery(
                    reset_date=RESET,
                    to_date=date(2026, 1, 31),
                    account_id=cash.id,
                ),
                strict=True,
            )

    def test_hanging_source_times_out(
        self, db_session, make_account, withdrawal
    ):
        cash = make_account("Cash")
        withdrawal(cash, "300", at("2026-01-06"))
        hanging = HangingAdapter()
        service = LedgerService(
            db_session,
            registry=AdapterRegistry([hanging, WithdrawalAdapter()]),
            timeout=0.2,
        )

        try:
            result = service.build_ledger(LedgerQuery(reset_date=RESET))
        finally:
            hanging.release.set()

        assert result.degraded is True
        assert "timed out" in result.warnings[0].message
        assert len(result.entries) == 1


# --- Read Cut-off ---

class TestReadAsOf:

    def test_rows_recorded_after_cut_off_excluded(
        self, db_session, make_account, deposit
    ):
        cash = make_account("Cash")
        deposit(cash, "100", at("2026-01-05"))
        cut_off = datetime.utcnow()
        late = deposit(cash, "50", at("2026-01-05"))
        late.recorded_at = datetime(2099, 1, 1)
        db_session.commit()

        result = LedgerService(db_session).build_ledger(
            LedgerQuery(reset_date=RESET, read_as_of=cut_off)
        )

        assert result.summary.total_credits == Decimal("100")
