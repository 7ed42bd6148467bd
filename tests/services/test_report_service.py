"""
Tests for the reconciliation report: search, paging and the
stability of totals and running balances across pages.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from ledger_recon.models import ExchangeRate
from ledger_recon.services.exceptions import ValidationError
from ledger_recon.services.ledger_service import LedgerService
from ledger_recon.services.report_service import ReportService, paginate
from ledger_recon.services.sources import AdapterRegistry
from ledger_recon.services.sources.cash import DepositAdapter, WithdrawalAdapter


def at(day: str, hour: int = 10) -> datetime:
    return datetime.fromisoformat(day).replace(hour=hour)


@pytest.fixture
def busy_account(make_account, deposit, withdrawal):
    """Seven deposits and six withdrawals on alternating days."""
    cash = make_account("Cash")
    start = at("2026-01-01")
    for day in range(13):
        when = start + timedelta(days=day)
        if day % 2 == 0:
            deposit(cash, "100", when, remarks=f"Counter {day}")
        else:
            withdrawal(cash, "40", when, remarks=f"Petty cash {day}")
    return cash


class WithdrawalsDownBeforeWindow(WithdrawalAdapter):
    """Fails only for the open-ended query behind an opening balance."""

    def list_entries(self, session, query, type_filter, currencies):
        if query.from_date is None:
            raise RuntimeError("withdrawals archive is offline")
        return super().list_entries(session, query, type_filter, currencies)


# --- Paging ---

class TestPagination:

    @pytest.mark.parametrize("page_size", [1, 2, 5, 13, 50])
    def test_pages_cover_every_row_exactly_once(
        self, db_session, busy_account, page_size
    ):
        service = ReportService(db_session)
        full = service.get_detailed_transactions(
            None, None, page_size=100
        ).transactions

        collected = []
        page = 1
        while True:
            result = service.get_detailed_transactions(
                None, None, page=page, page_size=page_size
            )
            if not result.transactions:
                break
            collected.extend(result.transactions)
            page += 1

        assert collected == full
        assert page - 1 == result.total_pages

    def test_page_metadata(self, db_session, busy_account):
        result = ReportService(db_session).get_detailed_transactions(
            None, None, page=2, page_size=5
        )

        assert result.total_count == 13
        assert result.total_pages == 3
        assert result.page == 2
        assert len(result.transactions) == 5

    def test_summary_is_the_same_on_every_page(self, db_session, busy_account):
        service = ReportService(db_session)

        summaries = {
            service.get_detailed_transactions(
                None, None, page=page, page_size=4
            ).summary.model_dump_json()
            for page in (1, 2, 3, 4)
        }

        assert len(summaries) == 1

    def test_default_page_size(self, db_session, busy_account):
        result = ReportService(db_session).get_detailed_transactions(None, None)
        assert result.page_size == 20

    def test_oversized_page_rejected(self, db_session):
        with pytest.raises(ValidationError, match="must not exceed"):
            ReportService(db_session).get_detailed_transactions(
                None, None, page_size=101
            )

    def test_page_zero_rejected(self):
        with pytest.raises(ValidationError):
            paginate([1, 2, 3], 0, 10)

    def test_empty_report(self, db_session):
        result = ReportService(db_session).get_detailed_transactions(None, None)
        assert result.total_count == 0
        assert result.total_pages == 0


# --- Search ---

class TestSearch:

    def test_search_is_case_insensitive(self, db_session, busy_account):
        result = ReportService(db_session).get_detailed_transactions(
            None, None, search="PETTY"
        )

        assert result.total_count == 6
        assert all("Petty" in t.remarks for t in result.transactions)

    def test_search_matches_type_label(self, db_session, busy_account):
        result = ReportService(db_session).get_detailed_transactions(
            None, None, search="withdrawal"
        )
        assert result.total_count == 6

    def test_search_does_not_change_summary(self, db_session, busy_account):
        service = ReportService(db_session)

        everything = service.get_detailed_transactions(None, None)
        searched = service.get_detailed_transactions(None, None, search="counter 4")

        assert searched.total_count == 1
        assert searched.summary == everything.summary

    def test_running_balance_survives_search(self, db_session, busy_account):
        service = ReportService(db_session)

        full = service.get_detailed_transactions(
            None, None, account_id=busy_account.id, page_size=100
        ).transactions
        searched = service.get_detailed_transactions(
            None, None, account_id=busy_account.id, search="counter 12"
        ).transactions

        assert searched[0].running_balance == full[-1].running_balance
        assert full[-1].running_balance == Decimal("460")


# --- Filters ---

class TestReportFilters:

    def test_running_balance_only_for_one_account(self, db_session, busy_account):
        result = ReportService(db_session).get_detailed_transactions(None, None)
        assert all(t.running_balance is None for t in result.transactions)

    def test_running_balance_carries_opening_balance(
        self, db_session, busy_account
    ):
        result = ReportService(db_session).get_detailed_transactions(
            date(2026, 1, 3), None, account_id=busy_account.id
        )

        # 01-01 +100, 01-02 -40 before the window; 01-03 +100
        assert result.transactions[0].running_balance == Decimal("160")
        assert result.summary.net_balance == Decimal("400")

    def test_type_filter_summary_is_for_filtered_rows(
        self, db_session, busy_account
    ):
        result = ReportService(db_session).get_detailed_transactions(
            None, None, type_filter="debit"
        )

        assert result.total_count == 6
        assert result.summary.total_credits == Decimal("0")
        assert result.summary.total_debits == Decimal("240")

    def test_date_range(self, db_session, busy_account):
        result = ReportService(db_session).get_detailed_transactions(
            date(2026, 1, 2), date(2026, 1, 3)
        )

        assert result.total_count == 2
        assert result.summary.from_date == date(2026, 1, 2)
        assert result.summary.to_date == date(2026, 1, 3)

    def test_opening_balance_failure_degrades_report(
        self, db_session, busy_account
    ):
        ledger = LedgerService(
            db_session,
            registry=AdapterRegistry([
                DepositAdapter(), WithdrawalsDownBeforeWindow(),
            ]),
            max_workers=1,
        )
        service = ReportService(db_session, ledger_service=ledger)

        result = service.get_detailed_transactions(
            date(2026, 1, 3), None, account_id=busy_account.id
        )

        # The 01-02 withdrawal is missing from the opening balance
        assert result.transactions[0].running_balance == Decimal("200")
        assert result.degraded is True
        assert [w.source for w in result.warnings] == ["withdrawal"]


# --- Cross-currency Summary ---

class TestCrossCurrencySummary:

    @pytest.fixture
    def two_currencies(self, make_account, deposit, add_row):
        cash = make_account("Cash")
        dollar = make_account("Dollar", currency="USD")
        add_row(ExchangeRate(
            currency="USD", as_of=date(2025, 10, 1), rate=Decimal("3.67"),
        ))
        deposit(cash, "100", at("2025-11-01"))
        deposit(dollar, "100", at("2025-11-02"))
        return cash, dollar

    def test_all_accounts_summary_in_base_currency(
        self, db_session, two_currencies
    ):
        result = ReportService(db_session).get_detailed_transactions(
            date(2025, 10, 1), date(2025, 12, 1)
        )

        assert result.summary.currency == "AED"
        assert result.summary.total_credits == Decimal("467")
        assert result.summary.entry_count == 2
        assert result.degraded is False

    def test_rows_keep_their_ledger_currency(self, db_session, two_currencies):
        result = ReportService(db_session).get_detailed_transactions(
            date(2025, 10, 1), date(2025, 12, 1)
        )

        assert [(t.credit, t.currency) for t in result.transactions] == [
            (Decimal("100"), "AED"),
            (Decimal("100"), "USD"),
        ]

    def test_one_account_summary_in_its_currency(
        self, db_session, two_currencies
    ):
        _, dollar = two_currencies

        result = ReportService(db_session).get_detailed_transactions(
            date(2025, 10, 1), date(2025, 12, 1), account_id=dollar.id
        )

        assert result.summary.currency == "USD"
        assert result.summary.total_credits == Decimal("100")

    def test_missing_rate_leaves_entry_out_of_totals(
        self, db_session, make_account, deposit
    ):
        cash = make_account("Cash")
        dollar = make_account("Dollar", currency="USD")
        deposit(cash, "100", at("2025-11-01"))
        deposit(dollar, "100", at("2025-11-02"))

        result = ReportService(db_session).get_detailed_transactions(
            date(2025, 10, 1), date(2025, 12, 1)
        )

        # The dollar row is still listed, only the AED totals skip it
        assert result.total_count == 2
        assert result.summary.total_credits == Decimal("100")
        assert result.degraded is True
        assert result.warnings[0].account_id == dollar.id
