"""
Statement service — running balances and account balances.

Statements always start at the reset date, whatever range a
report view is showing, so a balance means the same thing on every
screen. They run in strict mode: a statement with a missing source
or a missing rate is refused rather than shown incomplete.
"""

import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session

from ledger_recon.models.enums import BalanceStatus
from ledger_recon.schemas.ledger import LedgerEntry, LedgerEntryResponse, LedgerQuery
from ledger_recon.schemas.report import (
    AccountBalanceRow,
    AccountBalancesResponse,
    StatementResponse,
)
from ledger_recon.services.exceptions import AccountNotFound, LedgerInvariantError
from ledger_recon.services.ledger_service import (
    AccountInfo,
    LedgerService,
    effective_reset_date,
)

logger = logging.getLogger(__name__)


def running_balances(
    entries: list[LedgerEntry], opening: Decimal = Decimal("0")
) -> list[Decimal]:
    """
    Cumulative balance after each entry, starting from `opening`.

    running[i] = running[i-1] + credit[i] - debit[i], running[-1] = opening
    """
    balance = opening
    running = []
    for entry in entries:
        balance = balance + entry.credit - entry.debit
        running.append(balance)
    return running


def balance_status(balance: Decimal) -> BalanceStatus:
    if balance > 0:
        return BalanceStatus.POSITIVE
    if balance < 0:
        return BalanceStatus.NEGATIVE
    return BalanceStatus.ZERO


class StatementService:

    def __init__(self, db: Session, ledger_service: LedgerService | None = None):
        self.db = db
        self.ledger_service = ledger_service or LedgerService(db)

    def compute_statement(
        self,
        account_id: int,
        to_date: date,
        reset_date: date | None = None,
        read_as_of=None,
        accounts: dict[int, AccountInfo] | None = None,
    ) -> StatementResponse:
        """
        Build an account statement from the reset date through to_date.

        Raises AccountNotFound, StatementAborted (strict mode) or
        LedgerInvariantError if the running balance and the totals
        disagree.
        """
        if accounts is None:
            accounts = self.ledger_service.load_accounts()
        account = accounts.get(account_id)
        if account is None:
            raise AccountNotFound(account_id)

        floor = effective_reset_date(reset_date)
        result = self.ledger_service.build_ledger(
            LedgerQuery(
                reset_date=floor,
                to_date=to_date,
                account_id=account_id,
                read_as_of=read_as_of,
            ),
            strict=True,
            accounts=accounts,
        )
        entries = result.entries
        running = running_balances(entries)
        summary = result.summary

        balance = summary.total_credits - summary.total_debits
        final = running[-1] if running else Decimal("0")
        if final != balance:
            raise LedgerInvariantError(
                f"Running balance {final} does not match "
                f"credits - debits {balance} for account {account_id}"
            )

        return StatementResponse(
            account_id=account.id,
            account_name=account.name,
            currency=account.currency,
            from_date=floor,
            to_date=to_date,
            total_credits=summary.total_credits,
            total_debits=summary.total_debits,
            balance=balance,
            transactions=[
                LedgerEntryResponse.from_entry(entry, running_balance=value)
                for entry, value in zip(entries, running)
            ],
        )

    def get_account_balances(
        self, reset_date: date | None = None
    ) -> AccountBalancesResponse:
        """
        Current balance of every account, from the reset date on.

        One aggregation covers all accounts. Archived accounts are
        included. Best effort: a failing source degrades the result.
        """
        floor = effective_reset_date(reset_date)
        accounts = self.ledger_service.load_accounts()
        result = self.ledger_service.build_ledger(
            LedgerQuery(reset_date=floor), accounts=accounts
        )

        by_account: dict[int, list[LedgerEntry]] = defaultdict(list)
        for entry in result.entries:
            by_account[entry.account_id].append(entry)

        rows = []
        for account in accounts.values():
            summary = LedgerService.summarize(
                by_account.get(account.id, []),
                floor,
                account_id=account.id,
                currency=account.currency,
            )
            rows.append(AccountBalanceRow(
                account_id=account.id,
                account_name=account.name,
                currency=account.currency,
                total_credits=summary.total_credits,
                total_debits=summary.total_debits,
                balance=summary.net_balance,
                status=balance_status(summary.net_balance),
                is_archived=account.is_archived,
            ))

        return AccountBalancesResponse(
            reset_date=floor,
            balances=rows,
            degraded=result.degraded,
            warnings=result.warnings,
        )

    def get_account_balance(
        self, account_id: int, reset_date: date | None = None
    ) -> AccountBalanceRow:
        """Current balance of one account, from the reset date on."""
        floor = effective_reset_date(reset_date)
        accounts = self.ledger_service.load_accounts()
        account = accounts.get(account_id)
        if account is None:
            raise AccountNotFound(account_id)

        result = self.ledger_service.build_ledger(
            LedgerQuery(reset_date=floor, account_id=account_id),
            accounts=accounts,
        )
        if result.degraded:
            logger.warning(
                f"Balance for account {account_id} is partial: "
                f"{len(result.warnings)} warning(s)"
            )
        summary = result.summary
        return AccountBalanceRow(
            account_id=account.id,
            account_name=account.name,
            currency=account.currency,
            total_credits=summary.total_credits,
            total_debits=summary.total_debits,
            balance=summary.net_balance,
            status=balance_status(summary.net_balance),
            is_archived=account.is_archived,
        )
