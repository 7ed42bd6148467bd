"""
Transaction service — deposits, withdrawals and transfers.

Each operation:
1. Takes the account lock(s), so postings on one account serialize
2. Validates the accounts (exist, not archived, correct currency)
3. Writes the source record the ledger will read back
4. Stamps recorded_at and commits, still holding the locks

No balance is updated anywhere: the next report, statement or
closing run picks the record up through its source adapter. The
service commits each posting itself; the lock must cover the commit
or two postings on one account would not serialize.
"""

import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ledger_recon.models.account import Account
from ledger_recon.models.sources import Deposit, Transfer, Withdrawal
from ledger_recon.schemas.transaction import (
    DepositRequest,
    TransferRequest,
    WithdrawalRequest,
)
from ledger_recon.services.account_service import AccountService
from ledger_recon.services.exceptions import ValidationError
from ledger_recon.services.locks import (
    AccountLockRegistry,
    account_locks,
    commit_gate,
)

logger = logging.getLogger(__name__)


class TransactionService:

    def __init__(self, db: Session, locks: AccountLockRegistry | None = None):
        self.db = db
        self.account_service = AccountService(db)
        self.locks = locks or account_locks

    def _validate_account(self, account_id: int, currency: str) -> Account:
        """Validate that an account exists, is active, and matches currency."""
        account = self.account_service.get_active_account(account_id)
        if account.currency != currency:
            raise ValidationError(
                f"Account {account_id} currency is {account.currency}, "
                f"transaction currency is {currency}"
            )
        return account

    def _commit(self, record):
        """
        Stamp and commit one posting.

        recorded_at is set under the commit gate, so a closing run
        cannot pick a read_as_of between the stamp and the commit.
        """
        self.db.add(record)
        with commit_gate:
            record.recorded_at = datetime.utcnow()
            try:
                self.db.commit()
            except SQLAlchemyError:
                self.db.rollback()
                raise

    def deposit(self, request: DepositRequest) -> Deposit:
        """Post a cash deposit (a credit) to an account."""
        with self.locks.hold(request.account_id):
            account = self._validate_account(
                request.account_id, request.currency
            )
            deposit = Deposit(
                account_id=account.id,
                deposit_amount=request.amount,
                currency=request.currency,
                deposit_date=request.posted_at or datetime.utcnow(),
                deposit_by=request.posted_by,
                remarks=request.remarks,
            )
            self._commit(deposit)

        logger.info(
            f"Deposit {deposit.deposit_id}: {request.amount} "
            f"{request.currency} to account {account.id}"
        )
        return deposit

    def withdraw(self, request: WithdrawalRequest) -> Withdrawal:
        """Post a cash withdrawal (a debit) from an account."""
        with self.locks.hold(request.account_id):
            account = self._validate_account(
                request.account_id, request.currency
            )
            withdrawal = Withdrawal(
                account_id=account.id,
                withdrawal_amount=request.amount,
                currency=request.currency,
                withdrawal_date=request.posted_at or datetime.utcnow(),
                withdrawal_by=request.posted_by,
                remarks=request.remarks,
            )
            self._commit(withdrawal)

        logger.info(
            f"Withdrawal {withdrawal.withdrawal_id}: {request.amount} "
            f"{request.currency} from account {account.id}"
        )
        return withdrawal

    def transfer(self, request: TransferRequest) -> Transfer:
        """
        Transfer money between two accounts.

        Both account locks are held for the whole posting. The
        amount is in the source account's currency.
        """
        if request.from_account_id == request.to_account_id:
            raise ValidationError("Cannot transfer to the same account")
        if request.amount != request.amount_confirm:
            raise ValidationError("amount and amount_confirm do not match")

        with self.locks.hold(request.from_account_id, request.to_account_id):
            source = self.account_service.get_active_account(
                request.from_account_id
            )
            destination = self.account_service.get_active_account(
                request.to_account_id
            )
            if (
                source.currency == destination.currency
                and request.exchange_rate != 1
            ):
                raise ValidationError(
                    "exchange_rate must be 1 between accounts "
                    f"of the same currency ({source.currency})"
                )

            transfer = Transfer(
                from_account=source.id,
                to_account=destination.id,
                amount=request.amount,
                charges=request.charges,
                exchange_rate=request.exchange_rate,
                transfer_date=request.posted_at or datetime.utcnow(),
                trx=request.trx,
                remarks=request.remarks,
                added_by=request.posted_by,
            )
            self._commit(transfer)

        logger.info(
            f"Transfer {transfer.id}: {request.amount} {source.currency} "
            f"from account {source.id} to account {destination.id}"
        )
        return transfer
