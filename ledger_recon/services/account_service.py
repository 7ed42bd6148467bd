"""
Account service — creates, lists and archives accounts.

Accounts hold no balance. Balance queries go through the
statement service, which derives them from the source records.
"""

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from ledger_recon.models.account import Account
from ledger_recon.schemas.account import AccountCreate
from ledger_recon.services.exceptions import AccountNotFound, ValidationError

logger = logging.getLogger(__name__)


class AccountService:

    def __init__(self, db: Session):
        self.db = db

    def create_account(self, request: AccountCreate) -> Account:
        """Create a new account. Names are unique."""
        existing = self.db.execute(
            select(Account).where(Account.name == request.name)
        ).scalar_one_or_none()

        if existing:
            raise ValidationError(
                f"Account with name '{request.name}' already exists"
            )

        account = Account(name=request.name, currency=request.currency)
        self.db.add(account)
        self.db.flush()
        logger.info(f"Created account {account.id} '{account.name}' ({account.currency})")
        return account

    def get_account(self, account_id: int) -> Account:
        """Get an account by ID."""
        account = self.db.get(Account, account_id)
        if not account:
            raise AccountNotFound(account_id)
        return account

    def list_accounts(self, include_archived: bool = False) -> list[Account]:
        stmt = select(Account).order_by(Account.name)
        if not include_archived:
            stmt = stmt.where(Account.is_archived.is_(False))
        return list(self.db.execute(stmt).scalars().all())

    def archive_account(self, account_id: int) -> Account:
        """
        Archive an account.

        Archived accounts reject new postings but keep their history:
        they still appear in balances and closing snapshots.
        """
        account = self.get_account(account_id)
        if account.is_archived:
            raise ValidationError(f"Account {account_id} is already archived")

        account.is_archived = True
        account.archived_at = datetime.utcnow()
        self.db.flush()
        logger.info(f"Archived account {account.id} '{account.name}'")
        return account

    def get_active_account(self, account_id: int) -> Account:
        """Get an account that can take new postings."""
        account = self.get_account(account_id)
        if account.is_archived:
            raise ValidationError(
                f"Account {account_id} is archived and cannot take postings"
            )
        return account
