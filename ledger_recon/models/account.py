"""
Account model.

An account is where money sits: a bank account, a cash box, a
card. Its balance is never stored; it is derived from the source
records posted against it. Accounts are never deleted, only
archived.
"""

from datetime import datetime

from sqlalchemy import String, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from ledger_recon.models.base import Base


class Account(Base):
    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    # Ledger currency: every entry against this account is
    # converted into it before balances are computed.
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    is_archived: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    archived_at: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True, default=None
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    def __repr__(self) -> str:
        state = "archived" if self.is_archived else "active"
        return f"<Account {self.name} {self.currency} ({state})>"
