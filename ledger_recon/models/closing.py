"""
Closing-day models.

A closing run captures every account's balance as of the end of a
day. The run has a state machine; the snapshots it writes are
append-only and never modified. Re-closing a date (with an audited
override) creates a new run with a higher revision and new snapshot
rows; earlier rows stay as they were.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    String, Boolean, Date, DateTime, Integer, Numeric, Text,
    ForeignKey, UniqueConstraint,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger_recon.models.base import Base
from ledger_recon.models.enums import ClosingStatus


# Valid state transitions: the source of truth for the state machine.
# FAILED is only reachable before anything is persisted; once a run is
# PERSISTED a notification problem cannot undo it.
VALID_TRANSITIONS: dict[ClosingStatus, set[ClosingStatus]] = {
    ClosingStatus.REQUESTED: {ClosingStatus.COMPUTING, ClosingStatus.FAILED},
    ClosingStatus.COMPUTING: {ClosingStatus.PERSISTED, ClosingStatus.FAILED},
    ClosingStatus.PERSISTED: {
        ClosingStatus.NOTIFIED,
        ClosingStatus.NOTIFICATION_FAILED,
    },
    ClosingStatus.NOTIFIED: set(),
    ClosingStatus.NOTIFICATION_FAILED: set(),
    ClosingStatus.FAILED: set(),
}

# Runs in these states hold snapshots for their date
CLOSED_STATUSES = frozenset({
    ClosingStatus.PERSISTED,
    ClosingStatus.NOTIFIED,
    ClosingStatus.NOTIFICATION_FAILED,
})


class ClosingRun(Base):
    __tablename__ = "closing_runs"
    __table_args__ = (
        UniqueConstraint("close_date", "revision", name="uq_closing_run_revision"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    close_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    reset_date: Mapped[date] = mapped_column(Date, nullable=False)
    revision: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    status: Mapped[ClosingStatus] = mapped_column(
        SAEnum(
            ClosingStatus,
            name="closing_status_enum",
            create_constraint=True,
        ),
        nullable=False,
        default=ClosingStatus.REQUESTED,
    )
    # Every account in the run is read as of this instant
    read_as_of: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    is_override: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    override_reason: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    requested_by: Mapped[str] = mapped_column(String(100), nullable=False)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    notification_error: Mapped[str | None] = mapped_column(
        Text, nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    persisted_at: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True
    )
    notified_at: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True
    )

    snapshots: Mapped[list["ClosingSnapshot"]] = relationship(
        back_populates="run", order_by="ClosingSnapshot.account_id"
    )

    def can_transition_to(self, new_status: ClosingStatus) -> bool:
        """Check if a state transition is valid."""
        return new_status in VALID_TRANSITIONS.get(self.status, set())

    def __repr__(self) -> str:
        return (
            f"<ClosingRun {self.close_date} r{self.revision} "
            f"({self.status.value})>"
        )


class ClosingSnapshot(Base):
    """
    One account's balance at the end of a closed day.

    Written once, in the same database transaction as every other
    snapshot of the run.
    """

    __tablename__ = "closing_snapshots"
    __table_args__ = (
        UniqueConstraint(
            "account_id", "close_date", "revision",
            name="uq_closing_snapshot_key",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    run_id: Mapped[int] = mapped_column(
        ForeignKey("closing_runs.id"), nullable=False, index=True
    )
    account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id"), nullable=False, index=True
    )
    close_date: Mapped[date] = mapped_column(Date, nullable=False)
    revision: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    total_credits: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False
    )
    total_debits: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False
    )
    balance: Mapped[Decimal] = mapped_column(Numeric(19, 4), nullable=False)
    entry_count: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    run: Mapped["ClosingRun"] = relationship(back_populates="snapshots")

    def __repr__(self) -> str:
        return (
            f"<ClosingSnapshot account={self.account_id} "
            f"{self.close_date} r{self.revision} {self.balance}>"
        )
