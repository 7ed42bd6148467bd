"""
Closing service — closes a day and sends the statement.

A closing run moves through a state machine:

    REQUESTED -> COMPUTING -> PERSISTED -> NOTIFIED
                                        -> NOTIFICATION_FAILED
    REQUESTED / COMPUTING -> FAILED

Every account is read as of one instant (the run's read_as_of), so
a posting that lands while the run is computing is either in every
figure or in none. All snapshots and the PERSISTED transition are
committed together. Notification happens after that commit and can
never undo it.

The caller does not commit; this service owns the run's
transactions because each state has to survive the next step
failing.
"""

import logging
from collections import defaultdict
from datetime import date, datetime

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ledger_recon.config import get_settings
from ledger_recon.models.audit_log import AuditLog
from ledger_recon.models.closing import (
    CLOSED_STATUSES,
    ClosingRun,
    ClosingSnapshot,
)
from ledger_recon.models.enums import ClosingStatus
from ledger_recon.schemas.closing import (
    ClosingStatementResponse,
    SnapshotResponse,
)
from ledger_recon.schemas.ledger import LedgerEntry, LedgerQuery
from ledger_recon.services.exceptions import (
    ClosingNotFound,
    LedgerInvariantError,
    SnapshotConflict,
    ValidationError,
)
from ledger_recon.services.ledger_service import (
    LedgerService,
    effective_reset_date,
)
from ledger_recon.services.locks import (
    AccountLockRegistry,
    closing_locks,
    commit_gate,
)
from ledger_recon.services.notification_service import LogNotifier, Notifier
from ledger_recon.services.statement_service import running_balances

logger = logging.getLogger(__name__)


class ClosingService:

    def __init__(
        self,
        db: Session,
        notifier: Notifier | None = None,
        ledger_service: LedgerService | None = None,
        locks: AccountLockRegistry | None = None,
        recipient: str | None = None,
    ):
        self.db = db
        self.notifier = notifier or LogNotifier()
        self.ledger_service = ledger_service or LedgerService(db)
        self.locks = locks or closing_locks
        self.recipient = recipient or get_settings().CLOSING_RECIPIENT

    def close_day_and_email(
        self,
        close_date: date,
        reset_date: date | None = None,
        override: bool = False,
        override_reason: str | None = None,
        requested_by: str = "system",
    ) -> ClosingStatementResponse:
        """
        Close a day: snapshot every account and send the statement.

        Raises ValidationError for a future date or an override
        without a reason, SnapshotConflict if the date is already
        closed and override is not set, StatementAborted if any
        account cannot be computed completely.
        """
        if close_date > date.today():
            raise ValidationError(
                f"Cannot close {close_date.isoformat()}: date is in the future"
            )
        if override and not (override_reason or "").strip():
            raise ValidationError("override requires a non-empty reason")

        with self.locks.hold(close_date):
            closed = self._latest_run(close_date, CLOSED_STATUSES)
            if closed is not None and not override:
                raise SnapshotConflict(close_date, closed.revision)

            run = self._start_run(
                close_date,
                effective_reset_date(reset_date),
                closed,
                override_reason if override else None,
                requested_by,
            )

            try:
                snapshots = self._compute_snapshots(run)
            except Exception as e:
                # A run never stays in COMPUTING
                self.db.rollback()
                self._fail(run, e)
                raise

            try:
                self.db.add_all(snapshots)
                self._transition(run, ClosingStatus.PERSISTED)
                run.persisted_at = datetime.utcnow()
                self.db.commit()
            except SQLAlchemyError as e:
                self.db.rollback()
                self._fail(run, e)
                raise

            logger.info(
                f"Closing {close_date} r{run.revision}: persisted "
                f"{len(snapshots)} snapshot(s)"
            )

            statement = self._statement(run, snapshots)
            self._notify(run, statement)
            return statement.model_copy(update={"status": run.status})

    def get_closing(self, close_date: date) -> ClosingRun:
        """Latest run for a date, whatever its status."""
        run = self._latest_run(close_date)
        if run is None:
            raise ClosingNotFound(close_date)
        return run

    # --- Run lifecycle ---

    def _latest_run(
        self, close_date: date, statuses=None
    ) -> ClosingRun | None:
        stmt = select(ClosingRun).where(ClosingRun.close_date == close_date)
        if statuses is not None:
            stmt = stmt.where(ClosingRun.status.in_(statuses))
        return self.db.execute(
            stmt.order_by(ClosingRun.revision.desc()).limit(1)
        ).scalar_one_or_none()

    def _start_run(
        self,
        close_date: date,
        reset_date: date,
        closed: ClosingRun | None,
        override_reason: str | None,
        requested_by: str,
    ) -> ClosingRun:
        """Record the run as REQUESTED, then move it to COMPUTING."""
        # Failed runs keep their revision too
        last_revision = self.db.execute(
            select(func.max(ClosingRun.revision)).where(
                ClosingRun.close_date == close_date
            )
        ).scalar()

        # No posting can be stamped but uncommitted at this instant
        with commit_gate:
            read_as_of = datetime.utcnow()

        run = ClosingRun(
            close_date=close_date,
            reset_date=reset_date,
            revision=(last_revision or 0) + 1,
            status=ClosingStatus.REQUESTED,
            read_as_of=read_as_of,
            is_override=override_reason is not None,
            override_reason=override_reason,
            requested_by=requested_by,
        )
        self.db.add(run)
        self.db.flush()
        if closed is not None:
            self.db.add(AuditLog(
                event_type="closing.override",
                run_id=run.id,
                close_date=close_date,
                actor=requested_by,
                details=(
                    f"{close_date.isoformat()} re-closed as revision "
                    f"{run.revision} over revision {closed.revision} by "
                    f"{requested_by}: {override_reason}"
                ),
            ))
            logger.warning(
                f"Closing {close_date} overridden by {requested_by}: "
                f"{override_reason}"
            )
        self.db.commit()
        logger.info(f"Closing {close_date} r{run.revision}: requested")

        self._transition(run, ClosingStatus.COMPUTING)
        self.db.commit()
        return run

    def _transition(self, run: ClosingRun, new_status: ClosingStatus):
        if not run.can_transition_to(new_status):
            raise LedgerInvariantError(
                f"Closing run {run.id} cannot go from "
                f"{run.status.value} to {new_status.value}"
            )
        run.status = new_status

    def _fail(self, run: ClosingRun, error: Exception):
        logger.error(
            f"Closing {run.close_date} r{run.revision} failed: {error}"
        )
        self._transition(run, ClosingStatus.FAILED)
        run.error_message = str(error)
        self.db.add(AuditLog(
            event_type="closing.failed",
            run_id=run.id,
            close_date=run.close_date,
            actor=run.requested_by,
            details=(
                f"{run.close_date.isoformat()} revision {run.revision}: "
                f"{error}"
            ),
        ))
        self.db.commit()

    # --- Computing ---

    def _compute_snapshots(self, run: ClosingRun) -> list[ClosingSnapshot]:
        """
        One strict aggregation for all accounts, archived included.

        Every account gets a snapshot, including accounts with no
        entries at all.
        """
        accounts = self.ledger_service.load_accounts()
        result = self.ledger_service.build_ledger(
            LedgerQuery(
                reset_date=run.reset_date,
                to_date=run.close_date,
                read_as_of=run.read_as_of,
            ),
            strict=True,
            accounts=accounts,
        )

        by_account: dict[int, list[LedgerEntry]] = defaultdict(list)
        for entry in result.entries:
            by_account[entry.account_id].append(entry)

        snapshots = []
        for account in accounts.values():
            entries = by_account.get(account.id, [])
            summary = LedgerService.summarize(
                entries, run.reset_date, run.close_date, account.id,
                account.currency,
            )
            running = running_balances(entries)
            if running and running[-1] != summary.net_balance:
                raise LedgerInvariantError(
                    f"Running balance {running[-1]} does not match "
                    f"{summary.net_balance} for account {account.id}"
                )
            snapshots.append(ClosingSnapshot(
                run_id=run.id,
                account_id=account.id,
                close_date=run.close_date,
                revision=run.revision,
                currency=account.currency,
                total_credits=summary.total_credits,
                total_debits=summary.total_debits,
                balance=summary.net_balance,
                entry_count=summary.entry_count,
            ))
        return snapshots

    # --- Notification ---

    def _statement(
        self, run: ClosingRun, snapshots: list[ClosingSnapshot]
    ) -> ClosingStatementResponse:
        return ClosingStatementResponse(
            run_id=run.id,
            close_date=run.close_date,
            reset_date=run.reset_date,
            revision=run.revision,
            status=run.status,
            account_count=len(snapshots),
            snapshots=[SnapshotResponse.model_validate(s) for s in snapshots],
        )

    def _notify(self, run: ClosingRun, statement: ClosingStatementResponse):
        """
        Send the statement. A failure is recorded on the run and
        logged; the snapshots stay persisted.
        """
        subject = (
            f"Closing statement {run.close_date.isoformat()} "
            f"(revision {run.revision})"
        )
        try:
            self.notifier.send(self.recipient, subject, statement)
        except Exception as e:
            logger.exception(
                f"Closing {run.close_date} r{run.revision}: notification failed"
            )
            self._transition(run, ClosingStatus.NOTIFICATION_FAILED)
            run.notification_error = str(e)
        else:
            self._transition(run, ClosingStatus.NOTIFIED)
            run.notified_at = datetime.utcnow()
            logger.info(f"Closing {run.close_date} r{run.revision}: notified")
        self.db.commit()
