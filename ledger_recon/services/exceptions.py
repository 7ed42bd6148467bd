"""
Domain errors for the ledger services.

Reporting paths catch SourceUnavailable / RateUnavailable and
degrade; statement and closing paths let them surface as
StatementAborted. ValidationError and AccountNotFound subclass
ValueError so routers can keep a single `except ValueError` for
bad input.
"""

from datetime import date


class LedgerServiceError(Exception):
    """Base exception for all ledger service failures."""


class ValidationError(LedgerServiceError, ValueError):
    """Raised when a request is rejected before any source is queried."""


class AccountNotFound(LedgerServiceError, ValueError):
    """Raised when an account id does not resolve."""

    def __init__(self, account_id: int):
        self.account_id = account_id
        super().__init__(f"Account {account_id} not found")


class SourceUnavailable(LedgerServiceError):
    """Raised when one source adapter failed or timed out."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Source '{source}' unavailable: {reason}")


class RateUnavailable(LedgerServiceError):
    """Raised when no exchange rate exists at or before a date."""

    def __init__(self, currency: str, as_of: date):
        self.currency = currency
        self.as_of = as_of
        super().__init__(
            f"No exchange rate for {currency} on or before {as_of.isoformat()}"
        )


class StatementAborted(LedgerServiceError):
    """
    Raised in strict mode when a statement cannot be complete.

    Names the account, source and date that caused the abort.
    """

    def __init__(
        self,
        reason: str,
        account_id: int | None = None,
        source: str | None = None,
        on_date: date | None = None,
    ):
        self.reason = reason
        self.account_id = account_id
        self.source = source
        self.on_date = on_date
        parts = [reason]
        if account_id is not None:
            parts.append(f"account={account_id}")
        if source is not None:
            parts.append(f"source={source}")
        if on_date is not None:
            parts.append(f"date={on_date.isoformat()}")
        super().__init__(" | ".join(parts))


class SnapshotConflict(LedgerServiceError):
    """Raised when a closing run is requested for an already-closed date."""

    def __init__(self, close_date: date, revision: int):
        self.close_date = close_date
        self.revision = revision
        super().__init__(
            f"{close_date.isoformat()} is already closed (revision {revision}); "
            f"pass override with a reason to close it again"
        )


class NotificationFailed(LedgerServiceError):
    """Raised by a notifier. Never rolls back a persisted snapshot."""


class LedgerInvariantError(LedgerServiceError):
    """Raised when a computed ledger breaks one of its own invariants."""


class ClosingNotFound(LedgerServiceError, ValueError):
    """Raised when a date has no closing run."""

    def __init__(self, close_date: date):
        self.close_date = close_date
        super().__init__(f"No closing run for {close_date.isoformat()}")
