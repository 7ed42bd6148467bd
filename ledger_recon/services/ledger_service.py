"""
Ledger service — the aggregator at the core of the system.

This service builds the one ledger every report, statement and
closing run reads from:
1. Validate the query before any source is touched
2. Fan the query out to every source adapter in parallel
3. Convert every entry into its account's ledger currency
4. Sort everything into one deterministic total order
5. Summarize in a single pass

Balances are never stored. They are always derived from the
source records, so they are correct as long as the records are.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from time import monotonic

from sqlalchemy import select
from sqlalchemy.orm import Session

from ledger_recon.config import get_settings
from ledger_recon.models.account import Account
from ledger_recon.models.enums import EntryType
from ledger_recon.schemas.ledger import (
    ZERO,
    BalanceSummary,
    LedgerEntry,
    LedgerQuery,
    LedgerResult,
    SourceEntry,
    SourceWarning,
)
from ledger_recon.services.currency_service import (
    CurrencyNormalizer,
    SqlRateProvider,
)
from ledger_recon.services.exceptions import (
    AccountNotFound,
    RateUnavailable,
    SourceUnavailable,
    StatementAborted,
    ValidationError,
)
from ledger_recon.services.sources import (
    AdapterRegistry,
    SourceAdapter,
    TypeFilter,
    build_default_registry,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccountInfo:
    id: int
    name: str
    currency: str
    is_archived: bool


def effective_reset_date(requested: date | None) -> date:
    """
    The floor a request actually runs with.

    A caller may ask for a later reset date than the configured one,
    never an earlier one.
    """
    configured = get_settings().PERMANENT_RESET_DATE
    if requested is None:
        return configured
    return max(requested, configured)


class LedgerService:
    """
    Builds the aggregated ledger.

    The service takes a database session as a constructor argument.
    Adapters run on a thread pool, each with its own session bound
    to the same engine; with max_workers=1 they run inline on the
    caller's session instead.
    """

    def __init__(
        self,
        db: Session,
        registry: AdapterRegistry | None = None,
        normalizer: CurrencyNormalizer | None = None,
        max_workers: int | None = None,
        timeout: float | None = None,
    ):
        settings = get_settings()
        self.db = db
        self.registry = registry or build_default_registry()
        self.normalizer = normalizer or CurrencyNormalizer(
            SqlRateProvider(db), settings.BASE_CURRENCY
        )
        self.max_workers = (
            max_workers if max_workers is not None
            else settings.SOURCE_MAX_WORKERS
        )
        self.timeout = (
            timeout if timeout is not None
            else settings.SOURCE_TIMEOUT_SECONDS
        )

    # --- Accounts ---

    def load_accounts(self) -> dict[int, AccountInfo]:
        accounts = self.db.execute(
            select(Account).order_by(Account.id)
        ).scalars().all()
        return {
            a.id: AccountInfo(a.id, a.name, a.currency, a.is_archived)
            for a in accounts
        }

    # --- Aggregation ---

    def validate(self, query: LedgerQuery) -> TypeFilter:
        """
        Reject a bad query before any adapter runs.

        Returns the parsed type filter.
        """
        if (
            query.from_date is not None
            and query.to_date is not None
            and query.to_date < query.from_date
        ):
            raise ValidationError(
                f"toDate {query.to_date.isoformat()} is earlier than "
                f"fromDate {query.from_date.isoformat()}"
            )
        return self.registry.parse_type_filter(query.type_filter)

    def build_ledger(
        self,
        query: LedgerQuery,
        strict: bool = False,
        accounts: dict[int, AccountInfo] | None = None,
    ) -> LedgerResult:
        """
        Build the sorted, converted ledger for a query.

        In strict mode any source failure or missing rate raises
        StatementAborted. Otherwise failures are collected, the
        affected data is left out and the result is flagged degraded.
        """
        query = query.model_copy(
            update={"reset_date": effective_reset_date(query.reset_date)}
        )
        type_filter = self.validate(query)

        if accounts is None:
            accounts = self.load_accounts()
        if query.account_id is not None and query.account_id not in accounts:
            raise AccountNotFound(query.account_id)

        currencies = {a.id: a.currency for a in accounts.values()}
        adapters = [
            a for a in self.registry.adapters() if type_filter.may_include(a)
        ]

        source_entries, failures = self._fetch_all(
            adapters, query, type_filter, currencies
        )

        warnings = []
        for failure in failures:
            if strict:
                raise StatementAborted(
                    failure.reason,
                    account_id=query.account_id,
                    source=failure.source,
                    on_date=query.to_date,
                )
            logger.warning(f"Ledger degraded: {failure}")
            warnings.append(SourceWarning(
                source=failure.source,
                account_id=query.account_id,
                on_date=query.to_date,
                message=failure.reason,
            ))

        entries = self._normalize(source_entries, accounts, strict, warnings)
        entries.sort(key=lambda e: e.sort_key)

        return LedgerResult(
            entries=entries,
            summary=self.summarize(
                entries,
                query.floor_date,
                query.to_date,
                query.account_id,
                currencies.get(query.account_id),
            ),
            degraded=bool(warnings),
            warnings=warnings,
        )

    def _run_adapter(
        self,
        adapter: SourceAdapter,
        query: LedgerQuery,
        type_filter: TypeFilter,
        currencies: dict[int, str],
    ) -> list[SourceEntry]:
        """Run one adapter on its own session (pool worker)."""
        session = Session(bind=self.db.get_bind())
        try:
            return adapter.list_entries(session, query, type_filter, currencies)
        finally:
            session.close()

    def _fetch_all(
        self,
        adapters: list[SourceAdapter],
        query: LedgerQuery,
        type_filter: TypeFilter,
        currencies: dict[int, str],
    ) -> tuple[list[SourceEntry], list[SourceUnavailable]]:
        """
        Query every adapter and wait for each result or failure.

        This is the only synchronization point: nothing is sorted
        until every adapter has answered, failed, or run out of time.
        """
        entries: list[SourceEntry] = []
        failures: list[SourceUnavailable] = []

        if self.max_workers <= 1:
            for adapter in adapters:
                try:
                    entries.extend(adapter.list_entries(
                        self.db, query, type_filter, currencies
                    ))
                except Exception as e:
                    logger.exception(f"Source '{adapter.name}' failed")
                    failures.append(SourceUnavailable(adapter.name, str(e)))
            return entries, failures

        executor = ThreadPoolExecutor(
            max_workers=min(self.max_workers, max(len(adapters), 1)),
            thread_name_prefix="ledger-source",
        )
        try:
            futures = [
                (adapter, executor.submit(
                    self._run_adapter, adapter, query, type_filter, currencies
                ))
                for adapter in adapters
            ]
            deadline = monotonic() + self.timeout
            for adapter, future in futures:
                remaining = max(deadline - monotonic(), 0)
                try:
                    entries.extend(future.result(timeout=remaining))
                except FutureTimeout:
                    future.cancel()
                    logger.error(
                        f"Source '{adapter.name}' timed out after {self.timeout}s"
                    )
                    failures.append(SourceUnavailable(
                        adapter.name, f"timed out after {self.timeout}s"
                    ))
                except Exception as e:
                    logger.exception(f"Source '{adapter.name}' failed")
                    failures.append(SourceUnavailable(adapter.name, str(e)))
        finally:
            # Never block on an adapter that is still hanging
            executor.shutdown(wait=False, cancel_futures=True)

        return entries, failures

    def _skip(
        self,
        source: SourceEntry,
        message: str,
        strict: bool,
        warnings: list[SourceWarning],
    ):
        """Abort in strict mode; otherwise leave the entry out with a warning."""
        if strict:
            raise StatementAborted(
                message,
                account_id=source.account_id,
                source=source.category.value,
                on_date=source.timestamp.date(),
            )
        logger.warning(
            f"Dropping {source.category.value} {source.reference} "
            f"for account {source.account_id}: {message}"
        )
        warnings.append(SourceWarning(
            source=source.category.value,
            account_id=source.account_id,
            on_date=source.timestamp.date(),
            message=message,
        ))

    def _normalize(
        self,
        source_entries: list[SourceEntry],
        accounts: dict[int, AccountInfo],
        strict: bool,
        warnings: list[SourceWarning],
    ) -> list[LedgerEntry]:
        entries = []
        for source in source_entries:
            account = accounts.get(source.account_id)
            if account is None:
                self._skip(
                    source,
                    f"entry {source.reference} references unknown account",
                    strict,
                    warnings,
                )
                continue

            try:
                converted = self.normalizer.convert(
                    source.original_amount,
                    source.original_currency,
                    account.currency,
                    source.timestamp.date(),
                )
            except RateUnavailable as e:
                self._skip(source, str(e), strict, warnings)
                continue
            if converted == ZERO:
                # An entry must move money on exactly one side
                self._skip(
                    source,
                    f"{source.original_amount} {source.original_currency} "
                    f"rounds to zero in {account.currency}",
                    strict,
                    warnings,
                )
                continue

            is_credit = source.direction == EntryType.CREDIT
            entries.append(LedgerEntry(
                account_id=account.id,
                account_name=account.name,
                timestamp=source.timestamp,
                category=source.category,
                subcategory=source.subcategory,
                credit=converted if is_credit else ZERO,
                debit=ZERO if is_credit else converted,
                original_amount=source.original_amount,
                original_currency=source.original_currency,
                converted_amount=converted,
                ledger_currency=account.currency,
                description=source.description,
                reference=source.reference,
                actor=source.actor,
                remarks=source.remarks,
                source_id=source.source_id,
                sub_index=source.sub_index,
            ))
        return entries

    # --- Summary ---

    @staticmethod
    def summarize(
        entries: list[LedgerEntry],
        from_date: date,
        to_date: date | None = None,
        account_id: int | None = None,
        currency: str | None = None,
    ) -> BalanceSummary:
        """Totals over the entries in one pass, in their ledger currency."""
        total_credits = Decimal("0")
        total_debits = Decimal("0")
        total_transfers = Decimal("0")
        for entry in entries:
            total_credits += entry.credit
            total_debits += entry.debit
            if entry.is_transfer:
                total_transfers += entry.amount

        return BalanceSummary(
            account_id=account_id,
            currency=currency,
            from_date=from_date,
            to_date=to_date,
            total_credits=total_credits,
            total_debits=total_debits,
            total_transfers=total_transfers,
            net_balance=total_credits - total_debits,
            entry_count=len(entries),
        )

    def summarize_in_currency(
        self,
        entries: list[LedgerEntry],
        currency: str,
        from_date: date,
        to_date: date | None = None,
    ) -> tuple[BalanceSummary, list[SourceWarning]]:
        """
        Totals over entries from accounts in different currencies.

        Each entry is converted from its original amount into
        `currency` at the rate of its own date. An entry with no rate
        stays in the ledger but is left out of the totals, with a
        warning.
        """
        total_credits = Decimal("0")
        total_debits = Decimal("0")
        total_transfers = Decimal("0")
        counted = 0
        warnings = []
        for entry in entries:
            try:
                amount = self.normalizer.convert(
                    entry.original_amount,
                    entry.original_currency,
                    currency,
                    entry.timestamp.date(),
                )
            except RateUnavailable as e:
                logger.warning(
                    f"Leaving {entry.reference} out of the {currency} "
                    f"summary: {e}"
                )
                warnings.append(SourceWarning(
                    source=entry.category.value,
                    account_id=entry.account_id,
                    on_date=entry.timestamp.date(),
                    message=f"{e}; left out of the {currency} totals",
                ))
                continue
            counted += 1
            if entry.credit != ZERO:
                total_credits += amount
            else:
                total_debits += amount
            if entry.is_transfer:
                total_transfers += amount

        summary = BalanceSummary(
            currency=currency,
            from_date=from_date,
            to_date=to_date,
            total_credits=total_credits,
            total_debits=total_debits,
            total_transfers=total_transfers,
            net_balance=total_credits - total_debits,
            entry_count=counted,
        )
        return summary, warnings
