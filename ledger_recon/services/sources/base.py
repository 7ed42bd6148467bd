"""
Source adapter contract and registry.

Every transaction category lives in its own table with its own
column names and its own idea of which way money moves. A source
adapter hides all of that behind one method, list_entries(), which
returns SourceEntry rows with a direction and an amount in the
row's own currency.

Adding a category means writing one adapter class and decorating
it with @register_adapter. Nothing above the registry changes.
"""

from collections.abc import Iterable, Mapping

from sqlalchemy import select, or_
from sqlalchemy.orm import Session

from ledger_recon.models.enums import EntryType, SourceCategory
from ledger_recon.schemas.ledger import LedgerQuery, SourceEntry
from ledger_recon.services.exceptions import ValidationError


class TypeFilter:
    """
    A parsed report type filter.

    Accepted values: empty (everything), "credit" / "debit" (money in
    or out, transfers excluded), "transfer", a category value such as
    "salary", or a subcategory value such as "evisa_charge".
    """

    ALL = "all"
    DIRECTION = "direction"
    TRANSFER = "transfer"
    CATEGORY = "category"
    SUBCATEGORY = "subcategory"

    def __init__(self, kind: str, value: str | None = None):
        self.kind = kind
        self.value = value

    def __repr__(self) -> str:
        return f"<TypeFilter {self.kind}={self.value}>"

    def may_include(self, adapter: "SourceAdapter") -> bool:
        """False when nothing this adapter produces could match."""
        if self.kind == self.TRANSFER:
            return adapter.category == SourceCategory.TRANSFER
        if self.kind == self.CATEGORY:
            return adapter.category.value == self.value
        if self.kind == self.SUBCATEGORY:
            return self.value in adapter.subcategories
        return True

    def matches(self, entry: SourceEntry) -> bool:
        if self.kind == self.ALL:
            return True
        is_transfer = entry.category == SourceCategory.TRANSFER
        if self.kind == self.TRANSFER:
            return is_transfer
        if self.kind == self.DIRECTION:
            if is_transfer:
                return False
            return entry.direction.value.lower() == self.value
        if self.kind == self.CATEGORY:
            return entry.category.value == self.value
        return entry.subcategory == self.value


class SourceAdapter:
    """
    Base class for one source category.

    Subclasses set the class attributes describing their table and
    implement to_entries(). The base class builds the query, applies
    the reset-date floor, the account filter and the read cut-off,
    and drops anything the type filter rejects.
    """

    category: SourceCategory
    model: type
    date_column: str
    account_columns: tuple[str, ...] = ("account_id",)
    # Every column to_entries() reads; checked by source validation
    columns: tuple[str, ...] = ()
    subcategories: tuple[str, ...] = ()

    @property
    def name(self) -> str:
        return self.category.value

    @property
    def table_name(self) -> str:
        return self.model.__tablename__

    def required_columns(self) -> set[str]:
        return {
            self.date_column,
            "recorded_at",
            *self.account_columns,
            *self.columns,
        }

    def extra_criteria(self) -> list:
        """Additional WHERE clauses, e.g. only paid cheques."""
        return []

    def build_query(self, query: LedgerQuery):
        model = self.model
        date_col = getattr(model, self.date_column)
        stmt = select(model).where(date_col >= query.start)
        if query.end is not None:
            stmt = stmt.where(date_col < query.end)
        if query.account_id is not None:
            stmt = stmt.where(or_(*[
                getattr(model, column) == query.account_id
                for column in self.account_columns
            ]))
        if query.read_as_of is not None:
            stmt = stmt.where(model.recorded_at <= query.read_as_of)
        for criterion in self.extra_criteria():
            stmt = stmt.where(criterion)
        primary_key = model.__mapper__.primary_key[0]
        return stmt.order_by(date_col, primary_key)

    def list_entries(
        self,
        session: Session,
        query: LedgerQuery,
        type_filter: TypeFilter,
        currencies: Mapping[int, str],
    ) -> list[SourceEntry]:
        """
        Return this category's entries for the query.

        The floor is checked again on every produced entry: a row
        can expand into entries for other accounts, and an adapter
        must never leak anything dated before the reset date.
        """
        rows = session.execute(self.build_query(query)).scalars().all()
        entries = []
        for row in rows:
            for entry in self.to_entries(row, currencies):
                if entry.timestamp < query.start:
                    continue
                if query.end is not None and entry.timestamp >= query.end:
                    continue
                if (
                    query.account_id is not None
                    and entry.account_id != query.account_id
                ):
                    continue
                if type_filter.matches(entry):
                    entries.append(entry)
        return entries

    def to_entries(
        self, row, currencies: Mapping[int, str]
    ) -> Iterable[SourceEntry]:
        raise NotImplementedError


class AdapterRegistry:
    """The set of adapters one aggregator fans out to."""

    def __init__(self, adapters: Iterable[SourceAdapter] = ()):
        self._adapters: dict[str, SourceAdapter] = {}
        for adapter in adapters:
            self.register(adapter)

    def register(self, adapter: SourceAdapter) -> SourceAdapter:
        if adapter.name in self._adapters:
            raise ValueError(f"Adapter '{adapter.name}' is already registered")
        self._adapters[adapter.name] = adapter
        return adapter

    def adapters(self) -> list[SourceAdapter]:
        return list(self._adapters.values())

    def __len__(self) -> int:
        return len(self._adapters)

    def known_subcategories(self) -> set[str]:
        return {
            sub for adapter in self._adapters.values()
            for sub in adapter.subcategories
        }

    def parse_type_filter(self, value: str | None) -> TypeFilter:
        """
        Turn a raw filter value into a TypeFilter.

        Raises ValidationError for values no adapter can produce.
        """
        if value is None or not value.strip():
            return TypeFilter(TypeFilter.ALL)
        value = value.strip().lower()
        if value in (EntryType.CREDIT.value.lower(), EntryType.DEBIT.value.lower()):
            return TypeFilter(TypeFilter.DIRECTION, value)
        if value == SourceCategory.TRANSFER.value:
            return TypeFilter(TypeFilter.TRANSFER, value)
        if value in {a.category.value for a in self._adapters.values()}:
            return TypeFilter(TypeFilter.CATEGORY, value)
        if value in self.known_subcategories():
            return TypeFilter(TypeFilter.SUBCATEGORY, value)
        raise ValidationError(f"Unknown transaction type filter '{value}'")


# Adapter classes registered by @register_adapter, in import order
BUILTIN_ADAPTERS: list[type[SourceAdapter]] = []


def register_adapter(cls: type[SourceAdapter]) -> type[SourceAdapter]:
    """Class decorator adding an adapter to every default registry."""
    BUILTIN_ADAPTERS.append(cls)
    return cls


def build_default_registry() -> AdapterRegistry:
    return AdapterRegistry(cls() for cls in BUILTIN_ADAPTERS)
