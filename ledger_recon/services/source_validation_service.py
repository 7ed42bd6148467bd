"""
Source validation service — checks the source tables are readable.

Every registered adapter reads one table and a known set of
columns. This reports which tables are missing and which lack a
column an adapter needs, before a report fails on them.
"""

import logging

from sqlalchemy import inspect
from sqlalchemy.orm import Session

from ledger_recon.schemas.report import SourceTableStatus, SourceValidationReport
from ledger_recon.services.sources import AdapterRegistry, build_default_registry

logger = logging.getLogger(__name__)


class SourceValidationService:

    def __init__(self, db: Session, registry: AdapterRegistry | None = None):
        self.db = db
        self.registry = registry or build_default_registry()

    def validate(self) -> SourceValidationReport:
        inspector = inspect(self.db.get_bind())
        existing = set(inspector.get_table_names())

        valid, missing, invalid = [], [], []
        for adapter in self.registry.adapters():
            table = adapter.table_name
            if table not in existing:
                missing.append(SourceTableStatus(
                    table=table,
                    type=adapter.name,
                    error="table does not exist",
                ))
                continue

            columns = {c["name"] for c in inspector.get_columns(table)}
            absent = sorted(adapter.required_columns() - columns)
            if absent:
                invalid.append(SourceTableStatus(
                    table=table,
                    type=adapter.name,
                    error="missing columns",
                    missing_columns=absent,
                ))
            else:
                valid.append(SourceTableStatus(table=table, type=adapter.name))

        if missing or invalid:
            logger.warning(
                f"Source validation: {len(missing)} missing, "
                f"{len(invalid)} invalid of {len(self.registry)} tables"
            )

        return SourceValidationReport(
            total_expected=len(self.registry),
            total_valid=len(valid),
            valid_tables=valid,
            missing_tables=missing,
            invalid_tables=invalid,
        )
