"""
Source adapters, one per transaction category.

Importing this package registers every built-in adapter.
"""

from ledger_recon.services.sources.base import (
    AdapterRegistry,
    SourceAdapter,
    TypeFilter,
    build_default_registry,
    register_adapter,
)
from ledger_recon.services.sources import cash, payments, residence  # noqa: F401

__all__ = [
    "AdapterRegistry",
    "SourceAdapter",
    "TypeFilter",
    "build_default_registry",
    "register_adapter",
]
