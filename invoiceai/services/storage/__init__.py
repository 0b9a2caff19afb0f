from functools import lru_cache

from ...core.config import settings
from .invoice_store_base import InvoiceStoreBase, SORT_FIELDS
from .invoices_sqlite import SQLiteInvoiceStore

__all__ = ["InvoiceStoreBase", "SQLiteInvoiceStore", "SORT_FIELDS", "get_invoice_store"]


@lru_cache(maxsize=None)
def _store_for_path(db_path: str) -> SQLiteInvoiceStore:
    return SQLiteInvoiceStore(db_path)


def get_invoice_store() -> InvoiceStoreBase:
    """Store for the configured DATABASE_PATH (override in tests via dependency_overrides)"""
    return _store_for_path(settings.database_path)
