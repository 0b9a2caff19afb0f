"""
Abstract base class for invoice storage implementations.

Defines the interface that all invoice stores must implement, enabling
dependency injection and easy swapping of storage backends.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ...models.invoice import Invoice, InvoiceStatus

SORT_FIELDS = ("createdAt", "invoiceDate", "dueDate", "invoiceNumber", "total")


class InvoiceStoreBase(ABC):
    """
    Abstract base class for invoice persistence.

    Stores hold fully computed Invoice documents; totals are never
    recalculated or patched here.
    """

    @abstractmethod
    def create_invoice(self, invoice: Invoice) -> Invoice:
        """
        Persist a new invoice.

        Args:
            invoice: Invoice with id, owner and computed totals

        Returns:
            The stored invoice
        """
        pass

    @abstractmethod
    def get_invoice(self, invoice_id: str) -> Optional[Invoice]:
        """
        Get an invoice by ID.

        Returns:
            The invoice, or None if not found
        """
        pass

    @abstractmethod
    def replace_invoice(self, invoice: Invoice) -> bool:
        """
        Replace a stored invoice document in full.

        Returns:
            True if successful, False if the invoice was not found
        """
        pass

    @abstractmethod
    def delete_invoice(self, invoice_id: str) -> bool:
        """
        Delete an invoice.

        Returns:
            True if successful, False if the invoice was not found
        """
        pass

    @abstractmethod
    def list_invoices(
        self,
        user_id: str,
        status: Optional[InvoiceStatus] = None,
        page: int = 1,
        limit: int = 10,
        sort_by: str = "createdAt",
        order: str = "desc",
    ) -> tuple[list[Invoice], int]:
        """
        List one user's invoices, one page at a time.

        Args:
            user_id: Owner identifier
            status: Optional status filter
            page: 1-based page number
            limit: Page size
            sort_by: One of SORT_FIELDS
            order: "asc" or "desc"

        Returns:
            (invoices on this page, total matching invoices)
        """
        pass

    @abstractmethod
    def list_for_user(self, user_id: str) -> list[Invoice]:
        """
        List every invoice owned by a user (newest first).

        Returns:
            List of invoices
        """
        pass
