"""
SQLite-based invoice storage.

Each invoice is stored as a JSON document with the columns needed for
ownership filtering and sorting pulled out alongside it.
"""

import sqlite3
from contextlib import closing
from typing import Optional

from loguru import logger

from ...models.invoice import Invoice, InvoiceStatus
from .invoice_store_base import InvoiceStoreBase, SORT_FIELDS

# API sort keys -> columns
_SORT_COLUMNS = {
    "createdAt": "created_at",
    "invoiceDate": "invoice_date",
    "dueDate": "due_date",
    "invoiceNumber": "invoice_number",
    "total": "total",
}


class SQLiteInvoiceStore(InvoiceStoreBase):
    """
    SQLite-backed invoice store with persistent storage.

    Features:
    - Persistent storage across application restarts
    - Per-user filtering, status filtering and pagination in SQL
    - Thread-safe operations (via SQLite's built-in locking)
    """

    def __init__(self, db_path: str = "invoices.db"):
        """
        Initialize store with database path.

        Args:
            db_path: Path to SQLite database file (default: invoices.db)
        """
        self.db_path = db_path
        self._init_database()

    def _init_database(self):
        """Create invoices table if it doesn't exist"""
        with closing(sqlite3.connect(self.db_path)) as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS invoices (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    invoice_number TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'Unpaid',
                    invoice_date TEXT NOT NULL,
                    due_date TEXT,
                    total REAL NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    document TEXT NOT NULL,
                    CHECK (status IN ('Paid', 'Unpaid'))
                )
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_user_status
                ON invoices(user_id, status)
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_user_created_at
                ON invoices(user_id, created_at)
            """)

            conn.commit()

    def _get_connection(self) -> sqlite3.Connection:
        """Get database connection with row factory"""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    @staticmethod
    def _columns(invoice: Invoice) -> tuple:
        return (
            invoice.user,
            invoice.invoice_number,
            invoice.status.value,
            invoice.invoice_date.isoformat(),
            invoice.due_date.isoformat() if invoice.due_date else None,
            invoice.total,
            invoice.created_at.isoformat(),
            invoice.updated_at.isoformat(),
            invoice.model_dump_json(),
        )

    def create_invoice(self, invoice: Invoice) -> Invoice:
        with closing(self._get_connection()) as conn:
            cursor = conn.cursor()

            cursor.execute("""
                INSERT INTO invoices (
                    id, user_id, invoice_number, status, invoice_date, due_date,
                    total, created_at, updated_at, document
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (invoice.id, *self._columns(invoice)))

            conn.commit()

        logger.debug("Invoice stored", invoice_id=invoice.id, user_id=invoice.user)
        return invoice

    def get_invoice(self, invoice_id: str) -> Optional[Invoice]:
        with closing(self._get_connection()) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT document FROM invoices WHERE id = ?", (invoice_id,))
            row = cursor.fetchone()

        if row is None:
            return None
        return Invoice.model_validate_json(row["document"])

    def replace_invoice(self, invoice: Invoice) -> bool:
        with closing(self._get_connection()) as conn:
            cursor = conn.cursor()

            cursor.execute("""
                UPDATE invoices
                SET user_id = ?,
                    invoice_number = ?,
                    status = ?,
                    invoice_date = ?,
                    due_date = ?,
                    total = ?,
                    created_at = ?,
                    updated_at = ?,
                    document = ?
                WHERE id = ?
            """, (*self._columns(invoice), invoice.id))

            rows_affected = cursor.rowcount
            conn.commit()

        return rows_affected > 0

    def delete_invoice(self, invoice_id: str) -> bool:
        with closing(self._get_connection()) as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM invoices WHERE id = ?", (invoice_id,))

            rows_affected = cursor.rowcount
            conn.commit()

        return rows_affected > 0

    def list_invoices(
        self,
        user_id: str,
        status: Optional[InvoiceStatus] = None,
        page: int = 1,
        limit: int = 10,
        sort_by: str = "createdAt",
        order: str = "desc",
    ) -> tuple[list[Invoice], int]:
        if sort_by not in SORT_FIELDS:
            raise ValueError(f"Cannot sort by {sort_by!r}")
        column = _SORT_COLUMNS[sort_by]
        direction = "ASC" if order == "asc" else "DESC"

        where = "WHERE user_id = ?"
        params: list = [user_id]
        if status:
            where += " AND status = ?"
            params.append(InvoiceStatus(status).value)

        with closing(self._get_connection()) as conn:
            cursor = conn.cursor()

            cursor.execute(f"SELECT COUNT(*) AS n FROM invoices {where}", params)
            total = cursor.fetchone()["n"]

            cursor.execute(f"""
                SELECT document
                FROM invoices
                {where}
                ORDER BY {column} {direction}, rowid {direction}
                LIMIT ? OFFSET ?
            """, (*params, limit, (page - 1) * limit))

            rows = cursor.fetchall()

        return [Invoice.model_validate_json(row["document"]) for row in rows], total

    def list_for_user(self, user_id: str) -> list[Invoice]:
        with closing(self._get_connection()) as conn:
            cursor = conn.cursor()

            cursor.execute("""
                SELECT document
                FROM invoices
                WHERE user_id = ?
                ORDER BY created_at DESC, rowid DESC
            """, (user_id,))

            rows = cursor.fetchall()

        return [Invoice.model_validate_json(row["document"]) for row in rows]
