"""
Invoice document construction.

Create and update both go through build_invoice, so items and totals are
always recomputed together from the submitted line items.
"""

import math
import uuid
from datetime import datetime, UTC

from loguru import logger

from ..models.invoice import Invoice, InvoiceIn
from .calculator import InvoiceTotals, price_items

# Tolerance when comparing client-submitted totals with server totals
TOTALS_TOLERANCE = 0.01


def new_invoice_id() -> str:
    return uuid.uuid4().hex


def is_invoice_id(value: str) -> bool:
    try:
        return uuid.UUID(hex=value).hex == value
    except ValueError:
        return False


def check_client_totals(data: InvoiceIn, totals: InvoiceTotals) -> dict[str, bool]:
    """
    Compare submitted totals against the server computation.

    Returns:
        Mapping of field name to whether it agrees (only submitted fields)
    """
    submitted = {
        "subTotal": (data.sub_total, totals.sub_total),
        "taxTotal": (data.tax_total, totals.tax_total),
        "total": (data.total, totals.total),
    }
    return {
        name: math.isclose(client, server, abs_tol=TOTALS_TOLERANCE)
        for name, (client, server) in submitted.items()
        if client is not None
    }


def build_invoice(
    owner: str,
    data: InvoiceIn,
    invoice_id: str | None = None,
    created_at: datetime | None = None,
) -> Invoice:
    """
    Build a complete invoice document with server-computed totals.

    Args:
        owner: Owning user id
        data: Submitted invoice document
        invoice_id: Existing id when replacing (new id otherwise)
        created_at: Original creation time when replacing

    Returns:
        Invoice ready to persist
    """
    items, totals = price_items(data.items)

    mismatched = [name for name, ok in check_client_totals(data, totals).items() if not ok]
    if mismatched:
        logger.warning(
            "Client-submitted totals differ from server totals, using server values",
            invoice_number=data.invoice_number,
            fields=mismatched,
            sub_total=totals.sub_total,
            tax_total=totals.tax_total,
            total=totals.total,
        )

    now = datetime.now(UTC)
    return Invoice(
        id=invoice_id or new_invoice_id(),
        user=owner,
        invoice_number=data.invoice_number,
        invoice_date=data.invoice_date or now,
        due_date=data.due_date,
        bill_from=data.bill_from,
        bill_to=data.bill_to,
        items=items,
        notes=data.notes,
        payment_terms=data.payment_terms or "Net 15",
        status=data.status,
        sub_total=totals.sub_total,
        tax_total=totals.tax_total,
        total=totals.total,
        created_at=created_at or now,
        updated_at=now,
    )
