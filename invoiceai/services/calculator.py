"""
Line-item and invoice total computation.

Pure functions with no range checks: negative values are computed as given
and NaN propagates. Range validation belongs to the request models.

subTotal and taxTotal are each summed from their own per-line components and
total is defined as subTotal + taxTotal, never as the sum of line totals.
"""

from typing import Iterable, NamedTuple, Protocol

from ..models.invoice import InvoiceItem, InvoiceItemIn


class LineTotals(NamedTuple):
    line_subtotal: float
    line_tax: float
    line_total: float


class InvoiceTotals(NamedTuple):
    sub_total: float
    tax_total: float
    total: float


class PricedItem(Protocol):
    quantity: float
    unit_price: float
    tax_percent: float


def compute_item(quantity: float, unit_price: float, tax_percent: float = 0) -> LineTotals:
    line_subtotal = quantity * unit_price
    line_tax = line_subtotal * tax_percent / 100
    return LineTotals(line_subtotal, line_tax, line_subtotal + line_tax)


def compute_invoice(items: Iterable[PricedItem]) -> InvoiceTotals:
    """
    Fold compute_item over the items.

    Args:
        items: Objects exposing quantity, unit_price and tax_percent

    Returns:
        InvoiceTotals with sub_total, tax_total and total
    """
    sub_total = 0.0
    tax_total = 0.0
    for item in items:
        line = compute_item(item.quantity, item.unit_price, item.tax_percent)
        sub_total += line.line_subtotal
        tax_total += line.line_tax
    return InvoiceTotals(sub_total, tax_total, sub_total + tax_total)


def price_items(items: Iterable[InvoiceItemIn]) -> tuple[list[InvoiceItem], InvoiceTotals]:
    """Build persisted items with their line totals plus the invoice totals"""
    items = list(items)
    priced = [
        InvoiceItem(
            name=item.name,
            quantity=item.quantity,
            unit_price=item.unit_price,
            tax_percent=item.tax_percent,
            total=compute_item(item.quantity, item.unit_price, item.tax_percent).line_total,
        )
        for item in items
    ]
    return priced, compute_invoice(items)
