import math
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from loguru import logger

from ..deps import get_current_user, get_invoice_store, load_owned_invoice
from ...models.invoice import (
    InvoiceIn,
    InvoiceListResponse,
    InvoiceResponse,
    InvoiceStatus,
    Pagination,
)
from ...services.invoices import build_invoice
from ...services.storage import InvoiceStoreBase

router = APIRouter(prefix="/invoices", tags=["invoices"])

SortField = Literal["createdAt", "invoiceDate", "dueDate", "invoiceNumber", "total"]


@router.post("", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED)
async def create_invoice(
    req: InvoiceIn,
    user_id: str = Depends(get_current_user),
    store: InvoiceStoreBase = Depends(get_invoice_store),
):
    """
    Create an invoice for the current user.

    Line totals, subTotal, taxTotal and total are computed on the server;
    any totals in the request are only compared against them.
    """
    invoice = store.create_invoice(build_invoice(user_id, req))

    logger.info(f"Invoice created: {invoice.invoice_number} by user: {user_id}", invoice_id=invoice.id)
    return InvoiceResponse(message="Invoice created successfully", data=invoice)


@router.get("", response_model=InvoiceListResponse)
async def list_invoices(
    status_filter: InvoiceStatus | None = Query(default=None, alias="status"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    sort_by: SortField = Query(default="createdAt", alias="sortBy"),
    order: Literal["asc", "desc"] = Query(default="desc"),
    user_id: str = Depends(get_current_user),
    store: InvoiceStoreBase = Depends(get_invoice_store),
):
    """List the current user's invoices with optional status filter and pagination"""
    invoices, total = store.list_invoices(
        user_id,
        status=status_filter,
        page=page,
        limit=limit,
        sort_by=sort_by,
        order=order,
    )

    logger.info(f"Fetched {len(invoices)} invoices for user: {user_id}")
    return InvoiceListResponse(
        message="Invoices retrieved successfully",
        data=invoices,
        pagination=Pagination(total=total, page=page, limit=limit, pages=math.ceil(total / limit)),
    )


@router.get("/{invoice_id}", response_model=InvoiceResponse)
async def get_invoice(
    invoice_id: str,
    user_id: str = Depends(get_current_user),
    store: InvoiceStoreBase = Depends(get_invoice_store),
):
    invoice = load_owned_invoice(store, invoice_id, user_id, "access")

    logger.info(f"Invoice retrieved: {invoice_id} by user: {user_id}")
    return InvoiceResponse(message="Invoice retrieved successfully", data=invoice)


@router.put("/{invoice_id}", response_model=InvoiceResponse)
async def update_invoice(
    invoice_id: str,
    req: InvoiceIn,
    user_id: str = Depends(get_current_user),
    store: InvoiceStoreBase = Depends(get_invoice_store),
):
    """Replace an invoice document in full and recompute its totals"""
    existing = load_owned_invoice(store, invoice_id, user_id, "update")

    invoice = build_invoice(user_id, req, invoice_id=existing.id, created_at=existing.created_at)
    if not store.replace_invoice(invoice):
        raise HTTPException(status_code=404, detail="Invoice not found")

    logger.info(f"Invoice updated: {invoice_id} by user: {user_id}", total=invoice.total)
    return InvoiceResponse(message="Invoice updated successfully", data=invoice)


@router.delete("/{invoice_id}", response_model=InvoiceResponse)
async def delete_invoice(
    invoice_id: str,
    user_id: str = Depends(get_current_user),
    store: InvoiceStoreBase = Depends(get_invoice_store),
):
    load_owned_invoice(store, invoice_id, user_id, "delete")

    if not store.delete_invoice(invoice_id):
        raise HTTPException(status_code=404, detail="Invoice not found")

    logger.info(f"Invoice deleted: {invoice_id} by user: {user_id}")
    return InvoiceResponse(message="Invoice deleted successfully")
