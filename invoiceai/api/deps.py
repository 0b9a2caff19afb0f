from fastapi import Depends, Header, HTTPException
from loguru import logger

from ..core.config import settings
from ..models.invoice import Invoice
from ..services.assistant import InvoiceAssistant
from ..services.completion import CompletionRequester, CompletionTransport, HttpCompletionTransport
from ..services.extractor import InvoiceExtractor
from ..services.invoices import is_invoice_id
from ..services.storage import InvoiceStoreBase, get_invoice_store


def get_current_user(x_user_id: str | None = Header(default=None)) -> str:
    """Owner identity, set by the authenticating gateway in front of the API"""
    if not x_user_id or not x_user_id.strip():
        logger.warning("Request without user identity")
        raise HTTPException(status_code=401, detail="Not authorized, missing user identity")
    return x_user_id.strip()


def get_completion_transport() -> CompletionTransport:
    return HttpCompletionTransport.from_settings(settings)


def get_completion_requester(
    transport: CompletionTransport = Depends(get_completion_transport),
) -> CompletionRequester:
    return CompletionRequester(transport)


def get_extractor(requester: CompletionRequester = Depends(get_completion_requester)) -> InvoiceExtractor:
    return InvoiceExtractor(requester, snippet_limit=settings.extraction_snippet_limit)


def get_assistant(requester: CompletionRequester = Depends(get_completion_requester)) -> InvoiceAssistant:
    return InvoiceAssistant(requester, snippet_limit=settings.extraction_snippet_limit)


def load_owned_invoice(store: InvoiceStoreBase, invoice_id: str, user_id: str, action: str) -> Invoice:
    """
    Fetch an invoice and check that user_id owns it.

    Raises:
        HTTPException: 400 bad id format, 404 not found, 403 foreign owner
    """
    if not is_invoice_id(invoice_id):
        logger.warning("Invalid invoice ID format", invoice_id=invoice_id)
        raise HTTPException(status_code=400, detail="Invalid invoice ID format")

    invoice = store.get_invoice(invoice_id)
    if invoice is None:
        logger.warning(f"Invoice not found: {invoice_id}")
        raise HTTPException(status_code=404, detail="Invoice not found")

    if invoice.user != user_id:
        logger.warning(f"Unauthorized {action} attempt to invoice: {invoice_id} by user: {user_id}")
        raise HTTPException(status_code=403, detail=f"Unauthorized to {action} this invoice")

    return invoice


__all__ = [
    "get_current_user",
    "get_completion_transport",
    "get_completion_requester",
    "get_extractor",
    "get_assistant",
    "get_invoice_store",
    "load_owned_invoice",
]
