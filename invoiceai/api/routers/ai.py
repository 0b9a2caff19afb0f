from fastapi import APIRouter, Depends
from loguru import logger

from ..deps import (
    get_assistant,
    get_current_user,
    get_extractor,
    get_invoice_store,
    load_owned_invoice,
)
from ...models.extraction import ParseTextRequest, ParseTextResponse
from ...models.invoice import DashboardResponse, ReminderRequest, ReminderResponse
from ...services.assistant import InvoiceAssistant
from ...services.extractor import InvoiceExtractor
from ...services.storage import InvoiceStoreBase

router = APIRouter(prefix="/ai", tags=["ai"])


@router.post("/parse-text", response_model=ParseTextResponse)
async def parse_text(
    req: ParseTextRequest,
    user_id: str = Depends(get_current_user),
    extractor: InvoiceExtractor = Depends(get_extractor),
):
    """
    Extract invoice fields from free-form text.

    Example request:
    {
        "text": "Bill Acme Corp (ap@acme.test) for 2 widgets at 9.50 each"
    }

    Example response:
    {
        "success": true,
        "data": {
            "clientName": "Acme Corp",
            "email": "ap@acme.test",
            "address": "",
            "items": [{"name": "Widget", "quantity": 2, "unitPrice": 9.5}]
        }
    }

    Failures use the error envelope: 502 when the AI service is unavailable,
    422 when the completion cannot be read or does not describe an invoice.
    """
    logger.info("Parse text request received", user_id=user_id, text_length=len(req.text))

    draft = await extractor.extract(req.text)
    return ParseTextResponse(data=draft)


@router.post("/generate-reminder", response_model=ReminderResponse)
async def generate_reminder(
    req: ReminderRequest,
    user_id: str = Depends(get_current_user),
    store: InvoiceStoreBase = Depends(get_invoice_store),
    assistant: InvoiceAssistant = Depends(get_assistant),
):
    """Draft a payment reminder email for one of the user's invoices"""
    invoice = load_owned_invoice(store, req.invoice_id, user_id, "access")

    email = await assistant.draft_reminder_email(invoice)
    return ReminderResponse(data=email)


@router.get("/dashboard-summary", response_model=DashboardResponse)
async def dashboard_summary(
    user_id: str = Depends(get_current_user),
    store: InvoiceStoreBase = Depends(get_invoice_store),
    assistant: InvoiceAssistant = Depends(get_assistant),
):
    """Invoice counts and amounts for the user, with AI insights when available"""
    summary = await assistant.dashboard_summary(store.list_for_user(user_id))
    return DashboardResponse(data=summary)
