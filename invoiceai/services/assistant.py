"""
AI drafting helpers: payment reminder emails and dashboard insights.
"""

from datetime import datetime, UTC

from loguru import logger

from ..core.config import MAX_SNIPPET_LIMIT
from ..core.errors import InvoiceAIError
from ..models.invoice import DashboardSummary, Invoice, InvoiceStatus, ReminderEmail
from .completion import CompletionRequester
from .json_repair import parse_with_repair
from .prompts import insights_prompt, reminder_prompt
from .sanitizer import sanitize_completion


def is_overdue(invoice: Invoice, now: datetime | None = None) -> bool:
    now = now or datetime.now(UTC)
    return (
        invoice.status == InvoiceStatus.UNPAID
        and invoice.due_date is not None
        and invoice.due_date < now
    )


def summarize_invoices(invoices: list[Invoice]) -> DashboardSummary:
    """Count and sum invoices; outstanding covers unpaid invoices only"""
    return DashboardSummary(
        invoice_count=len(invoices),
        total_amount=sum(inv.total for inv in invoices),
        outstanding_amount=sum(inv.total for inv in invoices if inv.status == InvoiceStatus.UNPAID),
    )


class InvoiceAssistant:
    def __init__(self, requester: CompletionRequester, snippet_limit: int = MAX_SNIPPET_LIMIT):
        self.requester = requester
        self.snippet_limit = snippet_limit

    async def draft_reminder_email(self, invoice: Invoice) -> ReminderEmail:
        due_date = invoice.due_date.date().isoformat() if invoice.due_date else "upon receipt"
        prompt = reminder_prompt(
            client_name=invoice.bill_to.client_name,
            invoice_number=invoice.invoice_number,
            amount_due=invoice.total,
            due_date=due_date,
        )

        body = await self.requester.request(prompt)

        logger.info(
            "Generated reminder email",
            invoice_id=invoice.id,
            client_email=invoice.bill_to.email,
        )
        return ReminderEmail(
            to=invoice.bill_to.email,
            subject=f"Reminder: Invoice {invoice.invoice_number}",
            body=body,
        )

    async def generate_insights(self, summary: DashboardSummary, invoices: list[Invoice]) -> list[str]:
        """
        Ask the model for short insights about the summary.

        Raises:
            UpstreamError, NoJsonFound, UnparseableExtraction
        """
        now = datetime.now(UTC)
        prompt = insights_prompt(
            invoice_count=summary.invoice_count,
            total_amount=summary.total_amount,
            outstanding_amount=summary.outstanding_amount,
            unpaid_count=sum(1 for inv in invoices if inv.status == InvoiceStatus.UNPAID),
            overdue_count=sum(1 for inv in invoices if is_overdue(inv, now)),
        )

        raw_text = await self.requester.request(prompt)
        parsed = parse_with_repair(sanitize_completion(raw_text), snippet_limit=self.snippet_limit)

        insights = parsed.get("insights") if isinstance(parsed, dict) else None
        if not isinstance(insights, list):
            logger.warning("Insights completion had no insights list")
            return []
        return [text.strip() for text in insights if isinstance(text, str) and text.strip()]

    async def dashboard_summary(self, invoices: list[Invoice]) -> DashboardSummary:
        summary = summarize_invoices(invoices)

        # Insights are best-effort; the numbers are always returned
        try:
            summary.insights = await self.generate_insights(summary, invoices)
        except InvoiceAIError as e:
            logger.warning(f"Failed to generate dashboard insights: {e.message}")

        logger.info(
            "Dashboard summary generated",
            invoice_count=summary.invoice_count,
            insight_count=len(summary.insights),
        )
        return summary
