"""Prompt templates for the completion service"""

from textwrap import dedent

EXTRACTION_PROMPT = dedent("""\
    You are an expert invoice data extraction AI. Analyze the following text and extract the relevant information to create an invoice.
    The output MUST be a valid JSON object with the following fields:
    {{
        "clientName": "string",
        "email": "string (if available)",
        "address": "string (if available)",
        "items": [
            {{
                "name": "string",
                "quantity": number,
                "unitPrice": number
            }}
        ]
    }}
    Here is the text to parse:
    --- TEXT START ---
    {text}
    --- TEXT END ---
    Extract the data and provide only the JSON object as specified.
""")

REMINDER_PROMPT = dedent("""\
    You are a professional and polite accounting assistant. Write a friendly reminder email to a client about an overdue or upcoming invoice payment.
    Use the following details to personalize the email:
    - Client Name: {client_name}
    - Invoice Number: {invoice_number}
    - Amount Due: {amount_due:.2f}
    - Due Date: {due_date}

    The tone should be friendly but clear. Keep it concise. Start the email with "Subject:".
""")

INSIGHTS_PROMPT = dedent("""\
    You are a financial analyst for a small business. Based on the invoice summary below, write two or three short, actionable insights about cash flow and outstanding payments.
    - Total invoices: {invoice_count}
    - Total invoiced amount: {total_amount:.2f}
    - Outstanding (unpaid) amount: {outstanding_amount:.2f}
    - Unpaid invoices: {unpaid_count}
    - Overdue invoices: {overdue_count}

    Respond with only a JSON object of the form {{"insights": ["...", "..."]}}.
""")


def extraction_prompt(text: str) -> str:
    return EXTRACTION_PROMPT.format(text=text)


def reminder_prompt(client_name: str, invoice_number: str, amount_due: float, due_date: str) -> str:
    return REMINDER_PROMPT.format(
        client_name=client_name,
        invoice_number=invoice_number,
        amount_due=amount_due,
        due_date=due_date,
    )


def insights_prompt(
    invoice_count: int,
    total_amount: float,
    outstanding_amount: float,
    unpaid_count: int,
    overdue_count: int,
) -> str:
    return INSIGHTS_PROMPT.format(
        invoice_count=invoice_count,
        total_amount=total_amount,
        outstanding_amount=outstanding_amount,
        unpaid_count=unpaid_count,
        overdue_count=overdue_count,
    )
