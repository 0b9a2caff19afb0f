import re
from datetime import datetime, UTC
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^[\d\s\-\+\(\)]+$")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class InvoiceStatus(str, Enum):
    PAID = "Paid"
    UNPAID = "Unpaid"


class Party(CamelModel):
    email: str | None = None
    address: str | None = Field(default=None, max_length=300)
    phone_number: str | None = None

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str | None) -> str | None:
        if value and value.strip() and not EMAIL_PATTERN.match(value):
            raise ValueError("Please provide a valid email address")
        return value

    @field_validator("phone_number")
    @classmethod
    def _check_phone(cls, value: str | None) -> str | None:
        if value and value.strip() and not PHONE_PATTERN.match(value):
            raise ValueError("Please provide a valid phone number")
        return value


class BillFrom(Party):
    business_name: str = Field(min_length=1, max_length=100)

    @field_validator("business_name")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Business name is required")
        return value


class BillTo(Party):
    client_name: str = Field(min_length=1, max_length=100)

    @field_validator("client_name")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Client name is required")
        return value


class InvoiceItemIn(CamelModel):
    """Line item as submitted by a client. Any submitted total is ignored."""
    name: str = Field(min_length=1, max_length=100)
    quantity: float = Field(gt=0, le=999999)
    unit_price: float = Field(ge=0, le=999999999)
    tax_percent: float = Field(default=0, ge=0, le=100)
    total: float | None = Field(default=None, ge=0)

    @field_validator("name")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Item name is required")
        return value


class InvoiceItem(CamelModel):
    """Persisted line item with its server-computed total"""
    name: str
    quantity: float
    unit_price: float
    tax_percent: float = 0
    total: float


def _as_utc(value: datetime | None) -> datetime | None:
    """Stored dates are UTC so their ISO text sorts by instant"""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class InvoiceIn(CamelModel):
    """
    Full invoice document for create and update (PUT replaces the whole
    document and recomputes totals).
    """
    invoice_number: str = Field(min_length=1, max_length=50)
    invoice_date: datetime | None = None
    due_date: datetime | None = None
    bill_from: BillFrom
    bill_to: BillTo
    items: list[InvoiceItemIn] = Field(min_length=1)
    notes: str | None = Field(default=None, max_length=1000)
    payment_terms: str = Field(default="Net 15", max_length=100)
    status: InvoiceStatus = InvoiceStatus.UNPAID

    # Client-side totals, checked against the server computation
    sub_total: float | None = Field(default=None, ge=0)
    tax_total: float | None = Field(default=None, ge=0)
    total: float | None = Field(default=None, ge=0)

    @field_validator("invoice_number")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Invoice number is required")
        return value

    @field_validator("invoice_date", "due_date")
    @classmethod
    def _normalize_tz(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)

    @field_validator("due_date")
    @classmethod
    def _due_after_invoice_date(cls, value: datetime | None, info: ValidationInfo) -> datetime | None:
        invoice_date = info.data.get("invoice_date")
        if value and invoice_date and value < invoice_date:
            raise ValueError("Due date cannot be before invoice date")
        return value


class Invoice(CamelModel):
    id: str
    user: str
    invoice_number: str
    invoice_date: datetime
    due_date: datetime | None = None
    bill_from: BillFrom
    bill_to: BillTo
    items: list[InvoiceItem]
    notes: str | None = None
    payment_terms: str = "Net 15"
    status: InvoiceStatus = InvoiceStatus.UNPAID
    sub_total: float
    tax_total: float
    total: float
    created_at: datetime
    updated_at: datetime


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    pages: int


class InvoiceResponse(BaseModel):
    success: bool = True
    message: str
    data: Invoice | None = None


class InvoiceListResponse(BaseModel):
    success: bool = True
    message: str
    data: list[Invoice]
    pagination: Pagination


class ReminderRequest(CamelModel):
    invoice_id: str = Field(min_length=1)


class ReminderEmail(BaseModel):
    to: str | None
    subject: str
    body: str


class DashboardSummary(CamelModel):
    invoice_count: int
    total_amount: float
    outstanding_amount: float
    insights: list[str] = Field(default_factory=list)


class ReminderResponse(BaseModel):
    success: bool = True
    data: ReminderEmail


class DashboardResponse(BaseModel):
    success: bool = True
    data: DashboardSummary


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    errors: list[dict] | None = None
