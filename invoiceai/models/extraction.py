from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class LineItemDraft(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    quantity: int | float
    unit_price: int | float


class ExtractedInvoiceDraft(BaseModel):
    """Invoice data pulled out of a completion. Never persisted as-is."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    client_name: str
    email: str = ""
    address: str = ""
    items: list[LineItemDraft] = Field(default_factory=list)


class ParseTextRequest(BaseModel):
    """Request body for /ai/parse-text"""
    text: str = Field(min_length=10, max_length=5000)


class ParseTextResponse(BaseModel):
    success: bool = True
    data: ExtractedInvoiceDraft
