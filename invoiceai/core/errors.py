"""
Error taxonomy for the AI extraction pipeline.

- UpstreamError: the completion service failed (transient, retry the whole extraction)
- NoJsonFound / UnparseableExtraction: the completion could not be read as JSON
  (permanent for this input and completion pair)
- ValidationFailed: the JSON was readable but does not describe an invoice
  (permanent, violations are returned to the caller verbatim)
"""

from dataclasses import dataclass


class InvoiceAIError(Exception):
    """Base class for all errors raised by invoiceai services"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UpstreamError(InvoiceAIError):
    """Network failure, non-2xx response or empty payload from the completion service"""


class MalformedUpstreamResponse(UpstreamError):
    """The completion envelope did not yield a text string"""


class ExtractionError(InvoiceAIError):
    """Base class for failures turning completion text into a draft"""


class NoJsonFound(ExtractionError):
    def __init__(self, message: str = "No JSON object found in completion"):
        super().__init__(message)


class UnparseableExtraction(ExtractionError):
    """
    Candidate JSON could not be parsed even after the repair pass.

    Carries the original parse error and a bounded snippet of the candidate
    text for diagnostics.
    """

    def __init__(self, error: Exception, snippet: str, repair_error: Exception | None = None):
        super().__init__(f"Unable to parse completion as JSON: {error}")
        self.error = error
        self.repair_error = repair_error
        self.snippet = snippet


@dataclass(frozen=True)
class Violation:
    field: str
    message: str

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


@dataclass(frozen=True, init=False)
class MissingRequiredField(Violation):
    name: str

    def __init__(self, name: str, message: str | None = None):
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "field", name)
        object.__setattr__(self, "message", message or f"{name} is required")


@dataclass(frozen=True, init=False)
class InvalidItemShape(Violation):
    index: int
    item_field: str

    def __init__(self, index: int, item_field: str, message: str | None = None):
        object.__setattr__(self, "index", index)
        object.__setattr__(self, "item_field", item_field)
        object.__setattr__(self, "field", f"items[{index}].{item_field}")
        object.__setattr__(
            self, "message", message or f"Item {index} has a missing or invalid {item_field}"
        )


class ValidationFailed(ExtractionError):
    def __init__(self, violations: list[Violation]):
        fields = ", ".join(v.field for v in violations)
        super().__init__(f"Extracted data failed validation: {fields}")
        self.violations = list(violations)

    def to_list(self) -> list[dict]:
        return [v.to_dict() for v in self.violations]


