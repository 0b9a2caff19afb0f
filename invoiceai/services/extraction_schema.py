"""
Structural validation of parsed completion JSON.

The parsed object is untrusted. validate_extraction never raises for
malformed input; it returns Ok(draft) or Err(violations) with every
violation found.
"""

from dataclasses import dataclass, field
from numbers import Real
from typing import Any

from ..core.errors import InvalidItemShape, MissingRequiredField, Violation
from ..models.extraction import ExtractedInvoiceDraft, LineItemDraft

ITEM_FIELDS = (
    ("name", "string"),
    ("quantity", "number"),
    ("unitPrice", "number"),
)


@dataclass(frozen=True)
class Ok:
    draft: ExtractedInvoiceDraft


@dataclass(frozen=True)
class Err:
    violations: list[Violation] = field(default_factory=list)


ValidationResult = Ok | Err


def is_number(value: Any) -> bool:
    # JSON booleans decode to bool, which is a Real subclass
    return isinstance(value, Real) and not isinstance(value, bool)


def _has_type(value: Any, kind: str) -> bool:
    if kind == "string":
        return isinstance(value, str)
    return is_number(value)


def _optional_text(data: dict, key: str) -> str:
    value = data.get(key)
    return value if isinstance(value, str) else ""


def _check_items(items: list) -> list[Violation]:
    violations = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            violations.append(InvalidItemShape(index, "item"))
            continue
        for key, kind in ITEM_FIELDS:
            if key not in item or not _has_type(item[key], kind):
                violations.append(InvalidItemShape(index, key))
    return violations


def validate_extraction(data: Any) -> ValidationResult:
    """
    Check a parsed object against the invoice extraction schema.

    Args:
        data: Output of the JSON repair pass

    Returns:
        Ok with an ExtractedInvoiceDraft, or Err listing every violation
    """
    if not isinstance(data, dict):
        return Err([MissingRequiredField("clientName"), MissingRequiredField("items")])

    violations: list[Violation] = []

    client_name = data.get("clientName")
    if not isinstance(client_name, str) or not client_name.strip():
        violations.append(MissingRequiredField("clientName"))

    items = data.get("items")
    if not isinstance(items, list) or not items:
        violations.append(MissingRequiredField("items"))
    else:
        violations.extend(_check_items(items))

    if violations:
        return Err(violations)

    draft = ExtractedInvoiceDraft(
        client_name=client_name,
        email=_optional_text(data, "email"),
        address=_optional_text(data, "address"),
        items=[
            LineItemDraft(name=item["name"], quantity=item["quantity"], unit_price=item["unitPrice"])
            for item in items
        ],
    )
    return Ok(draft)
