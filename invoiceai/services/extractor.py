"""
Extraction orchestrator: free text -> prompt -> completion -> sanitized text
-> parsed object -> validated draft.

Stages run strictly in sequence and nothing is retried; a caller wanting a
retry calls extract again. Only the parse and validate stages are pure.
"""

from loguru import logger

from ..core.config import MAX_SNIPPET_LIMIT
from ..core.errors import ValidationFailed
from ..models.extraction import ExtractedInvoiceDraft
from .completion import CompletionRequester
from .extraction_schema import Err, validate_extraction
from .json_repair import parse_with_repair
from .prompts import extraction_prompt
from .sanitizer import sanitize_completion


def parse_draft(raw_text: str, snippet_limit: int = MAX_SNIPPET_LIMIT) -> ExtractedInvoiceDraft:
    """
    Run the pure stages on a raw completion.

    Raises:
        NoJsonFound, UnparseableExtraction, ValidationFailed
    """
    candidate = sanitize_completion(raw_text)
    parsed = parse_with_repair(candidate, snippet_limit=snippet_limit)

    result = validate_extraction(parsed)
    if isinstance(result, Err):
        raise ValidationFailed(result.violations)
    return result.draft


class InvoiceExtractor:
    def __init__(self, requester: CompletionRequester, snippet_limit: int = MAX_SNIPPET_LIMIT):
        self.requester = requester
        self.snippet_limit = snippet_limit

    async def extract(self, free_text: str) -> ExtractedInvoiceDraft:
        """
        Extract an invoice draft from free-form text.

        Raises:
            UpstreamError: completion service failure (transient)
            NoJsonFound: no JSON object in the completion
            UnparseableExtraction: JSON unreadable after the repair pass
            ValidationFailed: JSON does not describe an invoice
        """
        raw_text = await self.requester.request(extraction_prompt(free_text))
        draft = parse_draft(raw_text, snippet_limit=self.snippet_limit)

        logger.info(
            "Invoice draft extracted",
            client_name=draft.client_name,
            item_count=len(draft.items),
        )
        return draft
