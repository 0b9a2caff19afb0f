"""
Two-strike JSON parsing for near-valid model output.

The candidate is parsed as-is first. On failure a single repair pass is
applied (trailing commas removed, single-quoted strings re-quoted) and the
result is parsed once more. Nothing else is attempted: this is not a
lenient JSON parser.

Known limitation: the repairs are regex based and can alter string values
that happen to contain the patterns they target (e.g. ", }" inside a string).
"""

import json
import re
from typing import Any

from loguru import logger

from ..core.config import MAX_SNIPPET_LIMIT
from ..core.errors import UnparseableExtraction

_TRAILING_COMMA = re.compile(r",\s*(?=[}\]])")

# A single-quoted token in a delimiter position: after { [ , : and before : , } ]
_SINGLE_QUOTED = re.compile(r"(?<=[{\[,:])(\s*)'((?:[^'\\]|\\.)*)'(?=\s*[:,}\]])")


def remove_trailing_commas(text: str) -> str:
    return _TRAILING_COMMA.sub("", text)


def _requote(match: re.Match) -> str:
    inner = match.group(2).replace("\\'", "'")
    inner = re.sub(r'(?<!\\)"', r'\\"', inner)
    return f'{match.group(1)}"{inner}"'


def normalize_single_quotes(text: str) -> str:
    return _SINGLE_QUOTED.sub(_requote, text)


def repair_json(text: str) -> str:
    """Apply the repair transformations, in order"""
    return normalize_single_quotes(remove_trailing_commas(text))


def parse_with_repair(candidate: str, snippet_limit: int = MAX_SNIPPET_LIMIT) -> Any:
    """
    Parse candidate JSON, allowing one repair attempt.

    Args:
        candidate: Sanitized completion text
        snippet_limit: Maximum characters of candidate kept for diagnostics

    Returns:
        The parsed JSON value

    Raises:
        UnparseableExtraction: if both attempts fail
    """
    # Deeply nested input raises RecursionError from the decoder
    try:
        return json.loads(candidate)
    except (json.JSONDecodeError, RecursionError) as first_err:
        logger.debug("Completion is not valid JSON, applying repair pass", error=str(first_err))
        repaired = repair_json(candidate)
        try:
            return json.loads(repaired)
        except (json.JSONDecodeError, RecursionError) as second_err:
            limit = min(snippet_limit, MAX_SNIPPET_LIMIT)
            raise UnparseableExtraction(
                first_err, candidate[:limit], repair_error=second_err
            ) from first_err
