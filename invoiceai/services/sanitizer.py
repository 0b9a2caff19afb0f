"""
Isolate the JSON payload in a raw completion.

Models do not reliably honor "JSON only" instructions, so the completion may
be wrapped in code fences or conversational prose.
"""

import re

from ..core.errors import NoJsonFound

# ```json, ```JSON and bare ``` fences
_FENCE_PATTERN = re.compile(r"```(?:json)?", re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    return _FENCE_PATTERN.sub("", text)


def sanitize_completion(raw: str) -> str:
    """
    Reduce a completion to its candidate JSON object text.

    Steps (each idempotent): remove every code fence, trim whitespace, slice
    from the first "{" to the last "}".

    Raises:
        NoJsonFound: if no "{...}" span remains
    """
    text = strip_code_fences(raw or "").strip()

    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        raise NoJsonFound()

    return text[start:end + 1]
