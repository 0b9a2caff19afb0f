"""
Completion requester: send a prompt to the text generation service and get
raw text back.

The requester is built around an injected transport, any object with an
``async generate(prompt)`` method returning an envelope. Envelopes may carry
their text as a plain string or as a (sync or async) accessor, e.g. SDK
response objects where ``text`` is a method; the requester normalizes both.
"""

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Protocol

import httpx
from loguru import logger

from ..core.config import Settings
from ..core.errors import MalformedUpstreamResponse, UpstreamError


@dataclass
class CompletionEnvelope:
    """Success envelope from a transport"""
    text: str | Callable[[], Any] | None
    raw: dict | None = None


class CompletionTransport(Protocol):
    async def generate(self, prompt: str) -> Any:
        ...


class HttpCompletionTransport:
    """
    OpenAI-compatible chat completions over httpx.

    Timeouts are the httpx client's concern; there are no retries.
    """

    def __init__(
        self,
        base_url: str | None,
        api_key: str | None,
        model: str,
        timeout: float = 30.0,
        temperature: float = 0.0,
    ):
        self.base_url = base_url
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.temperature = temperature

    @classmethod
    def from_settings(cls, settings: Settings) -> "HttpCompletionTransport":
        return cls(
            base_url=settings.llm_base_url,
            api_key=settings.llm_api_key,
            model=settings.llm_model,
            timeout=settings.llm_timeout_seconds,
            temperature=settings.llm_temperature,
        )

    @property
    def configured(self) -> bool:
        return bool(self.base_url and self.api_key)

    @property
    def endpoint(self) -> str:
        return f"{self.base_url.rstrip('/')}/chat/completions"

    async def generate(self, prompt: str) -> CompletionEnvelope:
        if not self.configured:
            logger.warning(
                "LLM not configured - set LLM_BASE_URL and LLM_API_KEY to enable AI features"
            )
            raise UpstreamError("Completion service is not configured")

        payload = {
            "model": self.model,
            "temperature": self.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                r = await client.post(self.endpoint, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Completion request failed: {e}", endpoint=self.endpoint)
            raise UpstreamError(f"Completion request failed: {e}") from e

        if not r.is_success:
            logger.error("Completion service returned an error", http_status=r.status_code)
            raise UpstreamError(f"Completion service returned HTTP {r.status_code}")

        try:
            body = r.json()
        except ValueError as e:
            raise MalformedUpstreamResponse("Completion service returned invalid JSON") from e

        try:
            content = body["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            content = None

        return CompletionEnvelope(text=content, raw=body)


def _text_of(envelope: Any) -> Any:
    if isinstance(envelope, str):
        return envelope
    if isinstance(envelope, dict):
        return envelope.get("text")
    return getattr(envelope, "text", None)


class CompletionRequester:
    def __init__(self, transport: CompletionTransport):
        self.transport = transport

    async def request(self, prompt: str) -> str:
        """
        Send one prompt and return the completion text.

        Raises:
            UpstreamError: transport failure or empty payload
            MalformedUpstreamResponse: the envelope did not yield a string
        """
        envelope = await self.transport.generate(prompt)
        if envelope is None:
            raise UpstreamError("No response from completion service")

        text = _text_of(envelope)
        if callable(text):
            try:
                text = text()
                if inspect.isawaitable(text):
                    text = await text
            except Exception as e:
                logger.warning("Completion text accessor failed", error=str(e))
                raise MalformedUpstreamResponse(f"Completion text accessor failed: {e}") from e

        if text is None:
            raise UpstreamError("Completion service returned an empty payload")
        if not isinstance(text, str):
            raise MalformedUpstreamResponse(
                f"Completion text has unexpected type {type(text).__name__}"
            )
        if not text.strip():
            raise UpstreamError("Completion service returned an empty payload")

        logger.info("Completion received", chars=len(text))
        return text
