"""HTTP client for OpenAI-compatible chat completion services."""

from __future__ import annotations

import logging
from typing import Protocol

import httpx

from ...config import Settings, settings
from .exceptions import AiServiceError

logger = logging.getLogger(__name__)


class ReasoningClient(Protocol):
    def complete(self, prompt: str, max_tokens: int, temperature: float) -> str:
        ...


class OpenAIChatClient:
    """Single-shot chat completion client.

    No retries are made; a slow or failing endpoint surfaces as an
    ``httpx`` exception once ``timeout`` elapses.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("AI API key is not configured.")
        self.api_key = api_key
        self.base_url = (base_url or settings.openai_base_url).rstrip("/")
        self.model = model or settings.openai_model
        self.timeout = timeout if timeout is not None else settings.ai_timeout_seconds
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 5.0)),
            transport=self._transport,
            headers={"Authorization": f"Bearer {self.api_key}"},
        )

    def complete(self, prompt: str, max_tokens: int, temperature: float) -> str:
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        with self._get_client() as client:
            response = client.post(f"{self.base_url}/chat/completions", json=payload)
            response.raise_for_status()
            data = response.json()

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise AiServiceError("Chat completion response has no message content.") from exc
        if not isinstance(content, str):
            raise AiServiceError("Chat completion content is not text.")
        return content


def build_reasoning_client(config: Settings | None = None) -> ReasoningClient | None:
    """Return a client for the configured endpoint, or None when AI ordering is disabled."""
    config = config or settings
    if not config.ai_enabled:
        logger.info("AI route ordering disabled (no API key configured)")
        return None
    return OpenAIChatClient(
        api_key=config.openai_api_key,
        base_url=config.openai_base_url,
        model=config.openai_model,
        timeout=config.ai_timeout_seconds,
    )


def check_health(client: ReasoningClient | None = None) -> bool:
    """Probe the reasoning service with a tiny prompt."""
    client = client or build_reasoning_client()
    if client is None:
        return False
    try:
        reply = client.complete("Reply with the JSON array [1].", max_tokens=5, temperature=0.0)
        return bool(reply.strip())
    except (httpx.HTTPError, AiServiceError, ValueError) as exc:
        logger.warning(f"AI health check failed: {exc}")
        return False
