"""LLM client interface and implementations."""
import logging
from abc import ABC, abstractmethod
from typing import Any, Union

import httpx

logger = logging.getLogger("spark.thinking.models")

ContentBlocks = list[dict[str, Any]]


class LLMError(RuntimeError):
    """The LLM call failed or returned something unusable."""


def as_blocks(content: Union[str, ContentBlocks]) -> ContentBlocks:
    if isinstance(content, str):
        return [{"type": "text", "text": content}]
    return content


class LLMClient(ABC):
    """Abstract interface for LLM generation."""

    @abstractmethod
    def generate(
        self,
        system: str,
        content: Union[str, ContentBlocks],
        max_tokens: int = 400,
    ) -> str:
        """Generate a reply to one user turn under a system prompt."""
        ...


class NoLLMClient(LLMClient):
    """Offline client used when no API key is configured.

    Echoes the text blocks of the user turn back, which keeps the whole
    request path usable (and testable) without network access.
    """

    def generate(
        self,
        system: str,
        content: Union[str, ContentBlocks],
        max_tokens: int = 400,
    ) -> str:
        texts = [b["text"] for b in as_blocks(content) if b.get("type") == "text"]
        return "\n".join(texts)


class AnthropicClient(LLMClient):
    """Anthropic Messages API over httpx."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str = "https://api.anthropic.com",
        version: str = "2023-06-01",
        timeout: float = 60.0,
    ):
        self._api_key = api_key
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._version = version
        self._timeout = timeout

    def _make_headers(self) -> dict[str, str]:
        return {
            "x-api-key": self._api_key,
            "anthropic-version": self._version,
            "content-type": "application/json",
        }

    def generate(
        self,
        system: str,
        content: Union[str, ContentBlocks],
        max_tokens: int = 400,
    ) -> str:
        payload = {
            "model": self._model,
            "max_tokens": max_tokens,
            "system": system,
            "messages": [{"role": "user", "content": as_blocks(content)}],
        }
        try:
            with httpx.Client(timeout=self._timeout) as client:
                resp = client.post(
                    f"{self._base_url}/v1/messages",
                    headers=self._make_headers(),
                    json=payload,
                )
                resp.raise_for_status()
                try:
                    data = resp.json()
                except ValueError as e:
                    logger.error("Anthropic API returned a non-JSON body")
                    raise LLMError("Unexpected response body") from e
        except httpx.HTTPStatusError as e:
            logger.error("Anthropic API returned %d", e.response.status_code)
            raise LLMError(f"LLM request failed with status {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error("Anthropic API request failed: %s", e)
            raise LLMError("LLM request failed") from e

        if not isinstance(data, dict):
            raise LLMError("Unexpected response body")
        blocks = data.get("content") or []
        if not blocks or blocks[0].get("type") != "text":
            raise LLMError("Unexpected response type")

        usage = data.get("usage") or {}
        logger.info(
            "LLM reply: model=%s in=%s out=%s",
            self._model, usage.get("input_tokens"), usage.get("output_tokens"),
        )
        return blocks[0]["text"]
