"""
LLM Service

Generative-text transport for the AI assist pipeline, backed by the
Gemini ``generateContent`` REST endpoint.

Design:
    - Async HTTP calls via httpx (non-blocking).
    - One POST per call; no retry here (the pipeline owns retries).
    - Every failure mode (timeout, connection, non-2xx, bad JSON) is
      folded into TransportError so callers handle a single signal.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from quicknotes.core.config import settings

logger = logging.getLogger(__name__)


class TransportError(Exception):
    """The remote text-generation call did not produce a usable response."""


class GeminiClient:
    """
    Async client for one-shot text generation.

    Usage::

        client = GeminiClient()
        text = await client.generate_text(
            prompt="Buy milk\\nand eggs",
            system_instruction="Extract the action items...",
        )
        if text is None:
            print("No text in response")

    Args:
        api_url: generateContent endpoint (default from config).
        api_key: API key passed as the ``key`` query parameter.
        timeout: Request timeout in seconds (default from config).
        transport: Optional httpx transport (tests use httpx.MockTransport).
    """

    def __init__(
        self,
        api_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_url = api_url or settings.GEMINI_API_URL
        self._api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        self._timeout = timeout or settings.GEMINI_TIMEOUT
        self._transport = transport

    async def generate_text(self, prompt: str, system_instruction: str) -> str | None:
        """
        Run one generation request.

        Args:
            prompt: User payload (the note content).
            system_instruction: Action-specific instruction.

        Returns:
            Generated text, or None if the response has no text part.

        Raises:
            TransportError: On timeout, connection failure, non-2xx
                status or an undecodable body.
        """
        payload = build_payload(prompt, system_instruction)

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    self._api_url,
                    params={"key": self._api_key},
                    json=payload,
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"Gemini API error: HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(f"Gemini unreachable: {type(e).__name__}: {e}") from e
        except ValueError as e:
            raise TransportError(f"Gemini returned invalid JSON: {e}") from e

        text = extract_text(data)
        logger.info(
            "Gemini response received (length=%s)",
            len(text) if text is not None else "none",
        )
        return text


def build_payload(prompt: str, system_instruction: str) -> dict[str, Any]:
    """Request body for generateContent."""
    return {
        "contents": [{"parts": [{"text": prompt}]}],
        "systemInstruction": {"parts": [{"text": system_instruction}]},
    }


def extract_text(data: Any) -> str | None:
    """Return ``candidates[0].content.parts[0].text`` or None if absent."""
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    return text if isinstance(text, str) else None
