from __future__ import annotations

import logging

import httpx

from ..exceptions import LLMError
from .base import BaseDriver

ANTHROPIC_VERSION = "2023-06-01"

logger = logging.getLogger(__name__)


class AnthropicDriver(BaseDriver):
    """Driver handling Anthropic API calls (messages endpoint)."""

    async def invoke(self, prompt: str) -> str:
        api_key = self.config.resolve_api_key()
        if not api_key:
            raise LLMError(
                "Environment variable '"
                f"{self.config.api_key_env}"
                "' is not set or empty."
            )

        url = self.config.llm_endpoint.rstrip("/") + "/v1/messages"
        headers = {
            "x-api-key": api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "content-type": "application/json",
        }
        payload = {
            "model": self.config.model,
            "max_tokens": self.config.max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        logger.debug(
            "POST %s model=%s prompt_len=%d", url, self.config.model, len(prompt)
        )
        try:
            async with self._client() as client:
                response = await client.post(url, headers=headers, json=payload)
        except httpx.HTTPError as e:
            raise LLMError(
                f"Anthropic network error during messages request: {e}"
            ) from e

        if not response.is_success:
            raise LLMError(
                "Anthropic error {}: {}".format(response.status_code, response.text)
            )

        try:
            data = response.json()
            text = data["content"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise LLMError(f"Malformed Anthropic response: {e!r}") from e
        if not isinstance(text, str):
            raise LLMError("Malformed Anthropic response: text is not a string")
        return text
