"""LLM integration for wscmt.

Builds the commit-message instruction for a diff, hands it to the
provider driver and tidies the reply: surrounding whitespace, a wrapping
markdown code fence and matching outer quotes are removed.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from .config import Config, get_active_config
from .exceptions import LLMError
from .providers.anthropic_driver import AnthropicDriver
from .providers.base import BaseDriver

PROMPT_TEMPLATE = (
    "Generate a concise, descriptive git commit message for the following "
    "changes. Use conventional commits format. Only return the commit "
    "message, nothing else.\n\n{diff}"
)

logger = logging.getLogger(__name__)


class LLMClient:
    """Provider-aware client for generating commit messages."""

    def __init__(
        self,
        config: Optional[Config] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config or get_active_config()
        self.provider = self.config.provider
        self.model = self.config.model

        self._driver: BaseDriver
        if self.provider == "anthropic":
            self._driver = AnthropicDriver(self.config, transport=transport)
        else:
            raise LLMError(f"Unsupported provider: {self.provider}")

    @staticmethod
    def build_prompt(diff: str) -> str:
        return PROMPT_TEMPLATE.format(diff=diff)

    async def generate_commit_message(self, diff: str) -> str:
        prompt = self.build_prompt(diff)
        logger.debug(
            "Requesting commit message provider=%s model=%s diff_len=%d",
            self.provider,
            self.model,
            len(diff),
        )
        raw = await self._driver.invoke(prompt)
        message = self._clean_output(raw)
        if not message:
            raise LLMError("Empty response from LLM")
        return message

    @staticmethod
    def _clean_output(raw: str) -> str:
        text = raw.strip()
        if text.startswith("```"):
            lines = text.splitlines()[1:]
            if lines and lines[-1].strip().startswith("```"):
                lines = lines[:-1]
            text = "\n".join(lines).strip()
        for quote in ('"', "'", "`"):
            if len(text) >= 2 and text.startswith(quote) and text.endswith(quote):
                text = text[1:-1].strip()
                break
        return text
