"""Commit message generation logic for wscmt."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from .config import Config, get_active_config
from .exceptions import LLMError
from .llm import LLMClient

FALLBACK_COMMIT_MESSAGE = "chore: update submodule changes"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratedMessage:
    """A message produced by the text-generation service."""

    text: str

    @property
    def is_fallback(self) -> bool:
        return False


@dataclass(frozen=True)
class FallbackMessage:
    """The fixed message substituted when generation failed."""

    text: str
    cause: str

    @property
    def is_fallback(self) -> bool:
        return True


CommitMessage = Union[GeneratedMessage, FallbackMessage]


class CommitGenerator:
    """Generates commit messages from diffs, never raising to the caller."""

    def __init__(
        self,
        config: Optional[Config] = None,
        llm_client: Optional[LLMClient] = None,
    ) -> None:
        self._config = config or get_active_config()
        self._llm_client = llm_client

    @property
    def llm_client(self) -> LLMClient:
        # Built lazily so an unsupported provider degrades to the fallback.
        if self._llm_client is None:
            self._llm_client = LLMClient(self._config)
        return self._llm_client

    async def generate(self, diff: str) -> CommitMessage:
        """Return a commit message for ``diff``.

        Any failure of the service (network error, error status, malformed
        body, missing credential, empty reply) is logged and mapped to
        :data:`FALLBACK_COMMIT_MESSAGE`.
        """
        try:
            text = await self.llm_client.generate_commit_message(diff)
        except LLMError as e:
            logger.error("Error generating commit message: %s", e)
            return FallbackMessage(FALLBACK_COMMIT_MESSAGE, cause=str(e))
        return GeneratedMessage(text)
