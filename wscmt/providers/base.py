from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

import httpx

from ..config import Config


class BaseDriver(ABC):
    """Abstract base for provider-specific text generation.

    Each driver encapsulates one provider's HTTP call pattern and response
    shape. Prompt wording and output cleanup stay in LLMClient so they are
    shared across providers.
    """

    def __init__(
        self,
        config: Config,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.config.request_timeout, transport=self._transport
        )

    @abstractmethod
    async def invoke(self, prompt: str) -> str:
        """Send ``prompt`` and return the first text segment of the reply.

        Must raise LLMError for network failures, error statuses and
        response bodies that do not have the expected shape.
        """
        raise NotImplementedError
