"""OpenAI model adapter."""

import asyncio
from collections.abc import AsyncIterator
from typing import Any

from studyguide_core.model_adapters.base import BaseModelAdapter
from studyguide_core.settings import settings
from studyguide_core.utils.logging import get_logger
from studyguide_core.utils.retry import with_retry

logger = get_logger(__name__)


class OpenAIAdapter(BaseModelAdapter):
    """Adapter for OpenAI chat models with streamed output."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int = 3,
        max_tokens: int | None = None,
    ):
        """Initialize the OpenAI adapter.

        Args:
            api_key: OpenAI API key (defaults to STUDYGUIDE_OPENAI_API_KEY)
            model: Chat model name
            base_url: Optional custom base URL
            timeout: Timeout in seconds for opening the stream
            max_retries: Maximum attempts for transient failures
            max_tokens: Output token limit
        """
        self.api_key = api_key or settings.openai_api_key
        self.model = model or settings.openai_model
        self.base_url = base_url or settings.openai_base_url
        self.timeout = timeout or settings.openai_timeout
        self.max_retries = max_retries
        self.max_tokens = max_tokens or settings.max_output_tokens

        self._client: Any = None
        logger.info("openai_adapter_initialized", model=self.model)

    @property
    def client(self) -> Any:
        """Lazy-load the OpenAI client."""
        if self._client is None:
            from openai import AsyncOpenAI

            self._client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout,
            )
        return self._client

    async def _open_stream(self, messages: list[dict[str, Any]]) -> Any:
        """Open a streaming completion, retrying transient failures."""

        async def _make_request() -> Any:
            return await asyncio.wait_for(
                self.client.chat.completions.create(
                    model=self.model,
                    messages=messages,
                    max_tokens=self.max_tokens,
                    stream=True,
                ),
                timeout=self.timeout,
            )

        return await with_retry(
            _make_request,
            max_attempts=self.max_retries,
            operation_name="open_generation_stream",
        )

    async def stream_text(
        self,
        prompt: str,
        system: str | None = None,
    ) -> AsyncIterator[str]:
        """Stream generated text chunks from the chat completions API."""
        messages: list[dict[str, Any]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        logger.debug("generation_stream_opening", model=self.model)
        stream = await self._open_stream(messages)

        chunk_count = 0
        async for chunk in stream:
            if not chunk.choices:
                continue
            text = chunk.choices[0].delta.content
            if text:
                chunk_count += 1
                yield text

        logger.debug("generation_stream_closed", chunks=chunk_count)
