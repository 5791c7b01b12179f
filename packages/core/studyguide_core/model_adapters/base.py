"""Base model adapter interface."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator


class BaseModelAdapter(ABC):
    """Abstract base class for generation service adapters."""

    @abstractmethod
    def stream_text(
        self,
        prompt: str,
        system: str | None = None,
    ) -> AsyncIterator[str]:
        """Stream generated text for a prompt.

        Args:
            prompt: User prompt
            system: Optional system prompt

        Returns:
            Async iterator of text chunks in generation order
        """

    async def generate_text(self, prompt: str, system: str | None = None) -> str:
        """Collect a full generation into a single string."""
        parts: list[str] = []
        async for chunk in self.stream_text(prompt, system=system):
            parts.append(chunk)
        return "".join(parts)
