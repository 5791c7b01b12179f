"""Model adapters for generation services."""

from studyguide_core.model_adapters.base import BaseModelAdapter
from studyguide_core.model_adapters.openai import OpenAIAdapter

__all__ = ["BaseModelAdapter", "OpenAIAdapter"]
