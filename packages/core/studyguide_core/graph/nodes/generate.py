"""Generate node: stream guide JSON and surface sections as they complete."""

import inspect
from collections.abc import Awaitable, Callable
from typing import Any

from studyguide_core.graph.prompts import SYSTEM_PROMPT, build_guide_prompt
from studyguide_core.model_adapters.base import BaseModelAdapter
from studyguide_core.schemas.sections import Section
from studyguide_core.streaming.stream import SectionStream
from studyguide_core.utils.logging import get_logger
from studyguide_core.utils.retry import describe_exception

logger = get_logger(__name__)

SectionCallback = Callable[[Section, bool], Awaitable[None] | None]


def create_generate_node(
    adapter: BaseModelAdapter,
    on_section: SectionCallback | None = None,
) -> Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]:
    """Create a generate node.

    Args:
        adapter: Generation service adapter
        on_section: Called with ``(section, is_first)`` for every section the
            moment it is complete; may be sync or async

    Returns:
        Node function
    """

    async def generate_node(state: dict[str, Any]) -> dict[str, Any]:
        """Stream the guide and extract sections incrementally.

        Args:
            state: Pipeline state with the request

        Returns:
            State update with streamed sections and the raw buffer
        """
        description = state.get("description", "")
        if not description.strip():
            return {
                "errors": ["No description provided"],
                "current_step": "generate",
                "generation_failed": True,
            }

        prompt = build_guide_prompt(
            description,
            subject=state.get("subject", "other"),
            grade_level=state.get("grade_level", "9th-10th"),
            mode=state.get("mode", "replace"),
            existing_blocks=state.get("existing_blocks"),
        )

        stream = SectionStream()
        sections: list[Section] = []

        try:
            chunks = adapter.stream_text(prompt, system=SYSTEM_PROMPT)
            async for batch in stream.consume(chunks):
                for section in batch:
                    sections.append(section)
                    if on_section is not None:
                        result = on_section(section, len(sections) == 1)
                        if inspect.isawaitable(result):
                            await result
        except Exception as e:
            logger.error(
                "generation_failed",
                error=describe_exception(e),
                sections_emitted=len(sections),
            )
            return {
                "sections": sections,
                "raw_content": stream.buffer,
                "errors": [f"Generation failed: {describe_exception(e)}"],
                "current_step": "generate",
                "progress": 60,
                "generation_failed": True,
            }

        return {
            "sections": sections,
            "raw_content": stream.buffer,
            "current_step": "generate",
            "progress": 60,
            "generation_failed": False,
        }

    return generate_node
