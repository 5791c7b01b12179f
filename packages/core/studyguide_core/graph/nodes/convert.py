"""Convert node: turn generated sections into editor blocks."""

from collections.abc import Callable
from typing import Any

from studyguide_core.config import GenerationConfig
from studyguide_core.editor.converter import sections_to_blocks
from studyguide_core.schemas.sections import GuideContent, Section


def create_convert_node(
    config: GenerationConfig,
) -> Callable[[dict[str, Any]], dict[str, Any]]:
    """Create a convert node.

    Args:
        config: Generation configuration

    Returns:
        Node function
    """

    def convert_node(state: dict[str, Any]) -> dict[str, Any]:
        # Streamed sections win; the final document is the fallback when
        # nothing could be extracted incrementally.
        sections: list[Section] = state.get("sections") or []
        content: GuideContent | None = state.get("guide_content")
        if not sections and content is not None:
            sections = content.sections

        blocks = sections_to_blocks(sections, regenerate_ids=config.regenerate_ids)
        return {"new_blocks": blocks, "current_step": "convert", "progress": 85}

    return convert_node
