"""Merge node: combine generated blocks with the existing guide."""

from collections.abc import Callable
from typing import Any

from studyguide_core.config import DedupeConfig, GenerationConfig
from studyguide_core.editor.dedupe import dedupe_blocks, merge_into
from studyguide_core.schemas.blocks import Block
from studyguide_core.utils.logging import get_logger, log_exceptions

logger = get_logger(__name__)


def create_merge_node(
    config: GenerationConfig,
    dedupe_config: DedupeConfig | None = None,
) -> Callable[[dict[str, Any]], dict[str, Any]]:
    """Create a merge node.

    Args:
        config: Generation configuration
        dedupe_config: Similarity thresholds

    Returns:
        Node function
    """

    @log_exceptions(logger)
    def merge_node(state: dict[str, Any]) -> dict[str, Any]:
        """Merge new blocks into (add mode) or in place of (replace mode) the guide.

        Args:
            state: Pipeline state with new and existing blocks

        Returns:
            State update with the resulting block tree
        """
        new_blocks: list[Block] = state.get("new_blocks", [])
        existing: list[Block] = state.get("existing_blocks") or []
        mode = state.get("mode", "replace")

        if mode == "add" and existing:
            if config.dedupe_on_merge:
                blocks = merge_into(existing, new_blocks, dedupe_config)
            else:
                blocks = [*existing, *new_blocks]
        elif config.dedupe_on_merge:
            blocks = dedupe_blocks(new_blocks, dedupe_config)
        else:
            blocks = list(new_blocks)

        logger.info(
            "guide_blocks_merged",
            mode=mode,
            existing=len(existing),
            generated=len(new_blocks),
            result=len(blocks),
        )
        return {"blocks": blocks, "current_step": "merge", "progress": 100}

    return merge_node
