"""Finalize node: validate the complete generation output."""

from typing import Any

from studyguide_core.streaming.extractor import MalformedGuideError, parse_guide_content
from studyguide_core.utils.logging import get_logger, log_exceptions

logger = get_logger(__name__)


@log_exceptions(logger)
def finalize_node(state: dict[str, Any]) -> dict[str, Any]:
    """Parse the full buffer once streaming has ended.

    A malformed buffer is recorded as an error; sections already streamed
    are kept.

    Args:
        state: Pipeline state with the raw buffer

    Returns:
        State update with the parsed guide content (or None)
    """
    if state.get("generation_failed"):
        return {"guide_content": None, "current_step": "finalize"}

    raw_content = state.get("raw_content", "")
    try:
        content = parse_guide_content(raw_content)
    except MalformedGuideError as e:
        logger.warning(
            "final_output_malformed",
            error=str(e),
            sections_streamed=len(state.get("sections", [])),
        )
        return {
            "guide_content": None,
            "errors": [
                "Content generation completed but final validation failed. "
                "Some sections may have been added."
            ],
            "current_step": "finalize",
            "progress": 70,
        }

    return {"guide_content": content, "current_step": "finalize", "progress": 70}
