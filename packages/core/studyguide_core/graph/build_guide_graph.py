"""Build the guide generation graph.

Pipeline Flow:
    generate -> finalize -> convert -> merge -> (output)

``generate`` surfaces each section through ``on_section`` as soon as it is
complete, so callers can show content while the model is still writing.
The remaining nodes produce the final block tree:

- blocks: Resulting guide (existing content merged with generated content
  in add mode, cleaned generated content in replace mode)
- guide_content: Parsed final document, or None if it was malformed
- raw_content: The full generation buffer
- errors: Non-fatal problems encountered along the way
"""

from typing import Annotated, Any, TypedDict

from langgraph.graph import END, StateGraph
from langgraph.types import Checkpointer

from studyguide_core.config import DedupeConfig, GenerationConfig
from studyguide_core.graph.nodes.convert import create_convert_node
from studyguide_core.graph.nodes.finalize import finalize_node
from studyguide_core.graph.nodes.generate import SectionCallback, create_generate_node
from studyguide_core.graph.nodes.merge import create_merge_node
from studyguide_core.model_adapters.base import BaseModelAdapter
from studyguide_core.schemas.blocks import Block
from studyguide_core.schemas.sections import GuideContent, Section


def _keep_last_str(existing: str | None, incoming: str | None) -> str | None:
    """Keep the latest value for progress tracking fields."""
    return incoming if incoming else existing


def _keep_max_int(existing: int, incoming: int) -> int:
    """Keep the maximum value for progress fields."""
    return max(existing or 0, incoming or 0)


def _merge_errors(existing: list[str], incoming: list[str]) -> list[str]:
    """Combine error lists, deduplicating."""
    if not existing:
        return list(incoming or [])
    if not incoming:
        return list(existing)
    return list(dict.fromkeys([*existing, *incoming]))


class GuidePipelineState(TypedDict, total=False):
    """State passed through the guide generation pipeline."""

    # Request
    description: str
    subject: str
    grade_level: str
    mode: str
    existing_blocks: list[Block]

    # Generation
    sections: list[Section]
    raw_content: str
    generation_failed: bool
    guide_content: GuideContent | None

    # Output
    new_blocks: list[Block]
    blocks: list[Block]

    current_step: Annotated[str, _keep_last_str]
    progress: Annotated[int, _keep_max_int]
    errors: Annotated[list[str], _merge_errors]


def build_guide_graph(
    adapter: BaseModelAdapter,
    config: GenerationConfig | None = None,
    on_section: SectionCallback | None = None,
    dedupe_config: DedupeConfig | None = None,
    checkpointer: Checkpointer | None = None,
) -> Any:
    """Build a pipeline that generates guide blocks.

    Args:
        adapter: Generation service adapter
        config: Optional generation configuration
        on_section: Optional per-section callback ``(section, is_first)``
        dedupe_config: Optional similarity thresholds
        checkpointer: Optional LangGraph checkpointer

    Returns:
        Compiled StateGraph ready for invocation
    """
    resolved_config = config or GenerationConfig()

    graph = StateGraph(GuidePipelineState)

    graph.add_node("generate", create_generate_node(adapter, on_section))
    graph.add_node("finalize", finalize_node)
    graph.add_node("convert", create_convert_node(resolved_config))
    graph.add_node("merge", create_merge_node(resolved_config, dedupe_config))

    graph.set_entry_point("generate")
    graph.add_edge("generate", "finalize")
    graph.add_edge("finalize", "convert")
    graph.add_edge("convert", "merge")
    graph.add_edge("merge", END)

    return graph.compile(checkpointer=checkpointer)
