"""LangGraph pipeline for generating guide content.

    >>> from studyguide_core.graph import build_guide_graph
    >>> graph = build_guide_graph(adapter, on_section=show_section)
    >>> result = await graph.ainvoke({"description": "...", "mode": "replace"})
    >>> result["blocks"]
"""

from studyguide_core.graph.build_guide_graph import (
    GuidePipelineState,
    build_guide_graph,
)
from studyguide_core.graph.prompts import build_guide_prompt

__all__ = [
    "GuidePipelineState",
    "build_guide_graph",
    "build_guide_prompt",
]
