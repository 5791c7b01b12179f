"""studyguide-core: Block-based study guides populated by streamed generation.

A guide is a tree of typed blocks (text, sections, alerts, tables, quizzes,
checklists, definitions). A generation service writes the guide as one large
JSON document; this package surfaces each section the moment it is complete
and folds generated content into an existing guide without duplicating it.

    >>> from studyguide_core import EditorStore, SectionStream, section_to_block
    >>> store = EditorStore()
    >>> stream = SectionStream()
    >>> for chunk in chunks:
    ...     for section in stream.feed(chunk):
    ...         store.append_blocks([section_to_block(section, regenerate_ids=True)])

For a full generate-and-merge run, see `studyguide_core.graph`.
"""

from studyguide_core.config import DedupeConfig, GenerationConfig
from studyguide_core.editor import (
    EditorStore,
    GenerationMode,
    blocks_to_content,
    content_to_blocks,
    dedupe_blocks,
    ingest_section,
    merge_into,
    section_to_block,
)
from studyguide_core.graph import build_guide_graph
from studyguide_core.schemas import (
    Block,
    BlockType,
    GuideContent,
    GuideMetadata,
    Section,
)
from studyguide_core.streaming import (
    MalformedGuideError,
    SectionStream,
    extract_complete_sections,
    stream_guide_events,
)

__version__ = "0.1.0"

__all__ = [
    # Configuration
    "DedupeConfig",
    "GenerationConfig",
    # Schemas
    "Block",
    "BlockType",
    "GuideContent",
    "GuideMetadata",
    "Section",
    # Streaming
    "MalformedGuideError",
    "SectionStream",
    "extract_complete_sections",
    "stream_guide_events",
    # Editor
    "EditorStore",
    "GenerationMode",
    "blocks_to_content",
    "content_to_blocks",
    "dedupe_blocks",
    "ingest_section",
    "merge_into",
    "section_to_block",
    # Pipeline
    "build_guide_graph",
]
