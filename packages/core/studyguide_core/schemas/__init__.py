"""Data schemas for guide content.

Blocks are the in-memory editor tree, sections are the wire/persisted
shape the generation service and storage use, and events describe an
in-progress generation.
"""

from studyguide_core.schemas.blocks import (
    AlertBlockData,
    AlertVariant,
    Block,
    BlockType,
    ChecklistBlockData,
    ChecklistItem,
    DefinitionBlockData,
    Difficulty,
    GuideMetadata,
    HeaderStyle,
    QuestionType,
    QuizBlockData,
    QuizQuestion,
    SectionBlockData,
    TableBlockData,
    TextBlockData,
    create_empty_block,
    find_block,
    iter_blocks,
)
from studyguide_core.schemas.events import GenerationEvent, GenerationEventType
from studyguide_core.schemas.sections import (
    GuideContent,
    GuideContentMetadata,
    Section,
)

__all__ = [
    # Blocks
    "Block",
    "BlockType",
    "GuideMetadata",
    "create_empty_block",
    "find_block",
    "iter_blocks",
    # Payloads
    "AlertBlockData",
    "AlertVariant",
    "ChecklistBlockData",
    "ChecklistItem",
    "DefinitionBlockData",
    "Difficulty",
    "HeaderStyle",
    "QuestionType",
    "QuizBlockData",
    "QuizQuestion",
    "SectionBlockData",
    "TableBlockData",
    "TextBlockData",
    # Sections
    "GuideContent",
    "GuideContentMetadata",
    "Section",
    # Events
    "GenerationEvent",
    "GenerationEventType",
]
