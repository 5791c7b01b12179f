"""Conversion between wire sections and editor blocks.

The mapping is total: a section of an unknown kind, or whose content does
not match its declared kind, becomes an empty text block instead of raising,
so one bad section cannot spoil an otherwise good generation.
"""

from typing import Any

from pydantic import ValidationError

from studyguide_core.schemas.blocks import (
    PAYLOAD_MODELS,
    Block,
    BlockType,
    ChecklistBlockData,
    GuideMetadata,
    QuizBlockData,
    SectionBlockData,
    TextBlockData,
)
from studyguide_core.schemas.sections import (
    GuideContent,
    GuideContentMetadata,
    Section,
)
from studyguide_core.utils.ids import (
    generate_block_id,
    generate_checklist_item_id,
    generate_question_id,
)
from studyguide_core.utils.logging import get_logger

logger = get_logger(__name__)


def _section_content_to_data(
    section: Section, regenerate_ids: bool
) -> tuple[BlockType, Any]:
    """Map section content onto a block payload, degrading to empty text."""
    try:
        kind = BlockType(section.type)
    except ValueError:
        logger.warning(
            "unknown_section_type", section_id=section.id, section_type=section.type
        )
        return BlockType.TEXT, TextBlockData()

    if kind == BlockType.SECTION:
        collapsed = section.collapsed if section.collapsed is not None else False
        return kind, SectionBlockData(collapsed=collapsed)

    content_type = section.content.get("type", section.type)
    if content_type != section.type:
        logger.warning(
            "section_content_mismatch",
            section_id=section.id,
            section_type=section.type,
            content_type=content_type,
        )
        return BlockType.TEXT, TextBlockData()

    try:
        payload = {**section.content, "type": kind.value}
        data = PAYLOAD_MODELS[kind].model_validate(payload)
    except ValidationError as e:
        logger.warning(
            "section_content_invalid",
            section_id=section.id,
            section_type=section.type,
            errors=e.error_count(),
        )
        return BlockType.TEXT, TextBlockData()

    if regenerate_ids:
        if isinstance(data, QuizBlockData):
            for question in data.questions:
                question.id = generate_question_id()
        elif isinstance(data, ChecklistBlockData):
            for item in data.items:
                item.id = generate_checklist_item_id()

    return kind, data


def section_to_block(section: Section, regenerate_ids: bool = False) -> Block:
    """Convert a section into a block.

    Args:
        section: Section from the generation service or storage
        regenerate_ids: Give the block and its quiz/checklist items fresh ids,
            used for content arriving from outside the current tree

    Returns:
        Equivalent block (an empty text block for unusable sections)
    """
    kind, data = _section_content_to_data(section, regenerate_ids)

    children: list[Block] | None = None
    if kind == BlockType.SECTION:
        children = [
            section_to_block(child, regenerate_ids) for child in section.children or []
        ]

    return Block(
        id=generate_block_id() if regenerate_ids else section.id,
        type=kind,
        title=section.title,
        data=data,
        children=children,
    )


def sections_to_blocks(
    sections: list[Section], regenerate_ids: bool = False
) -> list[Block]:
    """Convert a list of sections into blocks."""
    return [section_to_block(section, regenerate_ids) for section in sections]


def content_to_blocks(content: GuideContent) -> list[Block]:
    """Convert a stored guide document into blocks, keeping original ids."""
    return sections_to_blocks(content.sections, regenerate_ids=False)


def block_to_section(block: Block) -> Section:
    """Convert a block back into its wire section."""
    if block.type == BlockType.SECTION:
        # Sections carry no content of their own
        content: dict[str, Any] = {"type": "text", "markdown": ""}
    else:
        content = block.data.model_dump(mode="json", by_alias=True, exclude_none=True)

    section = Section(
        id=block.id,
        type=block.type.value,
        title=block.title,
        content=content,
    )
    if block.type == BlockType.SECTION:
        if block.children:
            section.children = [block_to_section(child) for child in block.children]
        if isinstance(block.data, SectionBlockData):
            section.collapsed = block.data.collapsed
    return section


def blocks_to_content(
    blocks: list[Block], metadata: GuideMetadata | None = None
) -> GuideContent:
    """Serialize a block tree into a version-tagged guide document.

    Args:
        blocks: Block tree to serialize
        metadata: Optional guide metadata; duration, difficulty and tags are
            stored with the content

    Returns:
        Guide document ready for persistence
    """
    content_metadata = None
    if metadata is not None:
        content_metadata = GuideContentMetadata(
            estimated_duration=metadata.estimated_duration,
            difficulty=metadata.difficulty,
            tags=metadata.tags,
        )
    return GuideContent(
        sections=[block_to_section(block) for block in blocks],
        metadata=content_metadata,
    )
