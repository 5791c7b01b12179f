"""Feeding generated sections into an editor session."""

from enum import Enum

from studyguide_core.editor.converter import section_to_block, sections_to_blocks
from studyguide_core.editor.store import EditorStore
from studyguide_core.schemas.sections import GuideContent, Section
from studyguide_core.utils.logging import get_logger

logger = get_logger(__name__)


class GenerationMode(str, Enum):
    """How generated content relates to the guide being edited."""

    ADD = "add"  # extend the current guide
    REPLACE = "replace"  # start the guide over


def ingest_section(
    store: EditorStore,
    section: Section,
    mode: GenerationMode | str,
    is_first: bool,
) -> None:
    """Ingest one streamed section.

    In replace mode the first section of a generation clears the guide. In
    add mode a section whose kind already exists at the root goes through
    the merge engine; anything else is appended.

    Args:
        store: Editor session to update
        section: Newly extracted section
        mode: Generation mode
        is_first: Whether this is the first section of the generation
    """
    block = section_to_block(section, regenerate_ids=True)
    mode = GenerationMode(mode)

    if mode == GenerationMode.REPLACE and is_first:
        store.initialize_blocks([])
        store.append_blocks([block])
        return

    has_same_kind = any(existing.type == block.type for existing in store.blocks)
    if mode == GenerationMode.ADD and has_same_kind:
        store.append_blocks([block], merge=True)
    else:
        store.append_blocks([block])
    logger.debug(
        "section_ingested",
        block_type=block.type.value,
        mode=mode.value,
        merged=mode == GenerationMode.ADD and has_same_kind,
    )


def ingest_content(
    store: EditorStore, content: GuideContent, mode: GenerationMode | str
) -> None:
    """Ingest a whole generated guide when nothing was streamed.

    Args:
        store: Editor session to update
        content: Parsed final generation output
        mode: Generation mode
    """
    blocks = sections_to_blocks(content.sections, regenerate_ids=True)
    if GenerationMode(mode) == GenerationMode.ADD and store.blocks:
        store.append_blocks(blocks)
    else:
        store.initialize_blocks([])
        store.append_blocks(blocks)
