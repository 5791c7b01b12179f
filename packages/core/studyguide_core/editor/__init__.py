"""Block editing: conversion, deduplication and the session store."""

from studyguide_core.editor.converter import (
    block_to_section,
    blocks_to_content,
    content_to_blocks,
    section_to_block,
    sections_to_blocks,
)
from studyguide_core.editor.dedupe import (
    DuplicateReport,
    blocks_are_duplicates,
    count_duplicates,
    dedupe_blocks,
    is_duplicate,
    merge_into,
    normalize_text,
    replace_matching,
    text_similarity,
)
from studyguide_core.editor.ingest import GenerationMode, ingest_content, ingest_section
from studyguide_core.editor.store import EditorStore, MoveDirection

__all__ = [
    # Converter
    "block_to_section",
    "blocks_to_content",
    "content_to_blocks",
    "section_to_block",
    "sections_to_blocks",
    # Dedupe and merge
    "DuplicateReport",
    "blocks_are_duplicates",
    "count_duplicates",
    "dedupe_blocks",
    "is_duplicate",
    "merge_into",
    "normalize_text",
    "replace_matching",
    "text_similarity",
    # Store
    "EditorStore",
    "GenerationMode",
    "MoveDirection",
    "ingest_content",
    "ingest_section",
]
