"""Streaming extraction of guide sections from generation output."""

from studyguide_core.streaming.extractor import (
    ExtractionResult,
    MalformedGuideError,
    extract_complete_sections,
    parse_guide_content,
    strip_code_fences,
)
from studyguide_core.streaming.stream import SectionStream, stream_guide_events

__all__ = [
    "ExtractionResult",
    "MalformedGuideError",
    "SectionStream",
    "extract_complete_sections",
    "parse_guide_content",
    "stream_guide_events",
    "strip_code_fences",
]
