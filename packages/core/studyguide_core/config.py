"""Configuration for deduplication and the generation pipeline.

Thresholds are empirically chosen and meant to be tuned; environment
overrides are read through `studyguide_core.settings`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from studyguide_core.settings import Settings


@dataclass(frozen=True)
class DedupeConfig:
    """Similarity thresholds for fuzzy duplicate detection."""

    # Whole-block comparators
    definition_threshold: float = 0.9
    text_threshold: float = 0.9
    section_threshold: float = 0.9
    prefix_threshold: float = 0.8  # quiz/checklist first-items prefix

    # Item-level comparators
    question_threshold: float = 0.75  # rephrased questions are common
    item_threshold: float = 0.85

    # Number of leading items concatenated for quiz/checklist comparison
    prefix_items: int = 3

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> DedupeConfig:
        """Build a config from environment settings.

        Args:
            settings: Optional settings instance (defaults to module settings)

        Returns:
            DedupeConfig with thresholds taken from settings
        """
        if settings is None:
            from studyguide_core.settings import settings as default_settings

            settings = default_settings

        return cls(
            definition_threshold=settings.dedupe_definition_threshold,
            text_threshold=settings.dedupe_text_threshold,
            section_threshold=settings.dedupe_section_threshold,
            prefix_threshold=settings.dedupe_prefix_threshold,
            question_threshold=settings.dedupe_question_threshold,
            item_threshold=settings.dedupe_item_threshold,
        )


@dataclass(frozen=True)
class GenerationConfig:
    """Configuration for the guide generation graph."""

    # Give streamed blocks fresh ids so they cannot collide with the tree
    regenerate_ids: bool = True

    # Run "add" mode output through the merge engine
    dedupe_on_merge: bool = True
