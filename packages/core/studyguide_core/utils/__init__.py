"""Utility functions."""

from studyguide_core.utils.ids import (
    generate_block_id,
    generate_checklist_item_id,
    generate_question_id,
)
from studyguide_core.utils.logging import configure_logging, get_logger, log_exceptions
from studyguide_core.utils.retry import RateLimitError, with_retry

__all__ = [
    "configure_logging",
    "generate_block_id",
    "generate_checklist_item_id",
    "generate_question_id",
    "get_logger",
    "log_exceptions",
    "RateLimitError",
    "with_retry",
]
