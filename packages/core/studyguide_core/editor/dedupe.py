"""Fuzzy deduplication and merging of guide blocks.

Generation can be re-run over a guide that already has content, and models
happily repeat themselves, so incoming blocks are compared against what is
already there using word-set Jaccard similarity on normalized text:

- near-identical definitions, text and titled sections are dropped
- quizzes and checklists are never just dropped; their non-duplicate
  questions/items are folded into the matching block instead
- alerts and tables are always kept

Deduplication is best-effort and local to one call. None of the functions
here mutate their inputs.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from studyguide_core.config import DedupeConfig
from studyguide_core.schemas.blocks import (
    Block,
    BlockType,
    ChecklistBlockData,
    ChecklistItem,
    DefinitionBlockData,
    QuizBlockData,
    QuizQuestion,
    TextBlockData,
)
from studyguide_core.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

MERGEABLE_TYPES = frozenset({BlockType.QUIZ, BlockType.CHECKLIST})


def normalize_text(text: str | None) -> str:
    """Case-fold, trim and collapse whitespace."""
    return " ".join((text or "").casefold().split())


def text_similarity(a: str | None, b: str | None) -> float:
    """Calculate word-set Jaccard similarity between two strings.

    Identical strings (after normalization) always score 1.0.
    """
    norm_a = normalize_text(a)
    norm_b = normalize_text(b)

    if norm_a == norm_b:
        return 1.0
    if not norm_a or not norm_b:
        return 0.0

    words_a = set(norm_a.split(" "))
    words_b = set(norm_b.split(" "))
    return len(words_a & words_b) / len(words_a | words_b)


def is_duplicate(a: str | None, b: str | None, threshold: float = 0.8) -> bool:
    """Check whether two strings are similar enough to be duplicates."""
    return text_similarity(a, b) >= threshold


def _unique_by(
    entries: list[T], key: Callable[[T], str], threshold: float, kind: str
) -> list[T]:
    """Keep the first of each group of near-duplicate entries, dropping blanks."""
    seen: list[str] = []
    unique: list[T] = []
    for entry in entries:
        normalized = normalize_text(key(entry))
        if not normalized:
            continue
        if any(is_duplicate(normalized, existing, threshold) for existing in seen):
            logger.debug("duplicate_item_removed", kind=kind, text=normalized[:50])
            continue
        seen.append(normalized)
        unique.append(entry)
    return unique


def dedupe_checklist_items(
    data: ChecklistBlockData, config: DedupeConfig | None = None
) -> ChecklistBlockData:
    """Remove empty and near-duplicate checklist items."""
    config = config or DedupeConfig.from_settings()
    items = _unique_by(
        data.items, lambda item: item.label, config.item_threshold, "checklist_item"
    )
    return data.model_copy(update={"items": items})


def dedupe_quiz_questions(
    data: QuizBlockData, config: DedupeConfig | None = None
) -> QuizBlockData:
    """Remove empty and near-duplicate quiz questions."""
    config = config or DedupeConfig.from_settings()
    questions = _unique_by(
        data.questions, lambda q: q.question, config.question_threshold, "quiz_question"
    )
    return data.model_copy(update={"questions": questions})


def _prefix_text(block: Block, config: DedupeConfig) -> str:
    """Concatenate the first few item labels/questions of a quiz or checklist."""
    if isinstance(block.data, QuizBlockData):
        texts = [q.question for q in block.data.questions[: config.prefix_items]]
    elif isinstance(block.data, ChecklistBlockData):
        texts = [item.label for item in block.data.items[: config.prefix_items]]
    else:
        return ""
    return " ".join(normalize_text(text) for text in texts)


def blocks_are_duplicates(
    a: Block, b: Block, config: DedupeConfig | None = None
) -> bool:
    """Compare two blocks with the comparator for their type.

    Args:
        a: First block
        b: Second block
        config: Similarity thresholds

    Returns:
        True if the blocks are near-duplicates
    """
    config = config or DedupeConfig.from_settings()
    if a.type != b.type:
        return False

    if isinstance(a.data, DefinitionBlockData) and isinstance(
        b.data, DefinitionBlockData
    ):
        return is_duplicate(a.data.term, b.data.term, config.definition_threshold)

    if isinstance(a.data, TextBlockData) and isinstance(b.data, TextBlockData):
        return is_duplicate(a.data.markdown, b.data.markdown, config.text_threshold)

    if a.type == BlockType.SECTION:
        if a.title and b.title:
            return is_duplicate(a.title, b.title, config.section_threshold)
        return False

    if a.type in MERGEABLE_TYPES:
        prefix_a = _prefix_text(a, config)
        prefix_b = _prefix_text(b, config)
        if not prefix_a or not prefix_b:
            return False
        return is_duplicate(prefix_a, prefix_b, config.prefix_threshold)

    # Alerts and tables are always kept
    return False


def _union_items(target: Block, incoming: Block, config: DedupeConfig) -> int:
    """Append incoming quiz questions / checklist items missing from target.

    Mutates ``target``, which must be a private copy.

    Returns:
        Number of entries added
    """
    added = 0
    if isinstance(target.data, QuizBlockData) and isinstance(
        incoming.data, QuizBlockData
    ):
        questions: list[QuizQuestion] = target.data.questions
        for question in incoming.data.questions:
            if not any(
                is_duplicate(q.question, question.question, config.question_threshold)
                for q in questions
            ):
                questions.append(question.model_copy(deep=True))
                added += 1
    elif isinstance(target.data, ChecklistBlockData) and isinstance(
        incoming.data, ChecklistBlockData
    ):
        items: list[ChecklistItem] = target.data.items
        for item in incoming.data.items:
            if not any(
                is_duplicate(i.label, item.label, config.item_threshold) for i in items
            ):
                items.append(item.model_copy(deep=True))
                added += 1
    return added


def _item_entries(block: Block) -> list[QuizQuestion] | list[ChecklistItem]:
    if isinstance(block.data, QuizBlockData):
        return block.data.questions
    if isinstance(block.data, ChecklistBlockData):
        return block.data.items
    return []


def _clean_block(block: Block, config: DedupeConfig) -> Block:
    """Return a copy of a block with its items and children deduplicated."""
    cleaned = block.model_copy(deep=True)
    if isinstance(cleaned.data, ChecklistBlockData):
        cleaned.data = dedupe_checklist_items(cleaned.data, config)
    elif isinstance(cleaned.data, QuizBlockData):
        cleaned.data = dedupe_quiz_questions(cleaned.data, config)

    if cleaned.children:
        cleaned.children = _dedupe_pass(cleaned.children, config)
    return cleaned


def _dedupe_pass(blocks: list[Block], config: DedupeConfig) -> list[Block]:
    unique: list[Block] = []
    for block in blocks:
        cleaned = _clean_block(block, config)
        match = next(
            (
                existing
                for existing in unique
                if blocks_are_duplicates(cleaned, existing, config)
            ),
            None,
        )
        if match is None:
            unique.append(cleaned)
            continue

        logger.debug(
            "duplicate_removed",
            block_type=cleaned.type.value,
            block_id=cleaned.id,
            kept_id=match.id,
        )
        if cleaned.type in MERGEABLE_TYPES and match.type == cleaned.type:
            _union_items(match, cleaned, config)
    return unique


def dedupe_blocks(
    blocks: list[Block], config: DedupeConfig | None = None
) -> list[Block]:
    """Remove duplicate blocks and duplicate items within blocks.

    Folding items into a quiz or checklist can change the leading items it
    is compared by, so passes repeat until nothing changes. Each changing
    pass removes at least one block or item, so this terminates, and the
    result is a fixpoint: ``dedupe_blocks(dedupe_blocks(t)) == dedupe_blocks(t)``.

    Args:
        blocks: Block tree to clean
        config: Similarity thresholds

    Returns:
        New, deduplicated block tree
    """
    config = config or DedupeConfig.from_settings()
    result = _dedupe_pass(blocks, config)
    while True:
        next_result = _dedupe_pass(result, config)
        if next_result == result:
            return result
        result = next_result


def merge_into(
    existing: list[Block],
    candidates: list[Block],
    config: DedupeConfig | None = None,
) -> list[Block]:
    """Merge generated blocks into an existing tree.

    Candidates are cleaned first. A quiz or checklist candidate is folded
    into the first root-level block of the same kind, if there is one, and
    dropped if cleaning left it without entries and there is none. Any
    other candidate is dropped when it duplicates a root-level block and
    appended otherwise.

    Args:
        existing: Current block tree (not modified)
        candidates: Newly generated blocks
        config: Similarity thresholds

    Returns:
        Merged block tree
    """
    config = config or DedupeConfig.from_settings()
    merged = [block.model_copy(deep=True) for block in existing]

    for candidate in candidates:
        cleaned = _clean_block(candidate, config)

        if cleaned.type in MERGEABLE_TYPES:
            target = next((b for b in merged if b.type == cleaned.type), None)
            if target is not None:
                added = _union_items(target, cleaned, config)
                logger.info(
                    "block_items_merged",
                    block_type=cleaned.type.value,
                    target_id=target.id,
                    added=added,
                )
                continue
            if not _item_entries(cleaned):
                logger.info(
                    "empty_block_dropped",
                    block_type=cleaned.type.value,
                    block_id=cleaned.id,
                )
                continue
        elif any(blocks_are_duplicates(cleaned, block, config) for block in merged):
            logger.info(
                "duplicate_removed", block_type=cleaned.type.value, block_id=cleaned.id
            )
            continue

        merged.append(cleaned)

    return merged


def _matches_for_replacement(existing: Block, incoming: Block) -> bool:
    if existing.type != incoming.type:
        return False
    if incoming.type in MERGEABLE_TYPES:
        return True
    return bool(
        existing.title
        and incoming.title
        and existing.title.casefold() == incoming.title.casefold()
    )


def replace_matching(existing: list[Block], candidates: list[Block]) -> list[Block]:
    """Overwrite same-kind root blocks with regenerated ones.

    A quiz or checklist replaces the first root block of the same type;
    other kinds replace a root block of the same type whose title matches
    case-insensitively. Candidates without a match are appended.

    Args:
        existing: Current block tree (not modified)
        candidates: Regenerated blocks

    Returns:
        Updated block tree
    """
    updated = [block.model_copy(deep=True) for block in existing]
    for candidate in candidates:
        replacement = candidate.model_copy(deep=True)
        index = next(
            (
                i
                for i, block in enumerate(updated)
                if _matches_for_replacement(block, replacement)
            ),
            None,
        )
        if index is None:
            updated.append(replacement)
        else:
            logger.info(
                "block_replaced",
                block_type=replacement.type.value,
                replaced_id=updated[index].id,
            )
            updated[index] = replacement
    return updated


@dataclass(frozen=True)
class DuplicateReport:
    """How much content a dedupe pass would remove."""

    blocks: int = 0
    checklist_items: int = 0
    quiz_questions: int = 0

    @property
    def total(self) -> int:
        return self.blocks + self.checklist_items + self.quiz_questions


def _tally(blocks: list[Block]) -> DuplicateReport:
    block_count = checklist_items = quiz_questions = 0
    stack = list(blocks)
    while stack:
        block = stack.pop()
        block_count += 1
        if isinstance(block.data, ChecklistBlockData):
            checklist_items += len(block.data.items)
        elif isinstance(block.data, QuizBlockData):
            quiz_questions += len(block.data.questions)
        stack.extend(block.children or [])
    return DuplicateReport(block_count, checklist_items, quiz_questions)


def count_duplicates(
    blocks: list[Block], config: DedupeConfig | None = None
) -> DuplicateReport:
    """Count the blocks and items ``dedupe_blocks`` would remove."""
    before = _tally(blocks)
    after = _tally(dedupe_blocks(blocks, config))
    return DuplicateReport(
        blocks=before.blocks - after.blocks,
        checklist_items=before.checklist_items - after.checklist_items,
        quiz_questions=before.quiz_questions - after.quiz_questions,
    )
