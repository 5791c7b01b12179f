"""Editor state for one guide editing session.

``EditorStore`` owns the block tree, the guide metadata, the current
selection and the unsaved-changes flag. Every structural edit works on a
deep copy of the tree and swaps the copy in when done, so a reference to a
previous ``blocks`` list stays valid and unchanged (handy for undo).

The store is single-writer: it expects to be driven from one event loop
and does no locking of its own.
"""

from collections.abc import Callable
from enum import Enum
from typing import Any

from studyguide_core.config import DedupeConfig
from studyguide_core.editor.converter import blocks_to_content, content_to_blocks
from studyguide_core.editor.dedupe import merge_into
from studyguide_core.editor.dedupe import replace_matching as replace_matching_blocks
from studyguide_core.schemas.blocks import (
    Block,
    BlockType,
    GuideMetadata,
    create_empty_block,
    find_block,
)
from studyguide_core.schemas.sections import GuideContent
from studyguide_core.utils.logging import get_logger

logger = get_logger(__name__)


class MoveDirection(str, Enum):
    """Direction for moving a block among its siblings."""

    UP = "up"
    DOWN = "down"


def _copy_tree(blocks: list[Block]) -> list[Block]:
    return [block.model_copy(deep=True) for block in blocks]


def _apply_to_sibling_list(
    blocks: list[Block],
    block_id: str,
    edit: Callable[[list[Block], int], bool],
) -> bool:
    """Find a block and run ``edit`` on the list that contains it.

    Search is depth-first, parents before children. Returns the result of
    ``edit``, or False when the id is not in the tree.
    """
    for index, block in enumerate(blocks):
        if block.id == block_id:
            return edit(blocks, index)
        if block.children and _apply_to_sibling_list(block.children, block_id, edit):
            return True
    return False


class EditorStore:
    """Authoritative block tree and metadata for an editing session."""

    def __init__(
        self,
        blocks: list[Block] | None = None,
        metadata: GuideMetadata | None = None,
        dedupe_config: DedupeConfig | None = None,
    ) -> None:
        self.blocks: list[Block] = _copy_tree(blocks or [])
        self.metadata: GuideMetadata = metadata or GuideMetadata()
        self.selected_block_id: str | None = None
        self.is_dirty = False
        self.dedupe_config = dedupe_config

    def find_block(self, block_id: str) -> Block | None:
        """Find a block anywhere in the tree."""
        return find_block(self.blocks, block_id)

    def _commit(self, blocks: list[Block]) -> None:
        self.blocks = blocks
        self.is_dirty = True

    # Structural edits

    def add_block(
        self,
        block_type: BlockType | str,
        after_id: str | None = None,
        parent_id: str | None = None,
    ) -> Block | None:
        """Create an empty block and insert it into the tree.

        With ``parent_id`` the block becomes the last child of that section;
        with ``after_id`` it is inserted right after that block, in the same
        list. Without either it is appended at the root. The new block becomes
        the selection.

        Args:
            block_type: Kind of block to create
            after_id: Sibling to insert after
            parent_id: Section to add the block to

        Returns:
            The new block, or None if ``after_id`` or ``parent_id`` does not
            name a suitable block (nothing is inserted then)
        """
        new_block = create_empty_block(block_type)
        blocks = _copy_tree(self.blocks)

        if parent_id:
            parent = find_block(blocks, parent_id)
            if parent is None or parent.type != BlockType.SECTION:
                logger.debug("add_block_parent_missing", parent_id=parent_id)
                return None
            parent.children = [*(parent.children or []), new_block]
        elif after_id:

            def insert_after(siblings: list[Block], index: int) -> bool:
                siblings.insert(index + 1, new_block)
                return True

            if not _apply_to_sibling_list(blocks, after_id, insert_after):
                logger.debug("add_block_sibling_missing", after_id=after_id)
                return None
        else:
            blocks.append(new_block)

        self._commit(blocks)
        self.selected_block_id = new_block.id
        return new_block

    def update_block(self, block_id: str, patch: dict[str, Any]) -> bool:
        """Apply a partial update to a block.

        Args:
            block_id: Block to update
            patch: Fields to replace (``title``, ``data``, ``children``...)

        Returns:
            True if the block was found and updated
        """
        blocks = _copy_tree(self.blocks)

        def update(siblings: list[Block], index: int) -> bool:
            current = siblings[index].model_dump()
            siblings[index] = Block.model_validate({**current, **patch})
            return True

        if not _apply_to_sibling_list(blocks, block_id, update):
            logger.debug("update_block_missing", block_id=block_id)
            return False
        self._commit(blocks)
        return True

    def delete_block(self, block_id: str) -> bool:
        """Remove a block (and its children) from the tree."""
        removed = self.find_block(block_id)
        blocks = _copy_tree(self.blocks)

        def remove(siblings: list[Block], index: int) -> bool:
            del siblings[index]
            return True

        if removed is None or not _apply_to_sibling_list(blocks, block_id, remove):
            logger.debug("delete_block_missing", block_id=block_id)
            return False

        if self.selected_block_id is not None and (
            find_block([removed], self.selected_block_id) is not None
        ):
            self.selected_block_id = None
        self._commit(blocks)
        return True

    def move_block(self, block_id: str, direction: MoveDirection | str) -> bool:
        """Swap a block with its previous or next sibling.

        Moving past either end of the sibling list is a no-op.
        """
        step = -1 if MoveDirection(direction) == MoveDirection.UP else 1
        blocks = _copy_tree(self.blocks)

        def move(siblings: list[Block], index: int) -> bool:
            target = index + step
            if target < 0 or target >= len(siblings):
                return False
            siblings[index], siblings[target] = siblings[target], siblings[index]
            return True

        if not _apply_to_sibling_list(blocks, block_id, move):
            return False
        self._commit(blocks)
        return True

    def reorder_blocks(self, new_order: list[Block]) -> None:
        """Replace the root ordering wholesale (drag and drop)."""
        self._commit(_copy_tree(new_order))

    def select_block(self, block_id: str | None) -> None:
        """Set or clear the selected block."""
        self.selected_block_id = block_id

    def set_metadata(self, **updates: Any) -> None:
        """Update guide metadata fields."""
        current = self.metadata.model_dump()
        self.metadata = GuideMetadata.model_validate({**current, **updates})
        self.is_dirty = True

    # Loading and generation ingestion

    def initialize_blocks(self, blocks: list[Block]) -> None:
        """Load a tree for editing; clears selection and the dirty flag."""
        self.blocks = _copy_tree(blocks)
        self.selected_block_id = None
        self.is_dirty = False

    def append_blocks(
        self,
        new_blocks: list[Block],
        replace_matching: bool = False,
        merge: bool = False,
    ) -> None:
        """Ingest generated blocks.

        Args:
            new_blocks: Blocks converted from generated sections
            replace_matching: Overwrite a same-kind root block instead of
                appending a sibling (regenerating "the quiz" of a guide)
            merge: Fold the blocks in through the merge engine
        """
        if replace_matching:
            blocks = replace_matching_blocks(self.blocks, new_blocks)
        elif merge:
            blocks = merge_into(self.blocks, new_blocks, self.dedupe_config)
        else:
            blocks = [*_copy_tree(self.blocks), *_copy_tree(new_blocks)]
        self._commit(blocks)

    def reset_editor(self) -> None:
        """Clear tree, metadata and selection."""
        self.blocks = []
        self.selected_block_id = None
        self.metadata = GuideMetadata()
        self.is_dirty = False

    def mark_clean(self) -> None:
        """Clear the dirty flag after a successful save."""
        self.is_dirty = False

    # Persistence boundary

    def to_content(self) -> GuideContent:
        """Serialize the tree for the persistence layer."""
        return blocks_to_content(self.blocks, self.metadata)

    def load_content(
        self, content: GuideContent, metadata: GuideMetadata | None = None
    ) -> None:
        """Load a stored guide document for editing."""
        if metadata is not None:
            self.metadata = metadata
        elif content.metadata is not None:
            self.metadata = self.metadata.model_copy(
                update={
                    "estimated_duration": content.metadata.estimated_duration,
                    "difficulty": content.metadata.difficulty,
                    "tags": content.metadata.tags,
                }
            )
        self.initialize_blocks(content_to_blocks(content))


