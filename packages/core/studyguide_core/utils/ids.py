"""Identifier generation for blocks and their items."""

import time
import uuid


def _make_id(prefix: str) -> str:
    return f"{prefix}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}"


def generate_block_id() -> str:
    """Generate a unique block ID."""
    return _make_id("block")


def generate_question_id() -> str:
    """Generate a unique quiz question ID."""
    return _make_id("q")


def generate_checklist_item_id() -> str:
    """Generate a unique checklist item ID."""
    return _make_id("item")
