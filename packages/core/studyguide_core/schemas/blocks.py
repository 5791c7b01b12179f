"""Block tree schemas for the guide editor.

A guide is an ordered list of typed blocks. Only ``section`` blocks carry
children, which is how arbitrarily deep nesting is expressed. Blocks are
owned by the list that contains them: moving a block relocates it, it is
never shared between two parents.
"""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from studyguide_core.utils.ids import (
    generate_block_id,
    generate_checklist_item_id,
    generate_question_id,
)


class WireModel(BaseModel):
    """Base model that reads and writes camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BlockType(str, Enum):
    """Kinds of content block."""

    TEXT = "text"
    SECTION = "section"
    ALERT = "alert"
    TABLE = "table"
    QUIZ = "quiz"
    CHECKLIST = "checklist"
    DEFINITION = "definition"


class AlertVariant(str, Enum):
    """Severity of an alert block."""

    INFO = "info"
    WARNING = "warning"
    SUCCESS = "success"
    EXAM_TIP = "exam-tip"


class HeaderStyle(str, Enum):
    """Header colour of a table block."""

    DEFAULT = "default"
    BLUE = "blue"
    GREEN = "green"
    PURPLE = "purple"


class QuestionType(str, Enum):
    """Kind of quiz question."""

    MULTIPLE_CHOICE = "multiple-choice"
    TRUE_FALSE = "true-false"
    SHORT_ANSWER = "short-answer"
    CALCULATION = "calculation"


class Difficulty(str, Enum):
    """Guide difficulty level."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class TextBlockData(WireModel):
    """Free-form markdown."""

    type: Literal["text"] = "text"
    markdown: str = ""


class SectionBlockData(WireModel):
    """Collapsible container; content lives in the block's children."""

    type: Literal["section"] = "section"
    collapsed: bool = False


class AlertBlockData(WireModel):
    """Call-out message with a severity."""

    type: Literal["alert"] = "alert"
    variant: AlertVariant = AlertVariant.INFO
    title: str | None = None
    message: str = ""


class TableBlockData(WireModel):
    """Header row plus a row matrix."""

    type: Literal["table"] = "table"
    headers: list[str] = Field(default_factory=list)
    rows: list[list[str]] = Field(default_factory=list)
    header_style: HeaderStyle | None = None


class QuizQuestion(WireModel):
    """A single quiz question."""

    id: str = Field(default_factory=generate_question_id)
    question_type: QuestionType = QuestionType.MULTIPLE_CHOICE
    question: str = ""
    options: list[str] | None = None
    correct_answer: str = ""
    explanation: str | None = None

    @field_validator("correct_answer", mode="before")
    @classmethod
    def _stringify_answer(cls, value: object) -> object:
        # true/false questions arrive with a JSON boolean answer
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float)):
            return str(value)
        return value


class QuizBlockData(WireModel):
    """Ordered list of quiz questions."""

    type: Literal["quiz"] = "quiz"
    questions: list[QuizQuestion] = Field(default_factory=list)


class ChecklistItem(WireModel):
    """A single checklist entry."""

    id: str = Field(default_factory=generate_checklist_item_id)
    label: str = ""


class ChecklistBlockData(WireModel):
    """Ordered list of checklist entries."""

    type: Literal["checklist"] = "checklist"
    items: list[ChecklistItem] = Field(default_factory=list)


class DefinitionBlockData(WireModel):
    """A term with its definition and optional examples."""

    type: Literal["definition"] = "definition"
    term: str = ""
    definition: str = ""
    examples: list[str] | None = None
    color_variant: str | None = None


BlockData = Annotated[
    Union[
        TextBlockData,
        SectionBlockData,
        AlertBlockData,
        TableBlockData,
        QuizBlockData,
        ChecklistBlockData,
        DefinitionBlockData,
    ],
    Field(discriminator="type"),
]

PAYLOAD_MODELS: dict[BlockType, type[WireModel]] = {
    BlockType.TEXT: TextBlockData,
    BlockType.SECTION: SectionBlockData,
    BlockType.ALERT: AlertBlockData,
    BlockType.TABLE: TableBlockData,
    BlockType.QUIZ: QuizBlockData,
    BlockType.CHECKLIST: ChecklistBlockData,
    BlockType.DEFINITION: DefinitionBlockData,
}


class Block(WireModel):
    """A typed unit of guide content."""

    id: str = Field(default_factory=generate_block_id)
    type: BlockType
    title: str | None = None
    data: BlockData
    children: list[Block] | None = None

    @model_validator(mode="after")
    def _check_shape(self) -> Block:
        if self.data.type != self.type.value:
            raise ValueError(
                f"payload type '{self.data.type}' does not match block type "
                f"'{self.type.value}'"
            )
        if self.children and self.type != BlockType.SECTION:
            raise ValueError("only section blocks can have children")
        return self


class GuideMetadata(WireModel):
    """Guide-level metadata, edited directly by the user."""

    title: str = ""
    subject: str = "other"
    grade_level: str = "9th-10th"
    estimated_duration: int | None = Field(None, description="Minutes")
    difficulty: Difficulty | None = None
    tags: list[str] | None = None


def create_empty_block(block_type: BlockType | str) -> Block:
    """Create a new block of the given type with its default payload.

    Args:
        block_type: Kind of block to create (unknown kinds become text)

    Returns:
        Fresh block with a new id
    """
    try:
        kind = BlockType(block_type)
    except ValueError:
        kind = BlockType.TEXT

    if kind == BlockType.SECTION:
        return Block(
            type=kind,
            title="New Section",
            data=SectionBlockData(collapsed=False),
            children=[],
        )
    if kind == BlockType.ALERT:
        return Block(type=kind, data=AlertBlockData())
    if kind == BlockType.TABLE:
        return Block(
            type=kind,
            data=TableBlockData(
                headers=["Column 1", "Column 2"],
                rows=[["", ""]],
                header_style=HeaderStyle.DEFAULT,
            ),
        )
    if kind == BlockType.QUIZ:
        return Block(
            type=kind,
            data=QuizBlockData(
                questions=[QuizQuestion(options=["", "", "", ""], explanation="")]
            ),
        )
    if kind == BlockType.CHECKLIST:
        return Block(type=kind, data=ChecklistBlockData(items=[ChecklistItem()]))
    if kind == BlockType.DEFINITION:
        return Block(type=kind, data=DefinitionBlockData(examples=[]))
    return Block(type=BlockType.TEXT, data=TextBlockData())


def iter_blocks(blocks: list[Block]) -> Iterator[Block]:
    """Walk a block tree depth-first, parents before children."""
    for block in blocks:
        yield block
        if block.children:
            yield from iter_blocks(block.children)


def find_block(blocks: list[Block], block_id: str) -> Block | None:
    """Find a block anywhere in the tree by id."""
    for block in iter_blocks(blocks):
        if block.id == block_id:
            return block
    return None


def collect_ids(blocks: list[Block]) -> set[str]:
    """Return every block id in the tree."""
    return {block.id for block in iter_blocks(blocks)}


Block.model_rebuild()
